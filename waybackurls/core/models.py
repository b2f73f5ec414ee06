"""
Data types passed between the pipeline stages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

from .timestamps import TimestampLayout, format_timestamp

NO_URLS_SENTINEL = "No URLs found"
ENTRY_SEPARATOR = " # archived on "


class ResponseFormat(Enum):
    STRUCTURED = "structured"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ArchiveRecord:
    url: str
    raw_timestamp: str
    layout: TimestampLayout = TimestampLayout.CAPTURE

    def to_entry(self) -> OutputEntry:
        return OutputEntry(url=self.url, formatted_date=format_timestamp(self.raw_timestamp, self.layout))


@dataclass(frozen=True)
class OutputEntry:
    url: str
    formatted_date: str

    def serialize(self) -> str:
        return f"{self.url}{ENTRY_SEPARATOR}{self.formatted_date}"

    @classmethod
    def parse(cls, line: str) -> OutputEntry:
        """Split a result-file line back into url and date."""
        url, sep, formatted_date = line.rstrip("\r\n").rpartition(ENTRY_SEPARATOR)
        if not sep:
            return cls(url=line.rstrip("\r\n"), formatted_date="")
        return cls(url=url, formatted_date=formatted_date)


@dataclass
class StructuredResponse:
    """Decoded JSON listing with the header row(s) already removed."""

    rows: List[Any]
    format: ResponseFormat = field(default=ResponseFormat.STRUCTURED, init=False)


@dataclass
class FallbackResponse:
    """
    Delimited (CSV) listing without its header row.

    Either ``path`` points at the spooled side file, or ``lines`` yields the
    body line by line straight from the connection.
    """

    path: Optional[str] = None
    lines: Optional[Iterable[str]] = None
    format: ResponseFormat = field(default=ResponseFormat.FALLBACK, init=False)


@dataclass
class ParseStats:
    records: int = 0
    skipped: int = 0


@dataclass
class WriteResult:
    path: str
    total_records: int
    unique_lines: int
    skipped_records: int = 0


@dataclass
class AnalysisReport:
    available: bool
    distinct_hosts: int = 0
    top_extensions: List[Tuple[str, int]] = field(default_factory=list)
    skipped_records: int = 0
