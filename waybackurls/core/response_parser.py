"""
CDX Response Parser

Turns either kind of CDX response into a lazy stream of ArchiveRecord. The
response format is checked once here; each branch then yields records the
same way.
"""

import json
import logging
import os
from typing import Any, Iterable, Iterator, Optional, Union

from .models import ArchiveRecord, FallbackResponse, ParseStats, StructuredResponse
from .timestamps import TimestampLayout

logger = logging.getLogger(__name__)

CdxResponse = Union[StructuredResponse, FallbackResponse]


def parse_response(response: CdxResponse,
                   stats: Optional[ParseStats] = None,
                   unify_timestamp_offsets: bool = False) -> Iterator[ArchiveRecord]:
    """
    Produce ArchiveRecords from a CDX response.

    Args:
        response: StructuredResponse or FallbackResponse from the CDX client
        stats: Optional counters, updated while the iterator is consumed
        unify_timestamp_offsets: Read fallback timestamps with the same
            offsets as structured ones

    Returns:
        A single-use iterator of records
    """
    stats = stats if stats is not None else ParseStats()

    if isinstance(response, StructuredResponse):
        return _parse_structured(response.rows, stats)
    if isinstance(response, FallbackResponse):
        layout = TimestampLayout.CAPTURE if unify_timestamp_offsets else TimestampLayout.LEGACY_FALLBACK
        return _parse_fallback(response, stats, layout)
    raise TypeError(f"Unsupported response type: {type(response).__name__}")


def _parse_structured(rows: Iterable[Any], stats: ParseStats) -> Iterator[ArchiveRecord]:
    for row in rows:
        if isinstance(row, str):
            line = row.strip()
            if not line:
                continue
            try:
                decoded = json.loads(line)
            except ValueError:
                decoded = None
            if not isinstance(decoded, list):
                if ',' in line:
                    # Plain comma-delimited row mixed into a JSON listing
                    url, _, rest = line.partition(',')
                    timestamp = rest.split(',', 1)[0]
                    record = _make_record(url, timestamp, TimestampLayout.CAPTURE)
                    if record is None:
                        stats.skipped += 1
                        logger.debug(f"Skipping row without URL: {line!r}")
                        continue
                    stats.records += 1
                    yield record
                else:
                    stats.skipped += 1
                    logger.debug(f"Skipping unparsable row: {line!r}")
                continue
            row = decoded

        if not isinstance(row, (list, tuple)) or not row:
            stats.skipped += 1
            logger.debug(f"Skipping malformed row: {row!r}")
            continue

        url = row[0]
        if url is None or url == 'null':
            stats.skipped += 1
            logger.debug(f"Skipping row with null URL: {row!r}")
            continue

        timestamp = row[1] if len(row) > 1 and row[1] is not None else ''
        record = _make_record(str(url), str(timestamp), TimestampLayout.CAPTURE, strip_quotes=False)
        if record is None:
            stats.skipped += 1
            logger.debug(f"Skipping row with empty URL: {row!r}")
            continue
        stats.records += 1
        yield record


def _parse_fallback(response: FallbackResponse,
                    stats: ParseStats,
                    layout: TimestampLayout) -> Iterator[ArchiveRecord]:
    if response.path is not None:
        try:
            with open(response.path, 'r', encoding='utf-8', errors='replace', newline='') as f:
                yield from _parse_delimited_lines(f, stats, layout)
        finally:
            _remove_side_file(response.path)
    elif response.lines is not None:
        yield from _parse_delimited_lines(response.lines, stats, layout)


def _parse_delimited_lines(lines: Iterable[Union[str, bytes]],
                           stats: ParseStats,
                           layout: TimestampLayout) -> Iterator[ArchiveRecord]:
    # Iterating a file also yields a last line with no trailing newline
    for line in lines:
        if isinstance(line, bytes):
            line = line.decode('utf-8', errors='replace')
        line = line.rstrip('\r\n')
        if not line.strip():
            continue

        url, _, timestamp = line.partition(',')
        record = _make_record(url, timestamp, layout)
        if record is None:
            stats.skipped += 1
            logger.debug(f"Skipping delimited row without URL: {line!r}")
            continue
        stats.records += 1
        yield record


def _make_record(url: str, timestamp: str, layout: TimestampLayout,
                 strip_quotes: bool = True) -> Optional[ArchiveRecord]:
    if strip_quotes:
        url = _strip_quotes(url)
        timestamp = _strip_quotes(timestamp)
    if not url:
        return None
    return ArchiveRecord(url=url, raw_timestamp=timestamp, layout=layout)


def _strip_quotes(value: str) -> str:
    """Remove one leading and one trailing double quote, if present."""
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def _remove_side_file(path: str):
    try:
        os.remove(path)
        logger.debug(f"Removed side file: {path}")
    except FileNotFoundError:
        pass
