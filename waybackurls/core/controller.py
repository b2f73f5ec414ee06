"""
Pipeline controller: query → parse → dedup/write → analyze for one domain.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, Optional, Tuple

from .analyzer import analyze_results
from .cdx_client import CDXClient
from .models import AnalysisReport, ParseStats, ResponseFormat, WriteResult
from .response_parser import parse_response
from .result_writer import ResultWriter
from ..utils.file_manager import FileManager


@dataclass
class RunConfig:
    output_dir: str = "."
    cdx_url: str = CDXClient.CDX_BASE_URL
    user_agent: str = CDXClient.USER_AGENT
    timeout: Optional[float] = None  # None = wait indefinitely
    spool_fallback: bool = True
    dedup_by_url: bool = False
    unify_timestamp_offsets: bool = False

    @classmethod
    def from_settings(cls, settings: Dict[str, Any],
                      warn: Optional[Callable[[str], object]] = None) -> RunConfig:
        """
        Build a config from a settings mapping.

        Unknown keys and values of the wrong type are reported through
        ``warn`` and left at their defaults.
        """
        warn = warn or logging.getLogger(__name__).warning
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in settings.items():
            if key in ('log_dir', 'log_level'):
                continue
            if key not in known:
                warn(f"Ignoring unknown setting: {key}")
                continue
            if not _setting_type_ok(key, value):
                expected = ' or '.join(t.__name__ for t in SETTING_TYPES[key])
                warn(f"Ignoring setting {key}={value!r}: expected {expected}")
                continue
            values[key] = value
        return cls(**values)


# Accepted JSON value types per RunConfig field
SETTING_TYPES: Dict[str, Tuple[type, ...]] = {
    'output_dir': (str,),
    'cdx_url': (str,),
    'user_agent': (str,),
    'timeout': (int, float, type(None)),
    'spool_fallback': (bool,),
    'dedup_by_url': (bool,),
    'unify_timestamp_offsets': (bool,),
}


def _setting_type_ok(key: str, value: Any) -> bool:
    expected = SETTING_TYPES[key]
    # JSON true/false must not pass as a number
    if isinstance(value, bool) and bool not in expected:
        return False
    if not isinstance(value, expected):
        return False
    if key == 'timeout' and value is not None and value <= 0:
        return False
    if key in ('output_dir', 'cdx_url') and not value:
        return False
    return True


@dataclass
class RunResult:
    domain: str
    write: WriteResult
    analysis: AnalysisReport


class WaybackController:
    def __init__(self, config: Optional[RunConfig] = None,
                 logger: Optional[logging.Logger] = None,
                 client: Optional[CDXClient] = None):
        self.config = config or RunConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.cdx = client or CDXClient(base_url=self.config.cdx_url,
                                       user_agent=self.config.user_agent,
                                       timeout=self.config.timeout)
        self.files = FileManager(self.config.output_dir)
        self.writer = ResultWriter(self.files, dedup_by_url=self.config.dedup_by_url)

    def run(self, domain: str) -> RunResult:
        """
        Run the whole pipeline for an already validated, scheme-less domain.

        Raises:
            FatalNetworkError: If the CDX query fails
        """
        spool_path = self.files.raw_path(domain) if self.config.spool_fallback else None
        if spool_path and self.files.remove(spool_path):
            self.logger.debug(f"Removed stale side file: {spool_path}")

        response = self.cdx.query_domain(domain, spool_path=spool_path)
        self.logger.debug(f"Response format: {response.format.value}")

        stats = ParseStats()
        records = parse_response(response, stats,
                                 unify_timestamp_offsets=self.config.unify_timestamp_offsets)
        if response.format is ResponseFormat.FALLBACK:
            self.logger.info("Processing URLs from raw format...")
        written = self.writer.write(domain, records, stats)
        self.logger.info(f"Parsed {stats.records} records ({stats.skipped} malformed rows skipped)")

        analysis = analyze_results(written.path, skipped_records=written.skipped_records, files=self.files)
        return RunResult(domain=domain, write=written, analysis=analysis)

    def close(self):
        self.cdx.close()
