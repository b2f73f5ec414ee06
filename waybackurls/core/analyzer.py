"""
Result analysis: distinct hosts and the most common file extensions in a
written listing.
"""

import logging
import re
from collections import Counter
from typing import Iterable, Optional
from urllib.parse import urlsplit

from ..utils.file_manager import FileManager
from .models import NO_URLS_SENTINEL, AnalysisReport, OutputEntry

logger = logging.getLogger(__name__)

HOST_PREFIX_RE = re.compile(r'https?://[^/?#\s]+', re.IGNORECASE)
TOP_EXTENSIONS = 5


def host_prefix(url: str) -> Optional[str]:
    """Return the leading scheme://host of a URL, or None."""
    match = HOST_PREFIX_RE.match(url)
    return match.group(0) if match else None


def path_extension(url: str) -> Optional[str]:
    """
    Return the text after the final '.' of the last path segment.

    ``https://example.com/docs/report.pdf`` gives ``pdf``; a last segment
    without a dot (including a bare host) gives None.
    """
    try:
        path = urlsplit(url).path
    except ValueError:
        return None
    segment = path.rsplit('/', 1)[-1]
    if '.' not in segment:
        return None
    ext = segment.rsplit('.', 1)[1]
    return ext or None


def summarize(urls: Iterable[str], skipped_records: int = 0) -> AnalysisReport:
    """Compute host and extension statistics over a list of URLs."""
    hosts = set()
    extensions: Counter = Counter()
    for url in urls:
        prefix = host_prefix(url)
        if prefix:
            hosts.add(prefix)
        ext = path_extension(url)
        if ext:
            extensions[ext] += 1

    return AnalysisReport(
        available=True,
        distinct_hosts=len(hosts),
        top_extensions=extensions.most_common(TOP_EXTENSIONS),
        skipped_records=skipped_records,
    )


def analyze_results(result_path: str,
                    skipped_records: int = 0,
                    files: Optional[FileManager] = None) -> AnalysisReport:
    """
    Analyze a written result file without modifying it.

    Args:
        result_path: Path of the ``*_wayback_urls.txt`` listing
        skipped_records: Malformed rows dropped by the parser
        files: FileManager used to read the file

    Returns:
        AnalysisReport; ``available`` is False when the file is missing,
        empty, or only holds the no-results marker
    """
    files = files or FileManager()
    lines = files.read_lines(result_path)
    entries = [line for line in (lines or []) if line.strip()]

    if not entries or entries == [NO_URLS_SENTINEL]:
        logger.warning("No analysis available - no URLs found")
        return AnalysisReport(available=False, skipped_records=skipped_records)

    logger.info("Analyzing results...")
    report = summarize((OutputEntry.parse(line).url for line in entries), skipped_records)

    logger.info(f"Unique domains/subdomains found: {report.distinct_hosts}")
    if report.top_extensions:
        logger.info("Common file extensions found:")
        for ext, count in report.top_extensions:
            logger.info(f"    .{ext}: {count} files")
    if skipped_records:
        logger.info(f"Malformed records skipped: {skipped_records}")
    return report
