"""
Deduplicating result writer.

Formats every record, sorts and deduplicates the serialized lines, and writes
the per-domain listing.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..utils.file_manager import FileManager
from .models import NO_URLS_SENTINEL, ArchiveRecord, ParseStats, WriteResult


class ResultWriter:
    """
    Builds the final sorted, duplicate-free listing for a domain.

    By default two lines are duplicates only if they are identical, so one URL
    seen with two different capture dates is listed twice. With
    ``dedup_by_url`` only the newest capture of each URL is kept.
    """

    def __init__(self, files: FileManager, dedup_by_url: bool = False):
        self.files = files
        self.dedup_by_url = dedup_by_url
        self.logger = logging.getLogger(__name__)

    def build_lines(self, records: Iterable[ArchiveRecord]) -> List[str]:
        """
        Serialize, sort and deduplicate records.

        Returns:
            The result lines, or an empty list if there were no records
        """
        if self.dedup_by_url:
            records = self._newest_per_url(records)
        return sorted({record.to_entry().serialize() for record in records})

    def write(self, domain: str, records: Iterable[ArchiveRecord],
              stats: Optional[ParseStats] = None) -> WriteResult:
        """
        Write the listing for a domain, overwriting any previous one.

        Args:
            domain: Target domain, used to name the file
            records: Every parsed record; fully consumed before writing
            stats: Parser counters; read only after ``records`` is exhausted

        Returns:
            WriteResult describing the file written
        """
        self.logger.info("Processing URLs...")
        counter = _CountingIterable(records)
        lines = self.build_lines(counter)
        skipped = stats.skipped if stats is not None else 0
        return self._persist(domain, lines, counter.count, skipped)

    def _persist(self, domain: str, lines: List[str], total: int, skipped: int) -> WriteResult:
        output_file = self.files.result_path(domain)

        if lines:
            self.files.write_lines(output_file, lines)
            self.logger.info(f"Successfully extracted {len(lines)} unique URLs")
            self.logger.info(f"Results saved to: {output_file}")
        else:
            self.logger.warning(f"No archived URLs found for {domain}")
            self.files.write_lines(output_file, [NO_URLS_SENTINEL])

        return WriteResult(path=output_file, total_records=total,
                           unique_lines=len(lines), skipped_records=skipped)

    def _newest_per_url(self, records: Iterable[ArchiveRecord]) -> List[ArchiveRecord]:
        newest: Dict[str, ArchiveRecord] = {}
        for record in records:
            current = newest.get(record.url)
            if current is None or record.raw_timestamp > current.raw_timestamp:
                newest[record.url] = record
        return list(newest.values())


class _CountingIterable:
    """Pass-through iterable that counts the items it yields."""

    def __init__(self, items: Iterable):
        self.items = items
        self.count = 0

    def __iter__(self):
        for item in self.items:
            self.count += 1
            yield item
