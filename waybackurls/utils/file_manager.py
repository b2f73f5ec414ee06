"""
File Management Utilities

This module names and writes the per-domain output files: the final URL
listing and the temporary side file used by the delimited fallback.
"""

import os
from pathlib import Path
from typing import Iterable, List, Optional
import logging


class FileManager:
    """
    Manages file naming and I/O for extraction results.

    Every file is named after the target domain so repeated runs for the same
    domain overwrite the previous result.
    """

    RESULT_SUFFIX = "_wayback_urls.txt"
    RAW_SUFFIX = "_raw_urls.txt"

    def __init__(self, base_output_dir: str = "."):
        """
        Initialize the file manager.

        Args:
            base_output_dir: Directory for result and side files
        """
        self.base_output_dir = Path(base_output_dir)
        self.logger = logging.getLogger(__name__)
        self.base_output_dir.mkdir(parents=True, exist_ok=True)

    def result_path(self, domain: str) -> str:
        """Path of the final listing for a domain."""
        return str(self.base_output_dir / f"{domain}{self.RESULT_SUFFIX}")

    def raw_path(self, domain: str) -> str:
        """Path of the temporary delimited side file for a domain."""
        return str(self.base_output_dir / f"{domain}{self.RAW_SUFFIX}")

    def write_lines(self, path: str, lines: Iterable[str]) -> int:
        """
        Write lines to a file, replacing any existing content.

        Args:
            path: Target file
            lines: Lines without terminators

        Returns:
            Number of lines written
        """
        count = 0
        # newline='' keeps '\n' terminators on every platform
        with open(path, 'w', encoding='utf-8', newline='') as f:
            for line in lines:
                f.write(line + '\n')
                count += 1

        file_size = os.path.getsize(path)
        self.logger.debug(f"Wrote {count} lines ({file_size} bytes): {os.path.basename(path)}")
        return count

    def read_lines(self, path: str) -> Optional[List[str]]:
        """
        Read a result file.

        Returns:
            Lines without terminators, or None if the file doesn't exist
        """
        if not os.path.exists(path):
            return None
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            return [line.rstrip('\r\n') for line in f]

    def remove(self, path: str) -> bool:
        """Delete a file if present. Returns True if something was removed."""
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        self.logger.debug(f"Removed file: {path}")
        return True
