"""
CDX API Client for Internet Archive Wayback Machine

This module handles communication with the Internet Archive's CDX Server API
to list every URL captured under a domain.
"""

import os
import requests
from typing import Dict, List, Optional, Union
import logging

from .errors import FatalNetworkError, UpstreamFormatError
from .models import FallbackResponse, StructuredResponse

HEADER_ROW = ["original", "timestamp"]


class CDXClient:
    """
    Client for interacting with the Internet Archive CDX Server API.

    One bulk query is issued per domain. The JSON listing is preferred; if the
    server answers with something that isn't valid JSON, the same query is
    repeated asking for the delimited text listing.
    """

    CDX_BASE_URL = "https://web.archive.org/cdx/search/cdx"
    USER_AGENT = "waybackurls/1.0 (Wayback Machine URL Extractor)"

    def __init__(self,
                 base_url: str = None,
                 user_agent: str = None,
                 timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize the CDX client.

        Args:
            base_url: CDX endpoint (defaults to the public Wayback endpoint)
            user_agent: User-Agent header sent with every request
            timeout: Request timeout in seconds; None waits indefinitely
            session: Pre-built requests session (mainly for tests)
        """
        self.base_url = base_url or self.CDX_BASE_URL
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': user_agent or self.USER_AGENT
        })

    def build_params(self, domain: str, output: str) -> Dict[str, str]:
        """
        Build the CDX query parameters for a domain.

        Args:
            domain: Bare domain, scheme already stripped
            output: 'json' or 'csv'
        """
        return {
            'url': domain,
            'output': output,
            'fl': 'original,timestamp',
            'collapse': 'urlkey',
            'matchType': 'prefix',
        }

    def query_domain(self, domain: str, spool_path: Optional[str] = None) -> Union[StructuredResponse, FallbackResponse]:
        """
        Query the CDX index for every URL recorded under a domain.

        Args:
            domain: Bare domain, scheme already stripped and validated
            spool_path: Where to write the delimited body if the fallback
                format is needed. None keeps it as a streamed line iterator.

        Returns:
            StructuredResponse when the JSON listing parses, otherwise a
            FallbackResponse

        Raises:
            FatalNetworkError: If a request fails or returns an HTTP error
        """
        self.logger.info(f"Querying Wayback Machine for domain: {domain}")
        self.logger.info("This may take some time depending on the number of archived URLs...")

        response = self._make_request(self.build_params(domain, 'json'))
        try:
            rows = self._parse_json_listing(response)
        except UpstreamFormatError as e:
            self.logger.warning(f"Invalid JSON response from Wayback Machine API: {e}")
            self.logger.warning("Falling back to text format...")
            return self._query_fallback(domain, spool_path)

        self.logger.debug(f"Structured listing with {len(rows)} rows")
        return StructuredResponse(rows=rows)

    def _query_fallback(self, domain: str, spool_path: Optional[str]) -> FallbackResponse:
        response = self._make_request(self.build_params(domain, 'csv'), stream=True)

        if spool_path is None:
            lines = response.iter_lines(decode_unicode=True)
            # Drop the header row
            next(lines, None)
            return FallbackResponse(lines=lines)

        try:
            self._spool_body(response, spool_path)
        except requests.RequestException as e:
            self._discard_spool(spool_path)
            self.logger.error(f"CDX API request failed while reading body: {e}")
            raise FatalNetworkError(f"CDX API request failed: {e}", url=self.base_url) from e
        except OSError:
            self._discard_spool(spool_path)
            raise
        finally:
            response.close()
        return FallbackResponse(path=spool_path)

    def _spool_body(self, response: requests.Response, spool_path: str):
        """Write the delimited body to the side file, without its header row."""
        skipped_header = False
        count = 0
        with open(spool_path, 'w', encoding='utf-8', newline='') as f:
            for line in response.iter_lines(decode_unicode=True):
                if isinstance(line, bytes):
                    line = line.decode('utf-8', errors='replace')
                if not skipped_header:
                    skipped_header = True
                    continue
                f.write(line + '\n')
                count += 1
        self.logger.debug(f"Spooled {count} delimited rows to {spool_path}")

    def _discard_spool(self, spool_path: str):
        """Remove a partially written side file."""
        try:
            os.remove(spool_path)
        except FileNotFoundError:
            return
        self.logger.debug(f"Removed partial side file: {spool_path}")

    def _make_request(self, params: Dict, stream: bool = False) -> requests.Response:
        """
        Make a request to the CDX API.

        Args:
            params: Query parameters for the CDX API
            stream: Leave the body unread so it can be consumed line by line

        Returns:
            Response object from the API

        Raises:
            FatalNetworkError: If the request fails
        """
        self.logger.debug(f"Making CDX API request with params: {params}")

        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout, stream=stream)
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.error(f"CDX API request failed: {e}")
            raise FatalNetworkError(f"CDX API request failed: {e}", url=self.base_url) from e

        return response

    def _parse_json_listing(self, response: requests.Response) -> List:
        """
        Decode the JSON listing and drop header rows.

        Raises:
            UpstreamFormatError: If the body isn't a JSON array
        """
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamFormatError(str(e) or "body is not JSON") from e

        if not isinstance(data, list):
            raise UpstreamFormatError(f"expected a JSON array, got {type(data).__name__}")

        return [row for row in data if row != HEADER_ROW]

    def close(self):
        """Close the HTTP session."""
        self.session.close()
