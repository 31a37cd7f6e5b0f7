"""Document Fetcher - plain GET of raw document text for the fallback pipeline."""

import asyncio
import logging
from typing import Optional

import requests

from book_reader.core import FetchError

logger = logging.getLogger(__name__)


class DocumentFetcher:
    """Fetches documents over HTTP without blocking the event loop."""

    def __init__(self, timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self._session = session or requests.Session()

    async def fetch_text(self, url: str) -> str:
        """
        Fetch ``url`` and return the decoded body.

        Raises:
            FetchError: On a non-success status or any network failure.
        """
        if not url:
            raise FetchError("Book URL is required", url=url)
        return await asyncio.to_thread(self._get, url)

    def _get(self, url: str) -> str:
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch text file: {e}", url=url) from e

        logger.debug("GET %s -> %s %s", url, response.status_code, response.reason)
        if not response.ok:
            raise FetchError(
                f"Failed to fetch text file: {response.status_code} {response.reason}",
                url=url,
                status_code=response.status_code,
            )
        return response.text

    def close(self) -> None:
        self._session.close()
