import logging
from typing import Any, Dict, Tuple

import requests

from lantern.core.errors import FetchFailure

DEFAULT_QUOTE_URL = "https://zelapioffciall.koyeb.app/random/kataislami"
DEFAULT_EXCERPT_URL = "https://zelapioffciall.koyeb.app/random/motivasiislam"
DEFAULT_TIMEOUT = 10


class MotivationBackend:
    """Random Islamic quote and motivation excerpt from the zelapi endpoints"""

    def __init__(self, config: Dict[str, Any]):
        self.quote_url = config.get('quote_url', DEFAULT_QUOTE_URL)
        self.excerpt_url = config.get('excerpt_url', DEFAULT_EXCERPT_URL)
        self.timeout = config.get('timeout', DEFAULT_TIMEOUT)
        self.logger = logging.getLogger(self.__class__.__name__)

    def fetch_raw(self, url: str) -> Any:
        """GET url and return the decoded JSON body. Raises FetchFailure."""
        self.logger.info(f"Fetching {url}")
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise FetchFailure(f"Request to {url} failed: {e}") from e

    def fetch_quote(self) -> str:
        result = self._result(self.fetch_raw(self.quote_url))
        # result is either the quote itself or {"message": ...}
        if isinstance(result, dict):
            result = result.get('message')
        if not isinstance(result, str) or not result.strip():
            raise FetchFailure("Quote payload has no message")
        return result.strip()

    def fetch_excerpt(self) -> Tuple[str, str]:
        """Returns (original text, translation)."""
        result = self._result(self.fetch_raw(self.excerpt_url))
        if not isinstance(result, dict):
            raise FetchFailure("Excerpt payload is not an object")
        original = result.get('arab') or ''
        translation = result.get('arti') or ''
        if not original and not translation:
            raise FetchFailure("Excerpt payload is empty")
        return original, translation

    @staticmethod
    def _result(payload: Any) -> Any:
        if not isinstance(payload, dict) or 'result' not in payload:
            raise FetchFailure("Payload has no result field")
        return payload['result']
