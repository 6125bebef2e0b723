"""HTTP transport backed by requests."""

import logging
from typing import Dict, Mapping, Optional, Tuple

import requests

from .base import RequestFailed, Transport

logger = logging.getLogger(__name__)


class RequestsTransport(Transport):
    """Transport using a shared ``requests.Session``."""

    def __init__(self, timeout: float = 30, session: Optional[requests.Session] = None):
        """Initialize transport.

        Args:
            timeout: Per-request timeout in seconds
            session: Optional session for connection reuse or testing
        """
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, url: str, headers: Mapping[str, str]) -> Tuple[int, Dict[str, str], bytes]:
        try:
            response = self.session.get(url, headers=dict(headers), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"GraphQL request failed: {e}")
            raise RequestFailed(f"sending HTTP request: {e}") from e
        return response.status_code, dict(response.headers), response.content

    def close(self) -> None:
        self.session.close()
