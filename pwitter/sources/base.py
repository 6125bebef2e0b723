"""Error taxonomy and collaborator interfaces for the GraphQL client."""

from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional, Tuple


class PwitterError(Exception):
    """Base exception for all client and decoding errors."""

    pass


class MalformedInput(PwitterError, ValueError):
    """Bytes don't match the expected JSON shape."""

    pass


class UnknownType(PwitterError):
    """Type tag has no handler in the registry.

    Expected for new or unsupported server-side types; callers skip the
    single object that carries it.
    """

    def __init__(self, type_name: str):
        super().__init__(f"handler for type {type_name!r} is not implemented")
        self.type_name = type_name


class MissingData(PwitterError):
    """A well-formed response lacks an expected sub-object."""

    pass


class Throttled(PwitterError):
    """Server answered with HTTP 429."""

    pass


class RequestFailed(PwitterError):
    """Transport failure or a non-200, non-429 response."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: bytes = b"",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.body = body


class ReferenceUnresolved(PwitterError):
    """A backfill fetch for a referenced tweet failed."""

    def __init__(self, tweet_id: str, cause: Exception):
        super().__init__(f"failed to fetch referenced tweet {tweet_id!r}: {cause}")
        self.tweet_id = tweet_id
        self.cause = cause


class Authorizer(ABC):
    """Attaches session credentials to outgoing requests."""

    @abstractmethod
    def set_auth_headers(self, headers: Dict[str, str]) -> None:
        """Add cookie and header values to a request's headers.

        Args:
            headers: Mutable header mapping of the outgoing request
        """
        pass


class Transport(ABC):
    """Performs a single GET request."""

    @abstractmethod
    def fetch(self, url: str, headers: Mapping[str, str]) -> Tuple[int, Dict[str, str], bytes]:
        """Fetch a URL.

        Args:
            url: Fully built request URL
            headers: Request headers, auth included

        Returns:
            Tuple of (status code, response headers, body bytes)

        Raises:
            RequestFailed: If the request could not be completed; socket and
                timeout errors should be wrapped in it too
        """
        pass


def check_response(
    operation: str, status_code: int, headers: Mapping[str, str], body: bytes
) -> None:
    """Map an HTTP status to the error taxonomy.

    Args:
        operation: GraphQL operation name, used in error messages
        status_code: HTTP status code
        headers: Response headers
        body: Response body

    Raises:
        Throttled: On HTTP 429
        RequestFailed: On any other non-200 status
    """
    if status_code == 200:
        return
    if status_code == 429:
        raise Throttled(f"{operation}: request throttled (HTTP 429)")

    header_lines = "\n".join(f"{k}: {v}" for k, v in headers.items())
    text = body.decode("utf-8", errors="replace")
    raise RequestFailed(
        f"{operation}: got error response: {status_code}\n{header_lines}\n\n{text}",
        status_code=status_code,
        headers=headers,
        body=body,
    )
