"""Guest session credentials."""

import secrets
from typing import Dict

from ..config import AuthConfig
from .base import Authorizer


class GuestTokenAuthorizer(Authorizer):
    """Authorizes requests with an anonymous guest session.

    Tokens are obtained elsewhere and passed in as-is.
    """

    def __init__(self, bearer_token: str, guest_id: str, guest_token: str, csrf_token: str = ""):
        """Initialize authorizer.

        Args:
            bearer_token: Web client bearer token
            guest_id: Value of the ``guest_id`` cookie
            guest_token: Value of the ``gt`` cookie
            csrf_token: CSRF token; a random one is generated if empty
        """
        if not bearer_token or not guest_id or not guest_token:
            raise ValueError("bearer_token, guest_id and guest_token are required")
        self.bearer_token = bearer_token
        self.guest_id = guest_id
        self.guest_token = guest_token
        self.csrf_token = csrf_token or secrets.token_hex(16)

    @classmethod
    def from_config(cls, config: AuthConfig) -> "GuestTokenAuthorizer":
        return cls(
            bearer_token=config.bearer_token,
            guest_id=config.guest_id,
            guest_token=config.guest_token,
            csrf_token=config.csrf_token,
        )

    def set_auth_headers(self, headers: Dict[str, str]) -> None:
        cookies = {
            "guest_id": self.guest_id,
            "gt": self.guest_token,
            "ct0": self.csrf_token,
            "dnt": "1",
        }
        headers["Cookie"] = "; ".join(f"{name}={value}" for name, value in cookies.items())
        headers["authorization"] = f"Bearer {self.bearer_token}"
        headers["x-csrf-token"] = self.csrf_token
        headers["x-guest-token"] = self.guest_token
        headers["DNT"] = "1"
