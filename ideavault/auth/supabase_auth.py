"""
Auth provider clients for IdeaVault.

SupabaseAuth talks to the GoTrue endpoints of a Supabase project. The
application only needs three things from it: sign in with email and
password, sign up, and sign out. The resulting AuthSession is kept in the
Flask session cookie and its user_id scopes every idea operation.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from ideavault.config import REQUEST_TIMEOUT, SUPABASE_ANON_KEY, SUPABASE_URL
from ideavault.errors import AuthError, StoreUnavailable

logger = logging.getLogger(__name__)


@dataclass
class AuthSession:
    """
    An authenticated user session.

    Attributes:
        user_id: Opaque user identifier, the owner of idea rows.
        email: Email the user signed in with.
        access_token: JWT sent to the data and storage APIs.
        refresh_token: Token for renewing the session (unused by the web app).
    """
    user_id: str
    email: str
    access_token: str = ""
    refresh_token: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["AuthSession"]:
        """Restore a session saved with to_dict(); None if absent or incomplete."""
        if not data or not data.get("user_id"):
            return None
        return cls(
            user_id=str(data["user_id"]),
            email=str(data.get("email", "")),
            access_token=str(data.get("access_token", "")),
            refresh_token=str(data.get("refresh_token", "")),
        )


def _check_credentials(email: str, password: str) -> None:
    if not email or not email.strip():
        raise AuthError("Email is required")
    if not password:
        raise AuthError("Password is required")


class SupabaseAuth:
    """Client for the Supabase auth (GoTrue) REST API."""

    def __init__(self, url: str = None, api_key: str = None):
        self.url = (url if url is not None else SUPABASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else SUPABASE_ANON_KEY

    @property
    def name(self) -> str:
        return "supabase"

    def _post(self, path: str, payload: Dict[str, Any] = None,
              params: Dict[str, str] = None, token: str = None) -> requests.Response:
        headers = {
            "apikey": self.api_key,
            "Content-Type": "application/json",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            return requests.post(
                f"{self.url}/auth/v1/{path}",
                headers=headers,
                params=params,
                json=payload or {},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise StoreUnavailable(f"Auth service unreachable: {e}") from e

    @staticmethod
    def _body(response: requests.Response) -> Dict[str, Any]:
        """Decode a successful JSON object body."""
        try:
            body = response.json()
        except ValueError as e:
            raise StoreUnavailable("Auth service returned invalid JSON") from e
        if not isinstance(body, dict):
            raise StoreUnavailable("Auth service returned an unexpected response")
        return body

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200] or "Authentication failed"
        if not isinstance(body, dict):
            return "Authentication failed"
        return (
            body.get("error_description")
            or body.get("msg")
            or body.get("message")
            or body.get("error")
            or "Authentication failed"
        )

    def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Sign in with email and password.

        Raises:
            AuthError: If the credentials are rejected.
            StoreUnavailable: If the auth service cannot be reached.
        """
        _check_credentials(email, password)

        response = self._post(
            "token",
            payload={"email": email.strip(), "password": password},
            params={"grant_type": "password"},
        )

        if response.status_code >= 500:
            raise StoreUnavailable(f"Auth service error {response.status_code}")
        if response.status_code >= 400:
            raise AuthError(self._error_message(response))

        body = self._body(response)
        user = body.get("user")
        if not isinstance(user, dict) or not user.get("id"):
            raise AuthError("Auth service returned no user")

        logger.info("User %s signed in", user["id"])
        return AuthSession(
            user_id=user["id"],
            email=user.get("email", email.strip()),
            access_token=body.get("access_token", ""),
            refresh_token=body.get("refresh_token", ""),
        )

    def sign_up(self, email: str, password: str, redirect_to: str = None) -> bool:
        """
        Register a new account.

        Args:
            redirect_to: Where the confirmation email should send the user.

        Returns:
            True if the user must confirm their email before signing in.
        """
        _check_credentials(email, password)

        params = {"redirect_to": redirect_to} if redirect_to else None
        response = self._post(
            "signup",
            payload={"email": email.strip(), "password": password},
            params=params,
        )

        if response.status_code >= 500:
            raise StoreUnavailable(f"Auth service error {response.status_code}")
        if response.status_code >= 400:
            raise AuthError(self._error_message(response))

        body = self._body(response)
        # A session comes back only when confirmation is disabled
        return not body.get("access_token")

    def sign_out(self, access_token: str) -> None:
        """Revoke the session's token. Failures are logged, not raised."""
        if not access_token:
            return
        try:
            response = self._post("logout", token=access_token)
        except StoreUnavailable as e:
            logger.warning("Sign-out request failed: %s", e)
            return
        if response.status_code >= 400:
            logger.warning("Sign-out rejected (%s)", response.status_code)


class MockAuth:
    """
    Development auth: any email/password pair signs in.

    The user id is derived from the email, so the same email always maps to
    the same owner.
    """

    @property
    def name(self) -> str:
        return "mock"

    def sign_in(self, email: str, password: str) -> AuthSession:
        _check_credentials(email, password)
        email = email.strip().lower()
        return AuthSession(
            user_id=str(uuid.uuid5(uuid.NAMESPACE_URL, f"ideavault:{email}")),
            email=email,
            access_token="",
        )

    def sign_up(self, email: str, password: str, redirect_to: str = None) -> bool:
        _check_credentials(email, password)
        return False

    def sign_out(self, access_token: str) -> None:
        return None
