"""Spotify accounts service: authorize URL, PKCE helpers and token grants."""

from __future__ import annotations

import base64
import hashlib
import logging
import secrets
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import requests

from src.core.errors import ConfigurationError, UpstreamServiceError

logger = logging.getLogger(__name__)

SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def make_code_verifier() -> str:
    return _b64url(secrets.token_bytes(64))


def make_code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return _b64url(digest)


def make_state() -> str:
    return secrets.token_urlsafe(16)


class SpotifyAuthClient:
    """Talks to accounts.spotify.com with the app's client credentials."""

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        redirect_uri: str,
        scopes: List[str],
        *,
        timeout: float = 10.0,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = list(scopes)
        self._timeout = timeout

    def build_authorize_url(
        self,
        state: str,
        code_challenge: str,
        redirect_uri: Optional[str] = None,
    ) -> str:
        if not self.client_id:
            raise ConfigurationError("Spotify client ID not configured")
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "scope": " ".join(self.scopes),
            "redirect_uri": redirect_uri or self.redirect_uri,
            "state": state,
            "code_challenge_method": "S256",
            "code_challenge": code_challenge,
        }
        return f"{SPOTIFY_AUTHORIZE_URL}?{urlencode(params)}"

    def exchange_code(
        self,
        code: str,
        code_verifier: str,
        redirect_uri: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Authorization-code grant; returns the raw token payload."""
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri or self.redirect_uri,
            "code_verifier": code_verifier,
            "client_id": self.client_id or "",
        }
        return self._token_request(data, "Failed to exchange code for tokens")

    def refresh(self, refresh_token: str) -> Dict[str, Any]:
        """Refresh-token grant; keeps the old refresh token when Spotify omits one."""
        data = {"grant_type": "refresh_token", "refresh_token": refresh_token}
        token_data = self._token_request(data, "Failed to refresh token")
        token_data.setdefault("refresh_token", refresh_token)
        return token_data

    def _token_request(self, data: Dict[str, str], failure_message: str) -> Dict[str, Any]:
        if not self.client_id or not self.client_secret:
            raise ConfigurationError("Spotify credentials not configured")
        try:
            response = requests.post(
                SPOTIFY_TOKEN_URL,
                data=data,
                auth=(self.client_id, self.client_secret),
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.error("Spotify token request failed: %s", exc)
            raise UpstreamServiceError(failure_message, service="spotify_accounts") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("Failed to parse token response: %s", response.text[:500])
            raise UpstreamServiceError(
                "Invalid response from Spotify",
                service="spotify_accounts",
                extra={"rawResponse": response.text},
            ) from exc

        if response.status_code >= 400:
            logger.error("Spotify token endpoint returned %s: %s", response.status_code, payload)
            raise UpstreamServiceError(
                failure_message,
                service="spotify_accounts",
                status_code=response.status_code,
                extra={"details": payload},
            )
        if not payload.get("access_token"):
            raise UpstreamServiceError(
                "Invalid response from Spotify",
                service="spotify_accounts",
                extra={"details": payload},
            )
        return payload


__all__ = [
    "SpotifyAuthClient",
    "SPOTIFY_AUTHORIZE_URL",
    "SPOTIFY_TOKEN_URL",
    "make_code_verifier",
    "make_code_challenge",
    "make_state",
]
