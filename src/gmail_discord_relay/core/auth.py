"""OAuth 2.0 authentication with token caching for Gmail API."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import Resource, build

from gmail_discord_relay.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.compose",
    "https://www.googleapis.com/auth/gmail.modify",
]


class CredentialStore:
    """Loads, obtains and caches the OAuth token used for Gmail access.

    The cache file holds a single JSON object with the keys ``type``,
    ``client_id``, ``client_secret`` and ``refresh_token``. Access tokens are
    never written; the Google client refreshes them on demand.
    """

    def __init__(
        self,
        credentials_path: Path,
        token_path: Path,
        scopes: list[str] | None = None,
        *,
        oauth_port: int = 0,
    ) -> None:
        self._credentials_path = credentials_path
        self._token_path = token_path
        self._scopes = scopes or SCOPES
        self._oauth_port = oauth_port

    @property
    def token_path(self) -> Path:
        return self._token_path

    def load(self) -> Credentials | None:
        """Read previously authorized credentials from the token cache.

        Returns:
            Credentials, or None if the cache is missing or unreadable.
        """
        if not self._token_path.exists():
            logger.info("No cached token at %s", self._token_path)
            return None

        try:
            info = json.loads(self._token_path.read_text(encoding="utf-8"))
            return Credentials.from_authorized_user_info(info, self._scopes)
        except Exception as e:
            logger.warning("Failed to load cached token from %s: %s", self._token_path, e)
            return None

    def authorize_interactively(self) -> Credentials:
        """Run the installed-app OAuth flow in a local browser.

        Raises:
            AuthenticationError: If the client secrets file is missing or the flow fails.
        """
        if not self._credentials_path.exists():
            raise AuthenticationError(
                f"Credentials file not found: {self._credentials_path}. "
                "Download it from Google Cloud Console."
            )

        try:
            flow = InstalledAppFlow.from_client_secrets_file(
                str(self._credentials_path), self._scopes
            )
            creds = flow.run_local_server(port=self._oauth_port)
        except Exception as e:
            raise AuthenticationError(f"OAuth flow failed: {e}") from e

        logger.info("Interactive authorization completed")
        return creds

    def persist(self, creds: Credentials) -> None:
        """Save credentials to the token cache file."""
        payload = {
            "type": "authorized_user",
            "client_id": creds.client_id,
            "client_secret": creds.client_secret,
            "refresh_token": creds.refresh_token,
        }
        self._token_path.parent.mkdir(parents=True, exist_ok=True)
        self._token_path.write_text(json.dumps(payload), encoding="utf-8")
        logger.info("Token cached at %s", self._token_path)

    def authorize(self) -> Credentials:
        """Load cached credentials, or authorize interactively and cache the result."""
        creds = self.load()
        if creds is not None:
            return creds

        creds = self.authorize_interactively()
        if creds.refresh_token:
            self.persist(creds)
        else:
            logger.warning("OAuth flow returned no refresh token; token not cached")
        return creds


def build_gmail_service(creds: Credentials) -> Resource:
    """Build a Gmail API service resource.

    Args:
        creds: Valid Google OAuth2 credentials.

    Returns:
        Gmail API service resource.
    """
    return build("gmail", "v1", credentials=creds, cache_discovery=False)
