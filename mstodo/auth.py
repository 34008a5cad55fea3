"""OAuth 2.0 login against the Microsoft identity platform.

The browser flow runs a one-shot local callback server; the resulting token
is cached in the config directory and refreshed when it expires.
"""

import logging
import os
from pathlib import Path
from time import monotonic
from typing import Any, Dict, Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from .config import Settings, token_path

AUTHORITY = "https://login.microsoftonline.com"

SCOPES = [
    'https://graph.microsoft.com/Tasks.ReadWrite',
    'https://graph.microsoft.com/User.Read',
    'offline_access',
]

AUTHORIZATION_PROMPT = (
    "You will now be taken to your browser for authentication "
    "or open the url below in a browser:\n{url}"
)

SUCCESS_MESSAGE = "Authentication complete. You can now close this window and return to mstodo."

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when no valid credentials could be obtained"""


def client_config(settings: Settings) -> Dict[str, Any]:
    """OAuth client configuration in the shape InstalledAppFlow expects"""
    base = f"{AUTHORITY}/{settings.tenant}/oauth2/v2.0"
    return {
        "installed": {
            "client_id": settings.client_id,
            "client_secret": settings.client_secret,
            "auth_uri": f"{base}/authorize",
            "token_uri": f"{base}/token",
            "redirect_uris": ["http://localhost"],
        }
    }


class TodoAuth:
    """Handle OAuth 2.0 authentication and the token cache"""

    def __init__(self, settings: Settings, config_dir: Path):
        self.settings = settings
        self.token_path = token_path(config_dir)

    def load_cached(self) -> Optional[Credentials]:
        if not self.token_path.exists():
            return None
        try:
            return Credentials.from_authorized_user_file(str(self.token_path), SCOPES)
        except (ValueError, OSError) as e:
            logger.error(f"Error loading credentials: {e}")
            return None

    def get_credentials(self, force_login: bool = False) -> Credentials:
        """Get valid user credentials from the cache or run the browser flow"""
        creds = None if force_login else self.load_cached()

        if creds and creds.valid:
            return creds

        if creds and creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
            except RefreshError as e:
                logger.error(f"Error refreshing credentials: {e}")
                creds = None
        else:
            creds = None

        if not creds:
            creds = self.login()

        self.save(creds)
        return creds

    def login(self) -> Credentials:
        """Run the authorization-code flow through the local callback server"""
        # Microsoft reports granted scopes in a different form than requested
        os.environ.setdefault("OAUTHLIB_RELAX_TOKEN_SCOPE", "1")

        flow = InstalledAppFlow.from_client_config(client_config(self.settings), SCOPES)
        logger.info(f"Authentication will be cancelled in {self.settings.auth_timeout} seconds")
        started = monotonic()
        try:
            creds = flow.run_local_server(
                port=self.settings.port,
                timeout_seconds=self.settings.auth_timeout,
                authorization_prompt_message=AUTHORIZATION_PROMPT,
                success_message=SUCCESS_MESSAGE,
            )
        except Exception as e:
            if monotonic() - started >= self.settings.auth_timeout:
                raise AuthenticationError("authentication timed out and was cancelled") from e
            raise AuthenticationError(f"error getting token from web: {e}") from e

        if creds is None:
            raise AuthenticationError("no token was returned by the login flow")
        return creds

    def save(self, creds: Credentials) -> None:
        logger.info(f"Saving token to file: {self.token_path}")
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.token_path, 'w') as token:
            token.write(creds.to_json())
        os.chmod(self.token_path, 0o600)
