"""
Credentials Service

Loads the stored Google authorized-user token used by the Tasks and
Calendar gateways and refreshes it when it has expired.
"""

from pathlib import Path
from typing import Optional

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from fastmcp.utilities.logging import get_logger
from config.settings import ServerSettings, get_settings
from services.errors import GatewayError

# Google OAuth scopes
SCOPES = [
    'https://www.googleapis.com/auth/tasks',
    'https://www.googleapis.com/auth/calendar',
]


class CredentialsService:
    """
    Service for loading Google credentials from the token file.

    Obtaining the token (the consent flow) happens outside this server.
    """

    def __init__(self, settings: Optional[ServerSettings] = None):
        """
        Initialize credentials service.

        Args:
            settings: Server settings; the global settings are used when omitted
        """
        self.logger = get_logger("CredentialsService")
        self.settings = settings or get_settings()
        self.token_path = Path(self.settings.token_path)

    def get_credentials(self) -> Credentials:
        """
        Get valid credentials, refreshing and saving them if expired.

        Returns:
            Credentials object

        Raises:
            GatewayError: If no usable token is stored
        """
        if not self.token_path.exists():
            raise GatewayError(
                f"Google token not found at {self.token_path}. Authorize the server first."
            )

        try:
            creds = Credentials.from_authorized_user_file(str(self.token_path), SCOPES)

            # Refresh if expired
            if creds.expired and creds.refresh_token:
                creds.refresh(Request())
                self.save_credentials(creds)
        except (GoogleAuthError, ValueError) as e:
            self.logger.error(f"Error loading credentials from {self.token_path}: {e}")
            raise GatewayError(f"Could not load Google credentials: {e}") from e

        if not creds.valid:
            raise GatewayError("Stored Google credentials are not valid. Authorize the server again.")
        return creds

    def save_credentials(self, creds: Credentials):
        """
        Save refreshed credentials back to the token file.

        Args:
            creds: Credentials object
        """
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.token_path, 'w') as token:
            token.write(creds.to_json())

    def is_authenticated(self) -> bool:
        """
        Check whether usable credentials are stored.

        Returns:
            True if credentials load and are valid
        """
        try:
            self.get_credentials()
        except GatewayError:
            return False
        return True
