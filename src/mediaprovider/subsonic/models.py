"""Connection and authentication models for Subsonic servers."""

import warnings
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional


@dataclass
class SubsonicConfig:
    """Configuration for connecting to a Subsonic-compatible server.

    Attributes:
        url: Base server URL (e.g., "https://music.example.com")
        username: Subsonic username
        password: Subsonic password (hashed before transmission)
        api_key: Optional API key for OpenSubsonic servers (alternative to password)
        client_name: Client identifier for API requests
        api_version: Subsonic API version
        rate_limit: Optional maximum requests per second
    """

    url: str
    username: str
    password: Optional[str] = None
    api_key: Optional[str] = None
    client_name: str = "mediaprovider"
    api_version: str = "1.16.1"
    rate_limit: Optional[int] = None

    def __post_init__(self):
        """Validate configuration on initialization."""
        if not self.url or not self.url.startswith(("http://", "https://")):
            raise ValueError("url must be a valid HTTP/HTTPS URL")
        if not self.username:
            raise ValueError("username is required")

        if not self.password and not self.api_key:
            raise ValueError("Either password or api_key must be provided")

        if not self.url.startswith("https://"):
            warnings.warn(
                "Using HTTP instead of HTTPS for Subsonic connection. "
                "Credentials will be transmitted insecurely.",
                UserWarning,
                stacklevel=2,
            )


@dataclass
class SubsonicAuthToken:
    """Authentication token for Subsonic API using MD5 salt+hash method.

    Attributes:
        token: MD5(password + salt)
        salt: Random salt string
        username: Username for this token
        created_at: Token creation timestamp
    """

    token: str
    salt: str
    username: str
    created_at: datetime

    def to_auth_params(self) -> Dict[str, str]:
        """Convert to authentication query parameters.

        Returns:
            Dict with u (username), t (token), s (salt)
        """
        return {"u": self.username, "t": self.token, "s": self.salt}

    @classmethod
    def now(cls, token: str, salt: str, username: str) -> "SubsonicAuthToken":
        return cls(token=token, salt=salt, username=username, created_at=datetime.now(timezone.utc))
