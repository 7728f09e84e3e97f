"""Configuration management for media server connections.

All configuration is read from environment variables.
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from .jellyfin import JellyfinClient, JellyfinConfig, JellyfinMediaProvider
from .provider import MediaProvider
from .subsonic import SubsonicClient, SubsonicConfig, SubsonicMediaProvider

logger = logging.getLogger(__name__)

SERVER_TYPES = ("subsonic", "jellyfin")


@dataclass
class ServerConfig:
    """Connection settings for one media server (reads from environment)."""

    server_type: str
    url: str
    username: str
    password: Optional[str] = None
    api_key: Optional[str] = None
    client_name: str = "mediaprovider"
    rate_limit: Optional[int] = None

    def __post_init__(self):
        self.server_type = self.server_type.lower()
        if self.server_type not in SERVER_TYPES:
            raise ValueError(
                f"Invalid server_type: {self.server_type}. "
                f"Must be one of {', '.join(SERVER_TYPES)}"
            )

    @classmethod
    def from_environment(cls) -> 'ServerConfig':
        """Load configuration from environment variables.

        Returns:
            ServerConfig: Loaded configuration object

        Raises:
            EnvironmentError: If required environment variables are missing
            ValueError: If MEDIA_SERVER_TYPE or MEDIA_SERVER_RATE_LIMIT is invalid
        """
        required = {
            'MEDIA_SERVER_TYPE': os.getenv('MEDIA_SERVER_TYPE'),
            'MEDIA_SERVER_URL': os.getenv('MEDIA_SERVER_URL'),
            'MEDIA_SERVER_USER': os.getenv('MEDIA_SERVER_USER'),
        }
        api_key = os.getenv('SUBSONIC_API_KEY')
        password = os.getenv('MEDIA_SERVER_PASSWORD')

        missing = [var for var, value in required.items() if not value]
        if not password and not api_key:
            missing.append('MEDIA_SERVER_PASSWORD')

        if missing:
            raise EnvironmentError(
                f"Required environment variables missing: {', '.join(missing)}\n"
                f"Example: export MEDIA_SERVER_URL='https://your-server.com'"
            )

        rate_limit = os.getenv('MEDIA_SERVER_RATE_LIMIT')

        return cls(
            server_type=required['MEDIA_SERVER_TYPE'],
            url=required['MEDIA_SERVER_URL'],
            username=required['MEDIA_SERVER_USER'],
            password=password,
            api_key=api_key,
            client_name=os.getenv('MEDIA_SERVER_CLIENT_NAME', 'mediaprovider'),
            rate_limit=int(rate_limit) if rate_limit else None,
        )

    def to_subsonic_config(self) -> SubsonicConfig:
        return SubsonicConfig(
            url=self.url,
            username=self.username,
            password=self.password,
            api_key=self.api_key,
            client_name=self.client_name,
            rate_limit=self.rate_limit,
        )

    def to_jellyfin_config(self) -> JellyfinConfig:
        return JellyfinConfig(
            url=self.url,
            username=self.username,
            password=self.password or "",
            client_name=self.client_name,
            device_name=self.client_name,
        )

    def __repr__(self) -> str:
        """Return string representation with sensitive data masked."""
        return (
            f"ServerConfig("
            f"server_type='{self.server_type}', "
            f"url='{self.url}', "
            f"username='{self.username}', "
            f"password={'***' if self.password else None}, "
            f"api_key={'***' if self.api_key else None}, "
            f"client_name='{self.client_name}', "
            f"rate_limit={self.rate_limit}"
            f")"
        )


def create_provider(config: ServerConfig) -> MediaProvider:
    """Build the MediaProvider for the configured server family.

    The family is chosen once here. Jellyfin requires a session, so its
    client logs in before the provider is returned.

    Raises:
        MediaProviderError: If the Jellyfin login is rejected
    """
    logger.info(f"Creating {config.server_type} provider for {config.url}")

    if config.server_type == "jellyfin":
        client = JellyfinClient(config.to_jellyfin_config())
        client.login()
        return JellyfinMediaProvider(client)

    return SubsonicMediaProvider(SubsonicClient(config.to_subsonic_config()))
