"""Subsonic API authentication.

Token authentication follows the Subsonic API documentation:
    1. Generate a random salt (16 hex characters)
    2. token = MD5(password + salt)
    3. Send u, t and s with every request

OpenSubsonic servers also accept an API key (u + k) instead of a token.

Security Notes:
    - Plaintext passwords are never sent
    - A fresh salt is generated for every request
    - MD5 is mandated by the Subsonic API (obfuscation, not cryptographic security)
"""

import hashlib
import secrets
from typing import Dict, Optional

from .models import SubsonicAuthToken, SubsonicConfig


def _md5_token(password: str, salt: str) -> str:
    return hashlib.md5(f"{password}{salt}".encode("utf-8")).hexdigest()


def generate_token(config: SubsonicConfig, salt: Optional[str] = None) -> Optional[SubsonicAuthToken]:
    """Generate a Subsonic authentication token.

    Args:
        config: Subsonic configuration containing username and password or API key
        salt: Optional pre-generated salt. If None, a new 16 hex character salt
              is generated. Primarily for testing.

    Returns:
        SubsonicAuthToken, or None when the config uses API key authentication

    Example:
        >>> token = generate_token(config, salt="c19b2d")
        >>> token.to_auth_params()
        {'u': 'admin', 't': '26719a1196d2a940705a59634eb18eab', 's': 'c19b2d'}
    """
    if config.api_key:
        return None

    if salt is None:
        salt = secrets.token_hex(8)

    return SubsonicAuthToken.now(
        token=_md5_token(config.password, salt),
        salt=salt,
        username=config.username,
    )


def auth_params(config: SubsonicConfig) -> Dict[str, str]:
    """Authentication query parameters for one request.

    Returns:
        - API key auth (OpenSubsonic): u, k
        - Token auth: u, t, s with a fresh salt
    """
    if config.api_key:
        return {"u": config.username, "k": config.api_key}
    return generate_token(config).to_auth_params()
