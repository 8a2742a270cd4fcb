"""JWT gate for the directory endpoints.

The token travels in the password field of HTTP Basic authentication,
because that is what Nix can send for tarball URLs.  The gate only checks
that the token is validly signed and structurally sound: ``exp`` must be
present and in the future, ``nbf`` (if present) must have passed, and the
audience is not checked.  No claim content is required.

Why a token was rejected is logged, never told to the caller.
"""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Mapping
from pathlib import Path

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from s3channel.core.errors import AuthConfigError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "RS256"


def extract_auth_password(headers: Mapping[str, str]) -> str | None:
    """Return the password of a Basic ``Authorization`` header, if any."""
    header_value = headers.get("authorization") or headers.get("Authorization")
    if not header_value or not header_value.startswith("Basic "):
        return None

    try:
        credentials = base64.b64decode(header_value[len("Basic "):], validate=True)
        decoded = credentials.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    _user, sep, password = decoded.partition(":")
    return password if sep else None


class JwtGate:
    """Stateless verifier of the bearer token carried in Basic auth.

    Parameters
    ----------
    public_key_pem:
        RSA public key in PEM format used to verify token signatures.
    """

    def __init__(self, public_key_pem: bytes) -> None:
        try:
            key = load_pem_public_key(public_key_pem)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise AuthConfigError(f"Failed to decode public key: {exc}") from exc
        if not isinstance(key, RSAPublicKey):
            raise AuthConfigError("Public key is not an RSA key")
        self._key = key

    @classmethod
    def from_pem_file(cls, path: Path | str) -> JwtGate:
        """Load the verification key from *path*.

        An unreadable file is an error, not "no key": treating it as absent
        would open the service to unauthenticated access.
        """
        path = Path(path)
        try:
            pem_data = path.read_bytes()
        except OSError as exc:
            raise AuthConfigError(f"Failed to read public key PEM from {path}: {exc}") from exc
        return cls(pem_data)

    def verify(self, token: str) -> dict:
        """Decode *token*, raising ``jwt.InvalidTokenError`` if it is not acceptable."""
        return jwt.decode(
            token,
            self._key,
            algorithms=[JWT_ALGORITHM],
            options={
                "require": ["exp"],
                "verify_exp": True,
                "verify_nbf": True,
                "verify_aud": False,
            },
        )

    def check(self, headers: Mapping[str, str]) -> bool:
        """Return whether the request carrying *headers* is authorized."""
        token = extract_auth_password(headers)
        if token is None:
            logger.info("JWT validation error: Missing Authorization header")
            return False

        try:
            claims = self.verify(token)
        except jwt.InvalidTokenError as exc:
            logger.info("JWT validation error: %s", exc)
            return False

        logger.debug("Claim %s", claims)
        return True
