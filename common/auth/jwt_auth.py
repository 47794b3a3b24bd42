"""
JWT + bcrypt authentication provider.

Handles the stateless parts of authentication:
- JWT session tokens (subject, issued-at, expiry)
- bcrypt password hashing with SHA-256 pre-hashing

User storage stays with the application services.

Example:
    auth = JWTAuth(secret="your-secret-key", access_token_expire_days=14)

    token = await auth.create_token(user_id)
    claims = await auth.verify_token(token)
    print(claims["sub"])  # user_id
"""

import base64
import hashlib
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

import bcrypt as bcrypt_lib
from jose import jwt, JWTError, ExpiredSignatureError


class InvalidTokenError(ValueError):
    """Token is malformed, has a bad signature, or lacks required claims."""


class TokenExpiredError(InvalidTokenError):
    """Token was valid but its expiry has passed."""


class JWTAuth:
    """
    JWT + bcrypt authentication provider.

    Symmetric algorithms (HS*) sign and verify with the same secret.
    Asymmetric algorithms (RS*, ES*) sign with ``secret`` (the private key
    PEM) and verify with ``verify_key`` (the public key PEM).
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_token_expire_days: int = 14,
        verify_key: Optional[str] = None,
    ):
        """
        Initialize JWT auth provider.

        Args:
            secret: Signing key (shared secret or private key PEM)
            algorithm: JWT algorithm (default: HS256)
            access_token_expire_days: Session token lifetime
            verify_key: Public key PEM for asymmetric algorithms
        """
        if not secret:
            raise ValueError("JWT signing key is required")

        self.secret = secret
        self.verify_key = verify_key or secret
        self.algorithm = algorithm
        self.access_token_expire = timedelta(days=access_token_expire_days)

    def _prehash_password(self, password: str) -> str:
        """
        Pre-hash password with SHA-256 before bcrypt.

        This handles bcrypt's 72-byte limit and ensures consistent
        behavior across all password lengths.
        """
        sha256_hash = hashlib.sha256(password.encode("utf-8")).digest()
        return base64.b64encode(sha256_hash).decode("utf-8")

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt with SHA-256 pre-hashing."""
        prehashed = self._prehash_password(password)
        salt = bcrypt_lib.gensalt()
        return bcrypt_lib.hashpw(prehashed.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, password: str, hashed: str) -> bool:
        """
        Verify a password against its hash.

        Accepts both SHA-256 pre-hashed and legacy direct-bcrypt hashes,
        so imported accounts keep working.
        """
        if not hashed:
            return False

        hashed_bytes = hashed.encode("utf-8")

        prehashed = self._prehash_password(password)
        try:
            if bcrypt_lib.checkpw(prehashed.encode("utf-8"), hashed_bytes):
                return True
        except ValueError:
            pass

        try:
            return bcrypt_lib.checkpw(password.encode("utf-8"), hashed_bytes)
        except ValueError:
            # Password too long for direct bcrypt - definitely not a match
            return False

    async def create_token(
        self,
        user_id: str,
        now: Optional[datetime] = None,
        **claims: Any,
    ) -> str:
        """
        Create a session token for the user.

        Args:
            user_id: Subject of the token
            now: Issue time (defaults to the current time)
            **claims: Extra claims to embed

        Returns:
            Encoded JWT string
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "iat": issued_at,
            "exp": issued_at + self.access_token_expire,
            **claims,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    async def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a session token.

        Raises:
            TokenExpiredError: Token is past its expiry
            InvalidTokenError: Token is malformed or the signature is wrong
        """
        try:
            return jwt.decode(
                token,
                self.verify_key,
                algorithms=[self.algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except JWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}")
