"""Admin login and session tokens.

Admins log in with a username and password (bcrypt hash in
``admin_users``) and receive a random bearer token. Only the SHA-256 digest
of the token is stored, alongside its expiry; presenting the token later
yields an ``AuthContext`` for the admin.
"""

import hashlib
import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from functools import lru_cache
from typing import Callable

import bcrypt

from academy_portal.db.client import DatabaseClient
from academy_portal.exceptions import AuthError, RateLimitedError, ValidationError
from academy_portal.models.identity import AdminSession, AuthContext, LoginResponse

logger = logging.getLogger(__name__)

MAX_INPUT_LENGTH = 128
TOKEN_BYTES = 32


def hash_token(token: str) -> str:
    """Digest stored in place of the raw session token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored admin password hash is not a valid bcrypt hash")
        return False


@lru_cache
def _dummy_hash() -> str:
    return bcrypt.hashpw(b"dummy-password", bcrypt.gensalt()).decode("utf-8")


@dataclass
class _Attempts:
    count: int
    last_attempt: float


class LoginRateLimiter:
    """In-process limit on login attempts per (client, username).

    State lives in memory, so limits are per worker process.
    """

    def __init__(
        self,
        max_attempts: int = 5,
        lockout_seconds: int = 900,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self._clock = clock
        self._attempts: dict[str, _Attempts] = {}

    def check(self, identifier: str) -> None:
        """Record an attempt.

        Raises:
            RateLimitedError: If the identifier is locked out
        """
        now = self._clock()
        record = self._attempts.get(identifier)

        if record is None or now - record.last_attempt > self.lockout_seconds:
            self._attempts[identifier] = _Attempts(count=1, last_attempt=now)
            return

        if record.count >= self.max_attempts:
            retry_after = int(self.lockout_seconds - (now - record.last_attempt)) + 1
            raise RateLimitedError(retry_after=retry_after)

        record.count += 1
        record.last_attempt = now

    def reset(self, identifier: str) -> None:
        self._attempts.pop(identifier, None)


class AdminGate:
    """Issues and validates admin session tokens."""

    def __init__(
        self,
        db: DatabaseClient,
        rate_limiter: LoginRateLimiter,
        session_ttl: timedelta = timedelta(hours=8),
    ) -> None:
        self.db = db
        self.rate_limiter = rate_limiter
        self.session_ttl = session_ttl

    async def login(
        self,
        username: str | None,
        password: str | None,
        client_ip: str = "unknown",
    ) -> LoginResponse:
        """Verify admin credentials and issue a session token.

        Raises:
            ValidationError: If either field is missing or too long
            RateLimitedError: If too many attempts were made
            AuthError: If the credentials are wrong or the admin is inactive
        """
        if not username or not password:
            raise ValidationError("Username and password are required")
        if len(username) > MAX_INPUT_LENGTH or len(password) > MAX_INPUT_LENGTH:
            raise ValidationError("Input too long")

        username = username.strip()
        if not username:
            raise ValidationError("Invalid username")

        identifier = f"{client_ip}:{username}"
        self.rate_limiter.check(identifier)
        logger.info(f"Admin login attempt for username: {username}")

        admin = await self.db.get_admin_by_username(username)
        if admin and admin.password_hash:
            valid = verify_password(password, admin.password_hash)
        else:
            # Same bcrypt cost whether or not the user exists
            verify_password(password, _dummy_hash())
            valid = False

        if not valid or not admin.is_active:
            logger.warning(f"Authentication failed for: {username}")
            raise AuthError("Invalid credentials")

        self.rate_limiter.reset(identifier)

        try:
            await self.db.delete_expired_admin_sessions()
        except Exception as e:
            logger.warning(f"Failed to prune expired admin sessions: {e}")

        token = secrets.token_urlsafe(TOKEN_BYTES)
        now = datetime.now(UTC)
        session = AdminSession(
            token_hash=hash_token(token),
            admin_user_id=admin.id,
            expires_at=now + self.session_ttl,
            created_at=now,
        )
        await self.db.create_admin_session(session)
        logger.info(f"Admin login successful for: {username}")

        return LoginResponse(
            admin_user=admin,
            admin_token=token,
            expires_at=session.expires_at,
        )

    async def authenticate(self, token: str | None) -> AuthContext:
        """Resolve a session token to the admin it was issued to.

        Raises:
            AuthError: If the token is missing, unknown or expired, or the
                admin no longer exists or is inactive
        """
        if not token:
            raise AuthError()

        token_hash = hash_token(token)
        session = await self.db.get_admin_session(token_hash)
        if not session:
            logger.warning(f"Unknown admin token presented: {token[:6]}...")
            raise AuthError()

        expires_at = session.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)

        if expires_at <= datetime.now(UTC):
            logger.info(f"Expired admin session for {session.admin_user_id}")
            await self.db.delete_admin_session(token_hash)
            raise AuthError("Session expired")

        admin = await self.db.get_admin_by_id(session.admin_user_id)
        if not admin or not admin.is_active:
            logger.warning(f"Session for missing or inactive admin {session.admin_user_id}")
            raise AuthError()

        return AuthContext(admin=admin, expires_at=expires_at)

    async def logout(self, token: str) -> None:
        await self.db.delete_admin_session(hash_token(token))
