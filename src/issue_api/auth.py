from __future__ import annotations

import hashlib
import hmac
import logging
import re
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .errors import ErrorKind, ServiceError
from .models import UserEntity
from .repositories import UserRepository, get_user_repository
from .settings import get_settings
from .store import StoreError

logger = logging.getLogger(__name__)

_security = HTTPBasic(auto_error=False)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_HASH_ALGORITHM = "pbkdf2_sha256"
_HASH_ITERATIONS = 100000


def hash_password(password: str, salt: Optional[str] = None, iterations: int = _HASH_ITERATIONS) -> str:
    """Return a salted PBKDF2 hash encoded as ``algorithm$iterations$salt$digest``."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"{_HASH_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, _ = encoded.split("$", 3)
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != _HASH_ALGORITHM or rounds < 1:
        return False
    return hmac.compare_digest(hash_password(password, salt, rounds), encoded)


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email.strip()))


# PUBLIC_INTERFACE
class AuthService:
    """
    Email/password accounts.

    Failures are raised as ServiceError with the provider's error kinds so
    that callers can map them to user-facing text. After ``max_failed_signins``
    consecutive failures an account is throttled until ``lockout_seconds``
    have passed since the last failure.
    """

    def __init__(
        self,
        users: UserRepository,
        min_password_length: int = 6,
        max_failed_signins: int = 5,
        lockout_seconds: int = 300,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._users = users
        self._min_password_length = min_password_length
        self._max_failed_signins = max_failed_signins
        self._lockout = timedelta(seconds=lockout_seconds)
        self._clock = clock

    def _is_locked(self, user: UserEntity, now: datetime) -> bool:
        if user["failed_attempts"] < self._max_failed_signins:
            return False
        last_failed_at = user.get("last_failed_at")
        return last_failed_at is not None and now - last_failed_at < self._lockout

    def sign_up(self, email: str, password: str) -> UserEntity:
        """Register a new account and return it."""
        email = email.strip().lower()
        if not is_valid_email(email):
            raise ServiceError(ErrorKind.INVALID_EMAIL)
        if len(password) < self._min_password_length:
            raise ServiceError(ErrorKind.WEAK_PASSWORD)
        try:
            if self._users.get_by_email(email) is not None:
                raise ServiceError(ErrorKind.EMAIL_ALREADY_IN_USE)
            user = self._users.create(email, hash_password(password))
        except StoreError as exc:
            logger.error("Sign-up for %s failed: %s", email, exc)
            raise ServiceError(ErrorKind.NETWORK_REQUEST_FAILED, str(exc)) from exc
        logger.info("Registered %s", email)
        return user

    def sign_in(self, email: str, password: str) -> UserEntity:
        """
        Verify credentials and return the account.

        Raises:
            ServiceError: invalid email, unknown user, disabled account,
            rate limit after repeated failures, wrong password, or store failure.
        """
        email = email.strip().lower()
        if not is_valid_email(email):
            raise ServiceError(ErrorKind.INVALID_EMAIL)
        try:
            user = self._users.get_by_email(email)
            if user is None:
                raise ServiceError(ErrorKind.USER_NOT_FOUND)
            if user["disabled"]:
                raise ServiceError(ErrorKind.USER_DISABLED)
            now = self._clock()
            if self._is_locked(user, now):
                raise ServiceError(ErrorKind.TOO_MANY_REQUESTS)
            # A lapsed lockout starts a fresh count
            failed = user["failed_attempts"] if user["failed_attempts"] < self._max_failed_signins else 0
            if not verify_password(password, user["password_hash"]):
                self._users.record_failed_signin(user["id"], failed + 1, now)
                logger.warning("Failed sign-in for %s (%d)", email, failed + 1)
                raise ServiceError(ErrorKind.WRONG_PASSWORD)
            if user["failed_attempts"]:
                self._users.reset_failed_signins(user["id"])
                user["failed_attempts"] = 0
                user["last_failed_at"] = None
        except StoreError as exc:
            logger.error("Sign-in for %s failed: %s", email, exc)
            raise ServiceError(ErrorKind.NETWORK_REQUEST_FAILED, str(exc)) from exc
        return user


# PUBLIC_INTERFACE
def get_auth_service(users: UserRepository = Depends(get_user_repository)) -> AuthService:
    """Return an AuthService configured from settings."""
    settings = get_settings()
    return AuthService(
        users,
        min_password_length=settings.min_password_length,
        max_failed_signins=settings.max_failed_signins,
        lockout_seconds=settings.signin_lockout_seconds,
    )


# PUBLIC_INTERFACE
def get_current_user(
    creds: Optional[HTTPBasicCredentials] = Depends(_security),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserEntity:
    """
    Enforce HTTP Basic authentication against registered accounts.

    The returned account's email is used as the creator identity.

    Raises:
        HTTPException(401) if credentials are missing.
        ServiceError if the provider rejects them; a username that is not an
        email is reported as an invalid credential.
    """
    if creds is None or not creds.username or creds.password is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )
    if not is_valid_email(creds.username):
        raise ServiceError(ErrorKind.INVALID_CREDENTIAL)
    return auth_service.sign_in(creds.username, creds.password)
