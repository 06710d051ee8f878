"""Credential sign-in and server-side session management."""
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from location_api.errors import DuplicateEmail, InvalidCredentials, Misconfiguration
from location_api.models.auth import AuthSession
from location_api.models.user import PASSWORD_PROVIDER, Credential, User
from location_api.schemas.auth import AccountPublic
from location_api.services.passwords import hash_password, needs_rehash, verify_password
from location_api.services.session_tokens import generate_session_token, hash_session_token

logger = logging.getLogger(__name__)

MIN_SECRET_LENGTH = 32
DEFAULT_SESSION_LIFETIME = timedelta(days=7)
DEFAULT_UPDATE_AGE = timedelta(days=1)


@lru_cache(maxsize=8)
def _decoy_digest(secret: str) -> str:
    # Unknown emails still pay for one bcrypt check.
    return hash_password("decoy-password", secret)


def normalize_email(email: str) -> str:
    """Emails are matched case-insensitively."""
    return email.strip().lower()


def _is_utf8_encodable(value: str) -> bool:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def to_public(user: User) -> AccountPublic:
    return AccountPublic(id=user.id, email=user.email, display_name=user.name)


@dataclass(frozen=True)
class SignInResult:
    """Outcome of a successful sign-in."""

    account: AccountPublic
    session_token: str
    expires_at: datetime


class Authenticator:
    """Signs users in and out and resolves session tokens back to accounts.

    The server secret is passed in explicitly; nothing here reads global
    configuration, so tests can inject their own secret and clock.
    """

    def __init__(
        self,
        db: Session,
        secret: str | None,
        session_lifetime: timedelta = DEFAULT_SESSION_LIFETIME,
        sliding_expiration: bool = False,
        update_age: timedelta = DEFAULT_UPDATE_AGE,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        if not secret:
            raise Misconfiguration("Server secret is not configured")
        if len(secret.strip()) < MIN_SECRET_LENGTH:
            raise Misconfiguration(f"Server secret must be at least {MIN_SECRET_LENGTH} characters")

        self.db = db
        self._secret = secret.strip()
        self.session_lifetime = session_lifetime
        self.sliding_expiration = sliding_expiration
        self.update_age = update_age
        self._clock = clock

    def sign_in(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SignInResult:
        """Verify credentials and issue a new session.

        Raises InvalidCredentials for an unknown email, an account without a
        password, or a wrong password, without telling them apart.
        """
        user = self._find_user(email)
        credential = user.password_credential() if user else None
        digest = credential.password_digest if credential else None

        if digest is None:
            verify_password(password, self._secret, _decoy_digest(self._secret))
            logger.info("Sign-in rejected")
            raise InvalidCredentials()

        if not verify_password(password, self._secret, digest):
            logger.info("Sign-in rejected")
            raise InvalidCredentials()

        if needs_rehash(digest):
            credential.password_digest = hash_password(password, self._secret)
            logger.info(f"Rotated legacy password digest for user {user.id}")

        now = self._clock()
        token = generate_session_token()
        expires_at = now + self.session_lifetime
        session = AuthSession(
            user_id=user.id,
            token_hash=hash_session_token(token),
            created_at=now.isoformat(),
            updated_at=now.isoformat(),
            expires_at=expires_at.isoformat(),
            ip_address=ip_address[:45] if ip_address else None,
            user_agent=user_agent[:255] if user_agent else None,
        )
        self.db.add(session)
        self.db.commit()

        logger.info(f"Issued session for user {user.id}")
        return SignInResult(account=to_public(user), session_token=token, expires_at=expires_at)

    def sign_out(self, token: str | None) -> None:
        """Invalidate a session. Unknown or already-expired tokens are a no-op."""
        if not token:
            return
        deleted = self.db.query(AuthSession).filter(
            AuthSession.token_hash == hash_session_token(token),
        ).delete(synchronize_session=False)
        self.db.commit()
        if deleted:
            logger.info("Session signed out")

    def resolve_session(self, token: str | None) -> AccountPublic | None:
        """Map a session token to its account, or None if absent or expired."""
        if not token:
            return None

        session = self.db.query(AuthSession).filter(
            AuthSession.token_hash == hash_session_token(token),
        ).first()
        if not session:
            return None

        try:
            expires_at = datetime.fromisoformat(session.expires_at)
        except ValueError:
            return None

        now = self._clock()
        if now >= expires_at:
            return None

        user = session.user
        if not user:
            return None

        if self.sliding_expiration:
            self._maybe_extend(session, now)

        return to_public(user)

    def create_credential(
        self,
        email: str,
        password: str,
        display_name: str | None = None,
    ) -> AccountPublic:
        """Provision a user together with its password credential.

        Both rows are written in one transaction; a failure rolls back both.
        """
        if not email or not email.strip():
            raise ValueError("Email must not be empty.")
        normalized = normalize_email(email)

        if self._find_user(normalized):
            raise DuplicateEmail()

        digest = hash_password(password, self._secret)
        user = User(email=normalized, name=display_name)
        user.credentials.append(
            Credential(provider_id=PASSWORD_PROVIDER, password_digest=digest),
        )
        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateEmail()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(user)
        logger.info(f"Created account {user.id}")
        return to_public(user)

    def purge_expired_sessions(self) -> int:
        """Delete session rows whose expiry has passed."""
        now = self._clock().isoformat()
        deleted = self.db.query(AuthSession).filter(
            AuthSession.expires_at <= now,
        ).delete(synchronize_session=False)
        self.db.commit()
        if deleted:
            logger.info(f"Purged {deleted} expired sessions")
        return deleted

    def _find_user(self, email: str | None) -> User | None:
        if not email or not _is_utf8_encodable(email):
            return None
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def _maybe_extend(self, session: AuthSession, now: datetime) -> None:
        try:
            last_update = datetime.fromisoformat(session.updated_at or session.created_at)
        except (TypeError, ValueError):
            last_update = now - self.update_age

        if now - last_update < self.update_age:
            return

        session.expires_at = (now + self.session_lifetime).isoformat()
        session.updated_at = now.isoformat()
        self.db.commit()
