import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from passlib.context import CryptContext
from jose import JWTError, jwt

from clinic_queue.core.exceptions import InvalidCredentials

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Salted bcrypt hashing with a configurable work factor."""

    def __init__(self, rounds: int = 12):
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__ident="2b",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        # an unrecognised or corrupted hash counts as a mismatch
        try:
            return self.pwd_context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            logger.warning("Stored password hash could not be parsed")
            return False


def _parse_subject(sub) -> int:
    if isinstance(sub, bool) or (isinstance(sub, float) and not sub.is_integer()):
        raise ValueError(f"subject is not an integer: {sub!r}")
    return int(sub)


@dataclass(frozen=True)
class TokenClaims:
    subject: int
    email: Optional[str]
    role: Optional[str]
    issued_at: Optional[datetime]
    expires_at: datetime


class TokenService:
    """
    Issues and verifies signed access tokens.

    The ``sub`` claim is always written as a string and read back as an int,
    whether the token carries it as a string or a number.
    """

    def __init__(self, secret_key: str, algorithm: str, expire_minutes: int = 60 * 24):
        if not secret_key:
            raise ValueError("JWT secret key is required")
        if not algorithm:
            raise ValueError("JWT algorithm is required")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.lifetime = timedelta(minutes=expire_minutes)

    @property
    def lifetime_seconds(self) -> int:
        return int(self.lifetime.total_seconds())

    def issue(
        self,
        subject,
        email: Optional[str] = None,
        role: Optional[str] = None,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        issued_at = datetime.now(timezone.utc)
        expire = issued_at + (expires_delta if expires_delta is not None else self.lifetime)
        to_encode = {"sub": str(subject), "iat": issued_at, "exp": expire}
        if email is not None:
            to_encode["email"] = email
        if role is not None:
            to_encode["role"] = role
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            # sub may arrive as a JSON number from other issuers; int() below handles both
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_sub": False},
            )
            subject = _parse_subject(payload["sub"])
            expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        except (JWTError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Token rejected: {type(e).__name__}")
            raise InvalidCredentials()

        issued_at = payload.get("iat")
        return TokenClaims(
            subject=subject,
            email=payload.get("email"),
            role=payload.get("role"),
            issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc) if issued_at is not None else None,
            expires_at=expires_at,
        )
