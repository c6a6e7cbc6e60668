import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from clinic_queue.core.auth import TokenService
from clinic_queue.core.exceptions import InvalidCredentials, Unauthenticated

logger = logging.getLogger(__name__)

# Values some frontends send when their stored token is empty
_PLACEHOLDER_TOKENS = {"null", "undefined"}


@dataclass(frozen=True)
class Identity:
    user_id: int
    email: Optional[str]
    role: Optional[str]


def _normalize_token(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    token = raw.strip().strip('"').strip()
    if not token or token.lower() in _PLACEHOLDER_TOKENS:
        return None
    return token


class IdentityResolver:
    """Binds a request to the caller identity carried in its access token."""

    def __init__(self, tokens: TokenService, cookie_name: str):
        self.tokens = tokens
        self.cookie_name = cookie_name

    def extract_token(self, request: Request) -> Optional[str]:
        """Bearer header first, then the session cookie."""
        auth_header = request.headers.get("Authorization")
        if auth_header:
            scheme, _, value = auth_header.partition(" ")
            if scheme.lower() == "bearer":
                token = _normalize_token(value)
                if token:
                    return token

        return _normalize_token(request.cookies.get(self.cookie_name))

    def resolve(self, request: Request) -> Identity:
        token = self.extract_token(request)
        if token is None:
            logger.warning(f"No access token on {request.method} {request.url.path}")
            raise Unauthenticated()

        try:
            claims = self.tokens.verify(token)
        except InvalidCredentials:
            raise Unauthenticated()

        logger.debug(f"Request authenticated as user_id={claims.subject}")
        return Identity(user_id=claims.subject, email=claims.email, role=claims.role)


# ------------------------------------------------------------------ dependencies -----
def get_current_user(request: Request) -> Identity:
    """
    Dependency for protected routes. Raises Unauthenticated (401) before the
    handler runs when the request carries no valid token.
    """
    return request.app.state.identity_resolver.resolve(request)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_user_directory(request: Request):
    return request.app.state.user_directory


def get_patient_queue(request: Request):
    return request.app.state.patient_queue
