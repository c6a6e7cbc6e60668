import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from clinic_queue.core.auth import TokenService
from clinic_queue.core.exceptions import InvalidCredentials
from clinic_queue.core.middleware import (
    Identity,
    get_current_user,
    get_token_service,
    get_user_directory,
)
from clinic_queue.db.crud.user import UserDirectory
from clinic_queue.schemas.auth_response import AuthResponse, TokenType
from clinic_queue.schemas.login_request import LoginRequest
from clinic_queue.schemas.register_request import RegisterRequest
from clinic_queue.schemas.shared import MessageResponse, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


def _set_session_cookie(request: Request, response: Response, value: str, max_age: int):
    settings = request.app.state.settings
    response.set_cookie(
        key=settings.jwt_cookie_name,
        value=value,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
        max_age=max_age,
    )


def _issue_for_user(
    request: Request, response: Response, tokens: TokenService, user: UserOut
) -> AuthResponse:
    token = tokens.issue(user.id, email=user.email, role=user.role.value)
    _set_session_cookie(request, response, token, tokens.lifetime_seconds)
    return AuthResponse(
        access_token=token,
        token=token,
        token_type=TokenType.bearer,
        expires_in=tokens.lifetime_seconds,
        user=user,
    )


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    payload: RegisterRequest,
    request: Request,
    response: Response,
    users: UserDirectory = Depends(get_user_directory),
    tokens: TokenService = Depends(get_token_service),
):
    user = await users.create_user(payload.name, payload.email, payload.password)
    logger.info(f"[SIGNUP] New user created: id={user.id}")
    return _issue_for_user(request, response, tokens, user)


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    users: UserDirectory = Depends(get_user_directory),
    tokens: TokenService = Depends(get_token_service),
):
    user = await users.authenticate(payload.email, payload.password)
    if not user:
        logger.warning("[LOGIN] Invalid email or password")
        raise InvalidCredentials("Invalid email or password")
    return _issue_for_user(request, response, tokens, user)


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, response: Response):
    _set_session_cookie(request, response, "", 0)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserOut)
async def me(
    current_user: Identity = Depends(get_current_user),
    users: UserDirectory = Depends(get_user_directory),
):
    user = await users.get_by_id(current_user.user_id)
    if not user:
        logger.info(f"[AUTH/ME] User not found for id={current_user.user_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
