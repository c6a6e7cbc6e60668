from __future__ import annotations
from enum import Enum

from pydantic import BaseModel, ConfigDict

from clinic_queue.schemas.shared import UserOut


class TokenType(Enum):
    bearer = 'bearer'


class AuthResponse(BaseModel):
    model_config = ConfigDict(
        extra='forbid',
    )
    access_token: str
    # same value as access_token, the field name earlier clients read
    token: str
    token_type: TokenType
    expires_in: int
    user: UserOut
