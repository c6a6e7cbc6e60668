# clinic_queue/schemas/register_request.py
from typing import Annotated

from pydantic import BaseModel, EmailStr, Field

from clinic_queue.config.constants import NAME_MIN_LENGTH, PASSWORD_MIN_LENGTH


class RegisterRequest(BaseModel):
    name: Annotated[str, Field(min_length=NAME_MIN_LENGTH, max_length=255)]
    email: EmailStr
    password: Annotated[str, Field(min_length=PASSWORD_MIN_LENGTH, max_length=128)]
