"""Pydantic schemas for authentication endpoints."""

from datetime import date
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, EmailStr, Field, field_validator

from app.core.documents import CPF_LENGTH, normalize_cpf
from app.schemas.profile import ProfileOut


def _strip_password(value):
    # Clients send passwords with stray whitespace from copy/paste. The value
    # that is hashed on register or reset must be the one verified on login.
    if isinstance(value, str):
        return value.strip()
    return value


Password = Annotated[str, BeforeValidator(_strip_password)]


class RegisterRequest(BaseModel):
    """Request model for account registration.

    Flat body: user fields, address fields and the three preference flags.
    """

    nome: str = Field(..., min_length=1, max_length=100, description="Full name")
    cpf: str = Field(..., min_length=1, description="CPF, formatted or digits only")
    nascimento: date = Field(..., description="Birth date (YYYY-MM-DD)")
    email: EmailStr = Field(..., description="User email address")
    senha: Password = Field(..., min_length=1, description="Password")

    cep: str = Field(..., min_length=1, max_length=9)
    logradouro: str | None = Field(default=None, max_length=100)
    numero: str | None = Field(default=None, max_length=10)
    complemento: str | None = Field(default=None, max_length=50)
    bairro: str | None = Field(default=None, max_length=50)
    cidade: str | None = Field(default=None, max_length=50)
    estado: str | None = Field(default=None, max_length=2)

    caminhao: bool = False
    politicas: bool = False
    dicas: bool = False

    @field_validator("nome")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Full name is required")
        return value.strip()

    @field_validator("cpf")
    @classmethod
    def cpf_has_eleven_digits(cls, value: str) -> str:
        cleaned = normalize_cpf(value)
        if len(cleaned) != CPF_LENGTH:
            raise ValueError("CPF must have 11 digits")
        return cleaned


class LoginRequest(BaseModel):
    """Request model for user login."""

    email: EmailStr = Field(..., description="User email address")
    senha: Password = Field(..., min_length=1, description="User password")


class PasswordRecoveryRequest(BaseModel):
    email: EmailStr


class PasswordResetRequest(BaseModel):
    token: str = Field(..., min_length=1)
    senha: Password = Field(..., min_length=1, description="New password")


class RegisteredUser(BaseModel):
    """Public projection of a newly registered user."""

    id: int
    nome: str
    email: str
    cpf: str
    nascimento: date


class RegisterResponse(BaseModel):
    success: bool = True
    message: str = "User registered successfully"
    token: str
    user: RegisteredUser


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    user: ProfileOut


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class TestEmailResponse(MessageResponse):
    messageId: str
