"""Pydantic schemas for the user profile."""

from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class AddressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cep: str
    logradouro: str | None = None
    numero: str | None = None
    complemento: str | None = None
    bairro: str | None = None
    cidade: str | None = None
    estado: str | None = None


class PreferencesOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    alerta_caminhao: bool = False
    politicas_ambientais: bool = False
    dicas_descarte: bool = False


class ProfileOut(BaseModel):
    """Response model for user data (without password or timestamps)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    nome_completo: str
    cpf: str
    data_nascimento: date
    email: str
    endereco: AddressOut | None = None
    preferencias: PreferencesOut | None = None


class ProfileResponse(BaseModel):
    success: bool = True
    user: ProfileOut


class ProfileUpdateResponse(ProfileResponse):
    message: str = "Profile updated successfully"


class AddressUpdate(BaseModel):
    cep: str | None = Field(default=None, min_length=1, max_length=9)
    logradouro: str | None = Field(default=None, max_length=100)
    numero: str | None = Field(default=None, max_length=10)
    complemento: str | None = Field(default=None, max_length=50)
    bairro: str | None = Field(default=None, max_length=50)
    cidade: str | None = Field(default=None, max_length=50)
    estado: str | None = Field(default=None, max_length=2)


class PreferencesUpdate(BaseModel):
    alerta_caminhao: bool | None = None
    politicas_ambientais: bool | None = None
    dicas_descarte: bool | None = None


class ProfileUpdateRequest(BaseModel):
    """Request model for PUT /profile. Name and email are required."""

    nome_completo: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    data_nascimento: date | None = None
    endereco: AddressUpdate | None = None
    preferencias: PreferencesUpdate | None = None

    @field_validator("nome_completo")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Full name is required")
        return value.strip()
