"""User model for authentication and profile data."""
from datetime import date
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import Boolean, Date, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from app.core.documents import CPF_LENGTH, normalize_cpf
from app.core.exceptions import ValidationError
from app.models.base import BaseModel


class User(BaseModel):
    """User model representing a registered account."""

    __tablename__ = "usuarios"
    __table_args__ = (
        UniqueConstraint("email", name="uq_usuarios_email"),
        UniqueConstraint("cpf", name="uq_usuarios_cpf"),
    )

    nome_completo: Mapped[str] = mapped_column(String(100), nullable=False)
    cpf: Mapped[str] = mapped_column(String(14), nullable=False)
    data_nascimento: Mapped[date] = mapped_column(Date, nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    # Argon2 hash, never the plain password.
    senha: Mapped[str] = mapped_column(String(255), nullable=False)
    ativo: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    # Rely on DB-level ON DELETE CASCADE; prevent SQLAlchemy from NULLing FKs on delete.
    endereco: Mapped[Optional["Address"]] = relationship(
        "Address",
        back_populates="usuario",
        uselist=False,
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    preferencias: Mapped[Optional["Preference"]] = relationship(
        "Preference",
        back_populates="usuario",
        uselist=False,
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @validates("cpf")
    def _normalize_cpf(self, key: str, value: str) -> str:
        cleaned = normalize_cpf(value)
        if len(cleaned) != CPF_LENGTH:
            raise ValidationError.for_field(key, "CPF must have 11 digits", value)
        return cleaned

    @validates("nome_completo")
    def _validate_name(self, key: str, value: str) -> str:
        if not value or not value.strip():
            raise ValidationError.for_field(key, "Full name is required", value)
        return value.strip()

    @validates("email")
    def _validate_email(self, key: str, value: str) -> str:
        try:
            validate_email(value or "", check_deliverability=False)
        except EmailNotValidError as e:
            raise ValidationError.for_field(key, "Invalid email", value) from e
        return value

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, ativo={self.ativo})>"
