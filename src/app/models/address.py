"""Address model, one per user."""
from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from app.core.exceptions import ValidationError
from app.models.base import BaseModel


class Address(BaseModel):
    """Postal address owned by a single user."""

    __tablename__ = "enderecos"

    usuario_id: Mapped[int] = mapped_column(
        ForeignKey("usuarios.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    cep: Mapped[str] = mapped_column(String(9), nullable=False)
    logradouro: Mapped[str | None] = mapped_column(String(100), nullable=True)
    numero: Mapped[str | None] = mapped_column(String(10), nullable=True)
    complemento: Mapped[str | None] = mapped_column(String(50), nullable=True)
    bairro: Mapped[str | None] = mapped_column(String(50), nullable=True)
    cidade: Mapped[str | None] = mapped_column(String(50), nullable=True)
    estado: Mapped[str | None] = mapped_column(String(2), nullable=True)

    usuario: Mapped["User"] = relationship("User", back_populates="endereco")

    @validates("cep")
    def _validate_cep(self, key: str, value: str) -> str:
        if not value or not str(value).strip():
            raise ValidationError.for_field(key, "CEP is required", value)
        return str(value).strip()

    @validates("estado")
    def _validate_estado(self, key: str, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        value = value.strip().upper()
        if len(value) != 2 or not value.isalpha():
            raise ValidationError.for_field(key, "State must be a 2-letter code", value)
        return value

    def __repr__(self) -> str:
        return f"<Address(id={self.id}, usuario_id={self.usuario_id}, cep={self.cep})>"
