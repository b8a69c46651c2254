"""Communication preferences, one row per user."""
from sqlalchemy import Boolean, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel


class Preference(BaseModel):
    """Which notices a user wants to receive."""

    __tablename__ = "preferencias_comunicacao"
    __table_args__ = (
        Index("preferencias_usuario_unique", "usuario_id", unique=True),
    )

    usuario_id: Mapped[int] = mapped_column(
        ForeignKey("usuarios.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
    )
    alerta_caminhao: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    politicas_ambientais: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    dicas_descarte: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    usuario: Mapped["User"] = relationship("User", back_populates="preferencias")

    def __repr__(self) -> str:
        return f"<Preference(id={self.id}, usuario_id={self.usuario_id})>"
