"""User repository for account and profile queries."""
import re

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.documents import normalize_cpf
from app.models.address import Address
from app.models.preference import Preference
from app.models.user import User
from app.repositories.base import BaseRepository

# Unique constraints and indexes, by the field reported to the client.
UNIQUE_CONSTRAINT_FIELDS = {
    "uq_usuarios_email": "email",
    "uq_usuarios_cpf": "cpf",
    "enderecos_usuario_id_key": "usuario_id",
    "preferencias_usuario_unique": "usuario_id",
}

# SQLite names the columns instead: "UNIQUE constraint failed: usuarios.email"
UNIQUE_COLUMN_FIELDS = {
    "usuarios.email": "email",
    "usuarios.cpf": "cpf",
    "enderecos.usuario_id": "usuario_id",
    "preferencias_comunicacao.usuario_id": "usuario_id",
}

_PG_CONSTRAINT = re.compile(r'unique constraint "(?P<name>[^"]+)"')
_SQLITE_COLUMNS = re.compile(r"UNIQUE constraint failed: (?P<columns>[\w.]+(?:, [\w.]+)*)")


class UserRepository(BaseRepository[User]):
    """Repository for User model with authentication queries."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    async def get_by_email(self, email: str) -> User | None:
        """Find user by email address (used for login and recovery)."""
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_profile(self, user_id: int) -> User | None:
        """Load a user together with address and preferences."""
        result = await self.db.execute(
            select(User)
            .options(selectinload(User.endereco), selectinload(User.preferencias))
            .where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_profile_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User)
            .options(selectinload(User.endereco), selectinload(User.preferencias))
            .where(User.email == email)
        )
        return result.scalar_one_or_none()

    async def find_by_email_or_cpf(self, email: str, cpf: str) -> User | None:
        """Find any user already holding this email or (normalized) CPF."""
        result = await self.db.execute(
            select(User)
            .where(or_(User.email == email, User.cpf == normalize_cpf(cpf)))
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def email_taken_by_other(self, email: str, user_id: int) -> bool:
        """Check if email belongs to a user other than ``user_id``."""
        result = await self.db.execute(
            select(User.id).where(User.email == email, User.id != user_id).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def add_with_profile(
        self, user: User, address: Address, preference: Preference
    ) -> User:
        """Stage a user with its address and preference rows.

        The user row is inserted first; the two dependent rows go out in the
        same flush with no ordering between them. Nothing is committed.
        """
        user.endereco = address
        user.preferencias = preference
        self.db.add(user)
        await self.db.flush()
        return user


def _constraint_name(orig: object) -> str | None:
    # asyncpg chains its UniqueViolationError as the cause; psycopg2 uses diag.
    for source in (orig, getattr(orig, "__cause__", None), getattr(orig, "diag", None)):
        name = getattr(source, "constraint_name", None)
        if isinstance(name, str) and name:
            return name
    match = _PG_CONSTRAINT.search(str(orig))
    return match.group("name") if match else None


def conflicting_field(exc: IntegrityError) -> str | None:
    """Name the unique field a rejected write collided with, if any.

    Resolved from the constraint identity only: the constraint name on
    PostgreSQL, the ``table.column`` list on SQLite. Row values in the driver
    message are never inspected.
    """
    orig = exc.orig if exc.orig is not None else exc

    name = _constraint_name(orig)
    if name is not None:
        return UNIQUE_CONSTRAINT_FIELDS.get(name)

    match = _SQLITE_COLUMNS.search(str(orig))
    if match:
        for column in match.group("columns").split(", "):
            if column in UNIQUE_COLUMN_FIELDS:
                return UNIQUE_COLUMN_FIELDS[column]
    return None
