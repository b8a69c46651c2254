import os
import sys
from datetime import date
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

sys.path.append(str(Path(__file__).parents[1] / "src"))

ENV_TEST_PATH = Path(__file__).parents[1] / ".env.test"
TEST_DB_FILE = Path(__file__).parent / "pytest.db"


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key, value)


_load_env_file(ENV_TEST_PATH)

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{TEST_DB_FILE}")

# Settings are read at import time, so these must exist before importing app.
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("APP_ENV", "test")

from app.db.session import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.services.mail import get_mailer  # noqa: E402

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

if test_engine.dialect.name == "sqlite":

    @event.listens_for(test_engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on.
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class FakeMailer:
    """Records outgoing messages instead of talking to SMTP."""

    def __init__(self, error: Exception | None = None):
        self.sent: list[dict] = []
        self.error = error

    async def send(self, to: str, subject: str, text: str, html: str | None = None) -> str:
        if self.error is not None:
            raise self.error
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html})
        return f"<{len(self.sent)}@test>"


@pytest.fixture(scope="function")
async def setup_database():
    """Create tables for tests that need the database, and drop them after.

    This fixture is intentionally NOT autouse so pure unit tests can run
    without touching the database.
    """
    from app.models.base import BaseModel

    async with test_engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.drop_all)

    # Dispose of all connections so none is reused across event loops
    await test_engine.dispose()


@pytest.fixture
async def db_session(setup_database):
    """Provide test database session with fresh connection per test."""
    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture
def registration_payload() -> dict:
    return {
        "nome": "Maria Silva",
        "cpf": "123.456.789-00",
        "nascimento": "1990-05-17",
        "email": "maria@example.com",
        "senha": "segredo123",
        "cep": "01310-100",
        "logradouro": "Avenida Paulista",
        "numero": "1000",
        "complemento": "Apto 12",
        "bairro": "Bela Vista",
        "cidade": "São Paulo",
        "estado": "SP",
        "caminhao": True,
        "politicas": False,
        "dicas": True,
    }


@pytest.fixture
async def test_user(db_session: AsyncSession):
    """Create a test user with address and preferences."""
    from app.core.security import hash_password
    from app.models import Address, Preference, User
    from app.repositories.user import UserRepository

    repo = UserRepository(db_session)
    user = User(
        nome_completo="Test User",
        cpf="987.654.321-00",
        data_nascimento=date(1985, 1, 20),
        email="testuser@example.com",
        senha=hash_password("password123"),
    )
    await repo.add_with_profile(
        user,
        Address(cep="20040-020", cidade="Rio de Janeiro", estado="RJ"),
        Preference(alerta_caminhao=False, politicas_ambientais=True, dicas_descarte=False),
    )
    await db_session.commit()
    return user


@pytest.fixture
async def auth_headers(test_user):
    """Provide authentication headers with valid session token."""
    from app.core.security import create_session_token

    token = create_session_token(test_user.id, test_user.email, test_user.nome_completo)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
async def client(db_session: AsyncSession, mailer: FakeMailer):
    """Provide test client with database and mail overrides."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer

    # Unhandled errors are rendered by the generic handler; assert on the response.
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
