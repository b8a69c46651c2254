"""Integration tests for the protected profile endpoints."""

from datetime import date, datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.security import create_session_token, hash_password
from app.models import Address, Preference, User
from app.repositories.user import UserRepository


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    user = User(
        nome_completo="Other User",
        cpf="111.222.333-44",
        data_nascimento=date(1992, 3, 3),
        email="other@example.com",
        senha=hash_password("otherpass"),
    )
    await UserRepository(db_session).add_with_profile(
        user, Address(cep="30130-000"), Preference()
    )
    await db_session.commit()
    return user


@pytest.fixture
def update_payload() -> dict:
    return {
        "nome_completo": "Test User Updated",
        "data_nascimento": "1986-02-21",
        "email": "updated@example.com",
        "endereco": {
            "cep": "04538-133",
            "logradouro": "Avenida Brigadeiro Faria Lima",
            "numero": "3477",
            "cidade": "São Paulo",
            "estado": "sp",
        },
        "preferencias": {
            "alerta_caminhao": True,
            "politicas_ambientais": False,
            "dicas_descarte": True,
        },
    }


class TestGetProfile:
    """Test GET /api/auth/profile."""

    @pytest.mark.asyncio
    async def test_get_profile(self, client: AsyncClient, test_user: User, auth_headers: dict):
        response = await client.get("/api/auth/profile", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        user = data["user"]
        assert user["id"] == test_user.id
        assert user["nome_completo"] == "Test User"
        assert user["cpf"] == "98765432100"
        assert user["data_nascimento"] == "1985-01-20"
        assert user["endereco"]["cep"] == "20040-020"
        assert user["preferencias"] == {
            "alerta_caminhao": False,
            "politicas_ambientais": True,
            "dicas_descarte": False,
        }
        assert "senha" not in user
        assert "created_at" not in user
        assert "updated_at" not in user

    @pytest.mark.asyncio
    async def test_get_profile_without_token(self, client: AsyncClient):
        response = await client.get("/api/auth/profile")

        assert response.status_code == 401
        assert response.json()["error_code"] == "AUTH_002"

    @pytest.mark.asyncio
    async def test_get_profile_with_malformed_header(self, client: AsyncClient):
        response = await client.get(
            "/api/auth/profile", headers={"Authorization": "NotBearer token"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_get_profile_with_invalid_token(self, client: AsyncClient):
        response = await client.get(
            "/api/auth/profile", headers={"Authorization": "Bearer invalid.token.here"}
        )

        assert response.status_code == 401
        data = response.json()
        assert data["error_code"] == "AUTH_003"
        assert data["message"] == "Invalid token, authenticate again."

    @pytest.mark.asyncio
    async def test_expired_token_is_rejected(self, client: AsyncClient, test_user: User):
        """A token presented after its 8 hour lifetime is expired."""
        issued_at = datetime.now(timezone.utc) - timedelta(
            hours=settings.session_expire_hours, seconds=1
        )
        token = create_session_token(
            test_user.id, test_user.email, test_user.nome_completo, issued_at=issued_at
        )

        response = await client.get(
            "/api/auth/profile", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        data = response.json()
        assert data["error_code"] == "AUTH_004"
        assert data["message"] == "Session expired, log in again."

    @pytest.mark.asyncio
    async def test_token_just_before_expiry_is_accepted(self, client: AsyncClient, test_user: User):
        issued_at = datetime.now(timezone.utc) - timedelta(
            hours=settings.session_expire_hours
        ) + timedelta(seconds=2)
        token = create_session_token(
            test_user.id, test_user.email, test_user.nome_completo, issued_at=issued_at
        )

        response = await client.get(
            "/api/auth/profile", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_get_profile_for_deleted_user(
        self, client: AsyncClient, db_session: AsyncSession, test_user: User, auth_headers: dict
    ):
        """A valid token for a user that no longer exists yields 404."""
        await db_session.execute(delete(User).where(User.id == test_user.id))
        await db_session.commit()
        db_session.expunge_all()

        response = await client.get("/api/auth/profile", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error_code"] == "USR_003"

    @pytest.mark.asyncio
    async def test_deleting_user_cascades(
        self, db_session: AsyncSession, test_user: User
    ):
        await db_session.execute(delete(User).where(User.id == test_user.id))
        await db_session.commit()

        addresses = await db_session.execute(select(Address))
        preferences = await db_session.execute(select(Preference))
        assert addresses.scalars().all() == []
        assert preferences.scalars().all() == []


class TestUpdateProfile:
    """Test PUT /api/auth/profile."""

    @pytest.mark.asyncio
    async def test_update_profile(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        test_user: User,
        auth_headers: dict,
        update_payload: dict,
    ):
        response = await client.put("/api/auth/profile", headers=auth_headers, json=update_payload)

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["nome_completo"] == "Test User Updated"
        assert user["email"] == "updated@example.com"
        assert user["data_nascimento"] == "1986-02-21"
        assert user["endereco"]["cep"] == "04538-133"
        assert user["endereco"]["estado"] == "SP"
        assert user["preferencias"]["alerta_caminhao"] is True
        assert user["preferencias"]["politicas_ambientais"] is False

        stored = await UserRepository(db_session).get_profile(test_user.id)
        assert stored.email == "updated@example.com"
        assert stored.endereco.logradouro == "Avenida Brigadeiro Faria Lima"
        assert stored.preferencias.dicas_descarte is True
        # CPF is not editable through the profile
        assert stored.cpf == "98765432100"

    @pytest.mark.asyncio
    async def test_update_keeps_omitted_fields(
        self, client: AsyncClient, test_user: User, auth_headers: dict
    ):
        response = await client.put(
            "/api/auth/profile",
            headers=auth_headers,
            json={"nome_completo": "Only Name", "email": test_user.email},
        )

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["data_nascimento"] == "1985-01-20"
        assert user["endereco"]["cidade"] == "Rio de Janeiro"
        assert user["preferencias"]["politicas_ambientais"] is True

    @pytest.mark.asyncio
    async def test_update_to_email_of_other_user(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        test_user: User,
        other_user: User,
        auth_headers: dict,
        update_payload: dict,
    ):
        """Conflicting email leaves user, address and preference untouched."""
        user_id = test_user.id
        update_payload["email"] = other_user.email

        response = await client.put("/api/auth/profile", headers=auth_headers, json=update_payload)

        assert response.status_code == 409
        assert response.json()["details"] == [{"field": "email", "message": "value already exists"}]

        result = await db_session.execute(
            select(User).where(User.id == user_id).execution_options(populate_existing=True)
        )
        stored = result.scalar_one()
        assert stored.nome_completo == "Test User"
        assert stored.email == "testuser@example.com"
        address = (
            await db_session.execute(select(Address).where(Address.usuario_id == user_id))
        ).scalar_one()
        preference = (
            await db_session.execute(
                select(Preference).where(Preference.usuario_id == user_id)
            )
        ).scalar_one()
        assert address.cep == "20040-020"
        assert preference.alerta_caminhao is False

    @pytest.mark.asyncio
    async def test_update_own_email_is_not_a_conflict(
        self, client: AsyncClient, test_user: User, auth_headers: dict, update_payload: dict
    ):
        update_payload["email"] = test_user.email

        response = await client.put("/api/auth/profile", headers=auth_headers, json=update_payload)

        assert response.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["nome_completo", "email"])
    async def test_update_missing_required_field(
        self,
        client: AsyncClient,
        test_user: User,
        auth_headers: dict,
        update_payload: dict,
        field: str,
    ):
        del update_payload[field]

        response = await client.put("/api/auth/profile", headers=auth_headers, json=update_payload)

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == field

    @pytest.mark.asyncio
    async def test_update_rejects_invalid_state(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        test_user: User,
        auth_headers: dict,
        update_payload: dict,
    ):
        """A failure on a dependent row rolls back the user changes too."""
        user_id = test_user.id
        update_payload["endereco"]["estado"] = "S1"

        response = await client.put("/api/auth/profile", headers=auth_headers, json=update_payload)

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "estado"

        result = await db_session.execute(
            select(User).where(User.id == user_id).execution_options(populate_existing=True)
        )
        assert result.scalar_one().nome_completo == "Test User"

    @pytest.mark.asyncio
    async def test_update_without_token(self, client: AsyncClient, update_payload: dict):
        response = await client.put("/api/auth/profile", json=update_payload)

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_missing_address_without_cep(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        """Creating an address row needs a CEP; the request is rejected, not a 500."""
        user = User(
            nome_completo="No Address",
            cpf="222.333.444-55",
            data_nascimento=date(1995, 8, 8),
            email="noaddress@example.com",
            senha=hash_password("password123"),
        )
        db_session.add(user)
        await db_session.commit()
        user_id = user.id
        token = create_session_token(user.id, user.email, user.nome_completo)

        response = await client.put(
            "/api/auth/profile",
            headers={"Authorization": f"Bearer {token}"},
            json={
                "nome_completo": "No Address",
                "email": "noaddress@example.com",
                "endereco": {"cidade": "Recife"},
            },
        )

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "cep"
        addresses = await db_session.execute(
            select(Address).where(Address.usuario_id == user_id)
        )
        assert addresses.scalars().all() == []
