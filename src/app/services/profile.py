"""Profile service: read and update the authenticated user's data."""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.config import settings
from app.core.exceptions import ConflictError, InternalError, NotFoundError, ValidationError
from app.models.address import Address
from app.models.preference import Preference
from app.models.user import User
from app.repositories.user import UserRepository, conflicting_field
from app.schemas.profile import ProfileUpdateRequest

logger = logging.getLogger(__name__)


class ProfileService:
    """Service layer for profile operations."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo
        self.db = user_repo.db

    async def get_profile(self, user_id: int) -> User:
        """Get user with address and preferences.

        Raises:
            NotFoundError: If the ID no longer resolves to a user
        """
        user = await self.user_repo.get_profile(user_id)
        if user is None:
            raise NotFoundError("USR_003")
        return user

    async def update_profile(self, user_id: int, data: ProfileUpdateRequest) -> User:
        """Update user, address and preferences in one transaction.

        Args:
            user_id: Authenticated user ID
            data: Validated update body

        Returns:
            The updated user

        Raises:
            NotFoundError: If the user no longer exists
            ConflictError: If the email belongs to another user
            InternalError: If any of the writes fails
        """
        user = await self.get_profile(user_id)

        if await self.user_repo.email_taken_by_other(data.email, user_id):
            await self.db.rollback()
            raise ConflictError("email")

        user_fields = {"nome_completo": data.nome_completo, "email": data.email}
        if data.data_nascimento is not None:
            user_fields["data_nascimento"] = data.data_nascimento
        address_fields = data.endereco.model_dump(exclude_unset=True) if data.endereco else {}
        preference_fields = (
            data.preferencias.model_dump(exclude_none=True) if data.preferencias else {}
        )

        try:
            for key, value in user_fields.items():
                setattr(user, key, value)
            self._apply_address(user, address_fields)
            self._apply_preferences(user, preference_fields)
            # User, address and preference rows go out in one flush.
            await self.db.flush()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            field = conflicting_field(e)
            if field == "email":
                raise ConflictError(field) from e
            self._log_db_failure(e)
            raise InternalError("DB_001") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            self._log_db_failure(e)
            raise InternalError("DB_001") from e
        except Exception:
            await self.db.rollback()
            raise

        logger.info("Profile updated", extra={"user_id": user.id})
        return user

    @staticmethod
    def _apply_address(user: User, fields: dict) -> None:
        if not fields:
            return
        if user.endereco is None:
            if not fields.get("cep"):
                raise ValidationError.for_field("cep", "CEP is required to create an address")
            user.endereco = Address(**fields)
            return
        for key, value in fields.items():
            if key == "cep" and value is None:
                continue
            setattr(user.endereco, key, value)

    @staticmethod
    def _apply_preferences(user: User, fields: dict) -> None:
        if user.preferencias is None:
            user.preferencias = Preference(**fields)
            return
        for key, value in fields.items():
            setattr(user.preferencias, key, value)

    @staticmethod
    def _log_db_failure(exc: Exception) -> None:
        if settings.debug:
            logger.exception("Profile update failed", extra={"error_type": type(exc).__name__})
        else:
            logger.error("Profile update failed", extra={"error_type": type(exc).__name__})
