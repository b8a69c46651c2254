"""Authentication service with business logic."""

import logging
from urllib.parse import urlencode

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.config import settings
from app.core.exceptions import (
    AuthError,
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
)
from app.core.security import (
    create_password_reset_token,
    create_session_token,
    decode_password_reset_token,
    hash_password,
    password_fingerprint,
    verify_password,
)
from app.models.address import Address
from app.models.preference import Preference
from app.models.user import User
from app.repositories.user import UserRepository, conflicting_field
from app.schemas.auth import RegisterRequest
from app.services.mail import Mailer, password_reset_email

logger = logging.getLogger(__name__)


class AuthService:
    """Service for registration, login and password recovery."""

    def __init__(self, user_repo: UserRepository, mailer: Mailer | None = None):
        """
        Initialize authentication service.

        Args:
            user_repo: User repository for database operations
            mailer: Outgoing mail transport (only needed for recovery)
        """
        self.user_repo = user_repo
        self.db = user_repo.db
        self.mailer = mailer

    async def register(self, data: RegisterRequest) -> tuple[User, str]:
        """
        Register a new user with address and preferences.

        Args:
            data: Validated registration body

        Returns:
            Tuple of (created user, session token)

        Raises:
            ConflictError: If email or CPF already exists
            InternalError: If the transaction fails for any other storage reason
        """
        # Fast path for a precise message; the unique constraints stay authoritative.
        existing = await self.user_repo.find_by_email_or_cpf(data.email, data.cpf)
        if existing is not None:
            await self.db.rollback()
            raise ConflictError("cpf" if existing.cpf == data.cpf else "email")

        user = User(
            nome_completo=data.nome,
            cpf=data.cpf,
            data_nascimento=data.nascimento,
            email=data.email,
            senha=hash_password(data.senha),
        )
        address = Address(
            cep=data.cep,
            logradouro=data.logradouro,
            numero=data.numero,
            complemento=data.complemento,
            bairro=data.bairro,
            cidade=data.cidade,
            estado=data.estado,
        )
        preference = Preference(
            alerta_caminhao=data.caminhao,
            politicas_ambientais=data.politicas,
            dicas_descarte=data.dicas,
        )

        try:
            await self.user_repo.add_with_profile(user, address, preference)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            field = conflicting_field(e)
            if field in ("email", "cpf"):
                logger.info("Registration lost a uniqueness race", extra={"field": field})
                raise ConflictError(field) from e
            self._log_db_failure("Registration failed", e)
            raise InternalError("DB_001") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            self._log_db_failure("Registration failed", e)
            raise InternalError("DB_001") from e

        logger.info("User registered", extra={"user_id": user.id})
        token = create_session_token(user.id, user.email, user.nome_completo)
        return user, token

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """
        Authenticate user and issue a session token.

        Args:
            email: User email address
            password: Plain text password

        Returns:
            Tuple of (user with address and preferences, session token)

        Raises:
            AuthError: If credentials are invalid (same error for unknown email)
            ForbiddenError: If the account is deactivated
        """
        user = await self.user_repo.get_profile_by_email(email)
        if user is None or not verify_password(password, user.senha):
            raise AuthError("AUTH_001")

        if not user.ativo:
            raise ForbiddenError("AUTH_005")

        token = create_session_token(user.id, user.email, user.nome_completo)
        return user, token

    async def recover_password(self, email: str) -> None:
        """
        E-mail a password reset link to the account owner.

        Raises:
            NotFoundError: If no user has this email
            InternalError: If the mail transport fails
        """
        user = await self.user_repo.get_by_email(email)
        if user is None:
            raise NotFoundError("USR_004")

        token = create_password_reset_token(user.id, user.senha)
        subject, text, html = password_reset_email(
            user.nome_completo,
            self._reset_url(token),
            settings.password_reset_expire_minutes,
        )
        await self.mailer.send(user.email, subject, text, html)
        logger.info("Password reset link sent", extra={"user_id": user.id})

    async def reset_password(self, token: str, new_password: str) -> None:
        """
        Replace the password of the account a reset token was issued for.

        Raises:
            AuthError: AUTH_006 if the token is invalid, expired or already used
        """
        user_id, fingerprint = decode_password_reset_token(token)
        user = await self.user_repo.get_by_id(user_id)
        if user is None or password_fingerprint(user.senha) != fingerprint:
            raise AuthError("AUTH_006")

        try:
            await self.user_repo.update(user, {"senha": hash_password(new_password)})
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            self._log_db_failure("Password reset failed", e)
            raise InternalError("DB_001") from e

        logger.info("Password reset", extra={"user_id": user.id})

    @staticmethod
    def _reset_url(token: str) -> str:
        base = (settings.frontend_url or f"http://localhost:{settings.port}").rstrip("/")
        return f"{base}/redefinir-senha?{urlencode({'token': token})}"

    @staticmethod
    def _log_db_failure(message: str, exc: Exception) -> None:
        # Do not log str(exc) outside debug: it carries SQL and bound parameters.
        if settings.debug:
            logger.exception(message, extra={"error_type": type(exc).__name__})
        else:
            logger.error(message, extra={"error_type": type(exc).__name__})
