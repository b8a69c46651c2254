"""Public authentication endpoints: registration, login and password recovery."""

from fastapi import APIRouter, Depends, status

from app.api.deps import get_auth_service
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PasswordRecoveryRequest,
    PasswordResetRequest,
    RegisteredUser,
    RegisterRequest,
    RegisterResponse,
)
from app.schemas.profile import ProfileOut
from app.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description="Create an account together with its address and communication preferences.",
)
async def register(
    data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    """
    Register a new user account.

    Raises:
        400: Missing or invalid fields
        409: Email or CPF already registered
        500: Database error
    """
    user, token = await auth_service.register(data)
    return RegisterResponse(
        token=token,
        user=RegisteredUser(
            id=user.id,
            nome=user.nome_completo,
            email=user.email,
            cpf=user.cpf,
            nascimento=user.data_nascimento,
        ),
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="User login",
    description="Authenticate with email and password to receive a session token.",
)
async def login(
    data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """
    Authenticate user and return a session token with the full profile.

    Raises:
        400: Missing email or password
        401: Invalid credentials
        403: Account deactivated
    """
    user, token = await auth_service.login(email=data.email, password=data.senha)
    return LoginResponse(token=token, user=ProfileOut.model_validate(user))


@router.post(
    "/recuperar-senha",
    response_model=MessageResponse,
    summary="Request password recovery",
    description="Send a password reset link to the registered email.",
)
async def recover_password(
    data: PasswordRecoveryRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth_service.recover_password(data.email)
    return MessageResponse(message="Password reset link sent to the registered email")


@router.post(
    "/redefinir-senha",
    response_model=MessageResponse,
    summary="Reset password",
    description="Set a new password using the token from the recovery email.",
)
async def reset_password(
    data: PasswordResetRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth_service.reset_password(data.token, data.senha)
    return MessageResponse(message="Password updated successfully")
