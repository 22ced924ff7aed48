"""
Authentication routers: account creation, login and password recovery.
"""
from fastapi import APIRouter, Depends
from starlette import status

from gev_api.auth.dependencies import get_current_user
from gev_api.auth.repository import UserRepository
from gev_api.auth.schemas import (
    ForgotPasswordRequest, LoginData, ResetPasswordRequest, UserLogin, UserOut, UserRegister,
)
from gev_api.auth.services import login, register, request_password_reset, reset_password
from gev_api.common.config import RESET_TOKEN_TTL_MINUTES
from gev_api.common.dependencies import get_user_repository
from gev_api.common.email_service import email_service
from gev_api.common.exceptions import AppError
from gev_api.common.responses import app_error_response, success_response, unexpected_error_response
from gev_api.common.schemas import ApiResponse

router = APIRouter()

RESET_REQUESTED_MESSAGE = "Se o email estiver cadastrado, você receberá as instruções de redefinição."


@router.post("/register", response_model=ApiResponse[UserOut], status_code=status.HTTP_201_CREATED)
def register_user(user_data: UserRegister, repo: UserRepository = Depends(get_user_repository)):
    """
    Create a new user account.
    """
    try:
        user = register(repo, user_data)
        return success_response(user, message="Usuário cadastrado com sucesso!",
                                status_code=status.HTTP_201_CREATED)
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@router.post("/login", response_model=ApiResponse[LoginData])
def login_user(credentials: UserLogin, repo: UserRepository = Depends(get_user_repository)):
    """
    Exchange email and password for a bearer token.
    """
    try:
        return success_response(login(repo, credentials), message="Login realizado com sucesso!")
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@router.post("/forgot-password", response_model=ApiResponse[dict])
async def forgot_password(request: ForgotPasswordRequest,
                          repo: UserRepository = Depends(get_user_repository)):
    """
    Email a password reset code.

    The answer is the same whether or not the email belongs to an account.
    """
    try:
        issued = request_password_reset(repo, request.email)
        if issued is not None:
            user, token = issued
            await email_service.send_password_reset_email(
                user.email, token, RESET_TOKEN_TTL_MINUTES, nome=user.nome)
        return success_response(message=RESET_REQUESTED_MESSAGE)
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@router.post("/reset-password", response_model=ApiResponse[dict])
def reset_user_password(request: ResetPasswordRequest,
                        repo: UserRepository = Depends(get_user_repository)):
    """
    Set a new password with the code received by email.
    """
    try:
        reset_password(repo, request.token, request.nova_senha)
        return success_response(message="Senha redefinida com sucesso!")
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@router.get("/me", response_model=ApiResponse[UserOut])
def read_current_user(user: UserOut = Depends(get_current_user)):
    return success_response(user)
