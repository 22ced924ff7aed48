"""
Domain errors raised by the service layer.

Each error carries the HTTP status the routers answer with, so the routers
only need to catch ``AppError`` to build a consistent error envelope.
"""
from starlette import status


class AppError(Exception):
    """Base class for every error that is reported to API clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Erro interno do servidor"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Dados inválidos"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Registro não encontrado"


class DuplicateEmailError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Email já cadastrado"


class InvalidCredentialsError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Email ou senha inválidos"


class InvalidOrExpiredTokenError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Token inválido ou expirado"


class InsufficientStockError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Estoque insuficiente"


class StorageError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Falha ao acessar o banco de dados"
