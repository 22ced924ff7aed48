"""
Authentication dependencies for FastAPI endpoints.
"""
from typing import Optional

from fastapi import Depends, Header

from gev_api.auth.repository import UserRepository
from gev_api.auth.schemas import UserOut
from gev_api.auth.services import authenticate
from gev_api.common.dependencies import get_user_repository
from gev_api.common.exceptions import InvalidCredentialsError


def get_current_user(
        authorization: Optional[str] = Header(None),
        repo: UserRepository = Depends(get_user_repository)
) -> UserOut:
    """
    Resolve the ``Authorization: Bearer <token>`` header to a user.

    Raises:
        InvalidCredentialsError: If the header is missing or the session is not valid
    """
    if not authorization:
        raise InvalidCredentialsError("Cabeçalho Authorization obrigatório")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise InvalidCredentialsError("Cabeçalho Authorization inválido")

    return authenticate(repo, token.strip())
