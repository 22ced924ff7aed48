"""
Registration, login and password reset.

Passwords are hashed with bcrypt. Session and reset tokens are random strings
handed to the client once; the database only keeps their sha256 digests.
"""
import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple

import bcrypt
from sqlalchemy.exc import IntegrityError

from gev_api.auth.models import User
from gev_api.auth.repository import UserRepository
from gev_api.auth.schemas import LoginData, UserLogin, UserOut, UserRegister
from gev_api.common.config import RESET_TOKEN_TTL_MINUTES, SESSION_TTL_HOURS, now_local
from gev_api.common.exceptions import (
    DuplicateEmailError, InvalidCredentialsError, InvalidOrExpiredTokenError, StorageError,
)

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes and newer releases reject longer input
BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8")[:BCRYPT_MAX_BYTES], bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:BCRYPT_MAX_BYTES], password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def new_token() -> Tuple[str, str]:
    """Return a fresh opaque token and the digest to store for it."""
    token = secrets.token_urlsafe(32)
    return token, hash_token(token)


def register(repo: UserRepository, data: UserRegister) -> UserOut:
    """
    Create a user account.

    Raises:
        DuplicateEmailError: If the email is already registered
    """
    email = data.email.strip().lower()
    if repo.get_by_email(email) is not None:
        raise DuplicateEmailError()

    user = User(nome=data.nome, email=email, senha_hash=hash_password(data.senha))
    try:
        repo.save(user)
    except StorageError as e:
        # Another request registered the same email between the check and the insert
        if isinstance(e.__cause__, IntegrityError):
            raise DuplicateEmailError() from e
        raise
    logger.info("Registered user %s", user.id)
    return UserOut.model_validate(user)


def login(repo: UserRepository, data: UserLogin, now: Optional[datetime] = None) -> LoginData:
    """
    Check the credentials and open a session.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password, with the same message
    """
    now = now or now_local()
    user = repo.get_by_email(data.email)
    if user is None or not verify_password(data.senha, user.senha_hash):
        logger.info("Failed login attempt")
        raise InvalidCredentialsError()

    token, digest = new_token()
    expires_at = now + timedelta(hours=SESSION_TTL_HOURS)
    repo.add_session(user.id, digest, expires_at)
    logger.info("User %s logged in", user.id)
    return LoginData(user=UserOut.model_validate(user), token=token, expires_at=expires_at)


def authenticate(repo: UserRepository, token: str, now: Optional[datetime] = None) -> UserOut:
    """
    Resolve a bearer token to its user.

    Raises:
        InvalidCredentialsError: If the token is unknown, revoked or expired
    """
    user = repo.get_session_user(hash_token(token), now or now_local())
    if user is None:
        raise InvalidCredentialsError("Sessão inválida ou expirada")
    return UserOut.model_validate(user)


def request_password_reset(repo: UserRepository, email: str,
                           now: Optional[datetime] = None) -> Optional[Tuple[User, str]]:
    """
    Issue a reset token for the account with this email.

    Returns:
        The user and the plain token to send, or None when no account matches.
        Callers must answer both cases the same way.
    """
    user = repo.get_by_email(email)
    if user is None:
        logger.info("Password reset requested for an unknown email")
        return None

    token, digest = new_token()
    now = now or now_local()
    repo.add_reset(user.id, digest, now + timedelta(minutes=RESET_TOKEN_TTL_MINUTES))
    logger.info("Password reset token issued for user %s", user.id)
    return user, token


def reset_password(repo: UserRepository, token: str, nova_senha: str,
                   now: Optional[datetime] = None) -> None:
    """
    Set a new password using a reset token. The token is consumed and every
    open session of the user is revoked.

    Raises:
        InvalidOrExpiredTokenError: If the token is unknown, already used or expired
    """
    now = now or now_local()
    reset = repo.get_reset(hash_token(token))
    if reset is None or reset.used_at is not None or reset.expires_at <= now:
        raise InvalidOrExpiredTokenError()

    user = repo.get(reset.usuario_id)
    if user is None or not repo.mark_reset_used(reset.id, now):
        repo.rollback()
        raise InvalidOrExpiredTokenError()

    user.senha_hash = hash_password(nova_senha)
    repo.revoke_sessions(user.id)
    repo.commit()
    logger.info("Password reset completed for user %s", user.id)
