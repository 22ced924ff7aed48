from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select, update

from gev_api.auth.models import AuthSession, PasswordReset, User
from gev_api.common.repository import SqlRepository


class UserRepository(SqlRepository):
    """Users, their login sessions and their password reset tokens."""

    def get(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.session.scalars(select(User).where(User.email == email.strip().lower())).first()

    def add_session(self, user_id: int, token_hash: str, expires_at: datetime) -> AuthSession:
        return self.save(AuthSession(usuario_id=user_id, token_hash=token_hash, expires_at=expires_at))

    def get_session_user(self, token_hash: str, now: datetime) -> Optional[User]:
        query = (
            select(User)
            .join(AuthSession, AuthSession.usuario_id == User.id)
            .where(AuthSession.token_hash == token_hash, AuthSession.expires_at > now)
        )
        return self.session.scalars(query).first()

    def revoke_sessions(self, user_id: int) -> None:
        # Part of the caller's unit of work
        self.session.execute(delete(AuthSession).where(AuthSession.usuario_id == user_id))

    def add_reset(self, user_id: int, token_hash: str, expires_at: datetime) -> PasswordReset:
        return self.save(PasswordReset(usuario_id=user_id, token_hash=token_hash, expires_at=expires_at))

    def get_reset(self, token_hash: str) -> Optional[PasswordReset]:
        return self.session.scalars(select(PasswordReset).where(PasswordReset.token_hash == token_hash)).first()

    def mark_reset_used(self, reset_id: int, when: datetime) -> bool:
        # Conditional so a token can only be consumed once, even concurrently
        result = self.session.execute(
            update(PasswordReset)
            .where(PasswordReset.id == reset_id, PasswordReset.used_at.is_(None))
            .values(used_at=when)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
