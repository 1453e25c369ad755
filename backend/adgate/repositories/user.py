"""Account lookups used by registration, login and the entitlement gate."""

from __future__ import annotations

from sqlalchemy import exists, select

from adgate.models.user import User
from adgate.repositories.base import BaseRepository


def _normalize(email: str) -> str:
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """
    :class:`User` persistence.

    Entitlement columns are deliberately absent from ``_updatable_fields``:
    the payment collaborator owns them.
    """

    model = User

    def _sortable_fields(self):
        return {"id": User.id, "email": User.email, "created_at": User.created_at}

    def _filterable_fields(self):
        return {
            "email": User.email,
            "external_identity_id": User.external_identity_id,
            "verification_token": User.verification_token,
        }

    def _updatable_fields(self):
        return {"nickname", "is_verified", "verification_token"}

    def create(
        self,
        *,
        email: str,
        nickname: str,
        password: str | None = None,
        external_identity_id: str | None = None,
        verification_token: str | None = None,
    ) -> User:
        """Stage a FREE, unverified account and flush to assign its id."""
        user = User(
            email=email,
            nickname=nickname,
            external_identity_id=external_identity_id,
            verification_token=verification_token,
        )
        if password is not None:
            user.password = password
        return self.add(user)

    def get_by_email(self, email: str) -> User | None:
        return self.find_one(email=_normalize(email))

    def exists_by_email(self, email: str) -> bool:
        stmt = select(exists().where(User.email == _normalize(email)))
        return bool(self.session.scalar(stmt))

    def get_by_verification_token(self, token: str) -> User | None:
        return self.find_one(verification_token=token) if token else None

    def authenticate(self, email: str, password: str) -> User | None:
        """
        Resolve login credentials.

        :returns: The matching user, or ``None`` for an unknown email and a
            wrong password alike.
        """
        user = self.get_by_email(email)
        return user if user is not None and user.verify_password(password) else None
