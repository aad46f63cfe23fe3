from typing import List, Optional

from sqlalchemy import exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from user_management_api.models.user import User

# Columns copied from an incoming entity onto the persisted row on update
UPDATABLE_FIELDS = ("username", "email", "first_name", "last_name", "password_hash")


class UserRepository:
    """
    Data access for user accounts. The only component that writes persisted state.
    """

    def __init__(self, db: Session):
        self.db = db

    def list(self) -> List[User]:
        result = self.db.execute(select(User))
        return list(result.scalars().all())

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).filter(User.username == username)
        result = self.db.execute(stmt)
        return result.scalars().first()

    def add(self, user: User) -> User:
        """
        Persist a new user and return it with its database-assigned id.
        """
        self.db.add(user)
        self._commit()
        self.db.refresh(user)
        return user

    def update(self, user: User) -> Optional[User]:
        """
        Write the fields of ``user`` onto the stored row with the same id.

        Returns the persisted row, or None when no row with that id exists.
        """
        stored = self.db.get(User, user.id)
        if stored is None:
            return None
        for field in UPDATABLE_FIELDS:
            setattr(stored, field, getattr(user, field))
        self._commit()
        return stored

    def remove(self, user_id: int) -> None:
        user = self.db.get(User, user_id)
        if user is None:
            return
        self.db.delete(user)
        self._commit()

    def exists(self, user_id: int) -> bool:
        return bool(self.db.scalar(select(exists().where(User.id == user_id))))

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
