"""
Account use-cases: list, get, create, update, delete and login.

Every method returns a ServiceResult instead of raising. Store faults are
logged here with the operation they interrupted and surface to the caller
only as ErrorKind.INTERNAL.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from user_management_api.models.user import User
from user_management_api.repositories.user_repository import UserRepository
from user_management_api.services.password import dummy_verify, hash_password, verify_password
from user_management_api.services.token import TokenIssuer, TokenResult

T = TypeVar("T")

INTERNAL_ERROR_MESSAGE = "An error occurred while processing your request."
TOKEN_ERROR_MESSAGE = "An error occurred while generating the token."
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"
INVALID_LOGIN_MODEL_MESSAGE = "Invalid login model"


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: ErrorKind, message: Optional[str] = None) -> "ServiceResult[T]":
        return cls(error=error, message=message)


@dataclass(frozen=True)
class UserLoginModel:
    """Username and plaintext password supplied for a login. Never persisted or logged."""
    username: Optional[str]
    password: Optional[str]

    def __repr__(self) -> str:
        return f"UserLoginModel(username={self.username!r}, password='***')"


def _internal() -> ServiceResult:
    return ServiceResult.fail(ErrorKind.INTERNAL, INTERNAL_ERROR_MESSAGE)


class AccountService:
    def __init__(self, repository: UserRepository, token_issuer: TokenIssuer):
        self.repository = repository
        self.token_issuer = token_issuer

    async def list_users(self) -> ServiceResult[List[User]]:
        try:
            return ServiceResult.success(self.repository.list())
        except Exception:
            logging.error("Error occurred while getting all users", exc_info=True)
            return _internal()

    async def get_user(self, user_id: int) -> ServiceResult[User]:
        try:
            user = self.repository.get_by_id(user_id)
        except Exception:
            logging.error(f"Error occurred while getting user with id {user_id}", exc_info=True)
            return _internal()
        if user is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND)
        return ServiceResult.success(user)

    async def create_user(self, user: User) -> ServiceResult[User]:
        """
        Persist ``user``, whose ``password_hash`` holds the plaintext password on
        entry. The plaintext is replaced by its hash before the store sees it.
        """
        try:
            user.password_hash = hash_password(user.password_hash)
            created = self.repository.add(user)
        except Exception:
            logging.error("Error occurred while creating a new user", exc_info=True)
            return _internal()
        return ServiceResult.success(created)

    async def update_user(self, user_id: int, user: User) -> ServiceResult[None]:
        """
        Replace the stored fields of user ``user_id``. ``user.password_hash``
        holds a plaintext password and is hashed before persisting.
        """
        if user_id != user.id:
            return ServiceResult.fail(ErrorKind.BAD_REQUEST)

        try:
            user.password_hash = hash_password(user.password_hash)
            updated = self.repository.update(user)
        except Exception:
            logging.error(f"Error occurred while updating user with id {user_id}", exc_info=True)
            return _internal()
        if updated is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND)
        return ServiceResult.success()

    async def delete_user(self, user_id: int) -> ServiceResult[None]:
        # Best-effort pre-check: a concurrent delete between exists() and
        # remove() is tolerated and still reported as success.
        try:
            if not self.repository.exists(user_id):
                return ServiceResult.fail(ErrorKind.NOT_FOUND)
            self.repository.remove(user_id)
        except Exception:
            logging.error(f"Error occurred while deleting user with id {user_id}", exc_info=True)
            return _internal()
        return ServiceResult.success()

    async def login(self, model: Optional[UserLoginModel]) -> ServiceResult[TokenResult]:
        """
        Verify credentials and issue a bearer token.

        Unknown usernames and wrong passwords produce the same UNAUTHORIZED
        result, and both paths run one password verification. Auth failures are
        not logged; token issuance failures are, with their reason kept server side.
        """
        if model is None or not model.username or not model.password:
            return ServiceResult.fail(ErrorKind.BAD_REQUEST, INVALID_LOGIN_MODEL_MESSAGE)

        try:
            user = self.repository.get_by_username(model.username)
        except Exception:
            logging.error("Error occurred while generating token", exc_info=True)
            return _internal()

        if user is None:
            dummy_verify()
            return ServiceResult.fail(ErrorKind.UNAUTHORIZED, INVALID_CREDENTIALS_MESSAGE)
        if not verify_password(model.password, user.password_hash):
            return ServiceResult.fail(ErrorKind.UNAUTHORIZED, INVALID_CREDENTIALS_MESSAGE)

        token_result = self.token_issuer.issue(user)
        if not token_result.is_success:
            logging.error(f"Token generation failed: {token_result.error_message}")
            return ServiceResult.fail(ErrorKind.INTERNAL, TOKEN_ERROR_MESSAGE)
        return ServiceResult.success(token_result)
