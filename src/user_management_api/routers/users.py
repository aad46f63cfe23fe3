from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field

from user_management_api.dependencies import get_account_service, get_current_user
from user_management_api.models.user import User
from user_management_api.services.accounts import AccountService, ErrorKind, ServiceResult, UserLoginModel

router = APIRouter(prefix="/users", tags=["users"])

_STATUS_BY_ERROR = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_DEFAULT_DETAIL = {
    ErrorKind.NOT_FOUND: "Not Found",
    ErrorKind.BAD_REQUEST: "Bad Request",
    ErrorKind.UNAUTHORIZED: "Unauthorized",
    ErrorKind.INTERNAL: "An error occurred while processing your request.",
}


class UserCreateRequest(BaseModel):
    """
    Pydantic model for creating a user. ``password`` is plaintext and is hashed
    before it is stored.
    """
    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    first_name: str = Field(alias="firstName", min_length=1, max_length=50)
    last_name: str = Field(alias="lastName", min_length=1, max_length=50)
    password: str = Field(
        min_length=6,
        max_length=72,
        validation_alias=AliasChoices("password", "passwordHash"),
    )

    def to_user(self, user_id: Optional[int] = None) -> User:
        # The plaintext rides in password_hash until the service hashes it
        return User(
            id=user_id,
            username=self.username,
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            password_hash=self.password,
        )


class UserUpdateRequest(UserCreateRequest):
    """
    Pydantic model for replacing a user. ``id`` must match the id in the path.
    """
    id: int


class UserResponse(BaseModel):
    """
    Pydantic model for a stored user. ``passwordHash`` is the bcrypt hash.
    """
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    username: str
    email: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    password_hash: str = Field(alias="passwordHash")


class LoginRequest(BaseModel):
    """
    Pydantic model for a token request. Empty or missing fields are rejected
    with 400 by the service rather than 422 by validation.
    """
    username: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(BaseModel):
    """
    Pydantic model for a token response containing the bearer token and its expiry.
    """
    token: str
    expires: datetime


def _raise_for_error(result: ServiceResult) -> None:
    if result.ok:
        return
    raise HTTPException(
        status_code=_STATUS_BY_ERROR[result.error],
        detail=result.message or _DEFAULT_DETAIL[result.error],
    )


@router.get("", response_model=List[UserResponse], dependencies=[Depends(get_current_user)])
async def get_users(service: AccountService = Depends(get_account_service)):
    result = await service.list_users()
    _raise_for_error(result)
    return result.value


@router.get("/{user_id}", response_model=UserResponse, dependencies=[Depends(get_current_user)])
async def get_user(user_id: int, service: AccountService = Depends(get_account_service)):
    result = await service.get_user(user_id)
    _raise_for_error(result)
    return result.value


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_user)],
)
async def create_user(
    payload: UserCreateRequest,
    request: Request,
    response: Response,
    service: AccountService = Depends(get_account_service),
):
    """
    Create a user. Responds 201 with a Location header pointing at the new user.
    """
    result = await service.create_user(payload.to_user())
    _raise_for_error(result)
    created = result.value
    response.headers["Location"] = str(request.url_for("get_user", user_id=created.id))
    return created


@router.put(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    dependencies=[Depends(get_current_user)],
)
async def update_user(
    user_id: int,
    payload: UserUpdateRequest,
    service: AccountService = Depends(get_account_service),
):
    result = await service.update_user(user_id, payload.to_user(payload.id))
    _raise_for_error(result)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    dependencies=[Depends(get_current_user)],
)
async def delete_user(user_id: int, service: AccountService = Depends(get_account_service)):
    result = await service.delete_user(user_id)
    _raise_for_error(result)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/token", response_model=TokenResponse)
async def generate_token(
    payload: Optional[LoginRequest] = None,
    service: AccountService = Depends(get_account_service),
):
    """
    Exchange a username and password for a bearer token. Open to anonymous callers.

    Returns 401 with the same body whether the username or the password was wrong.
    """
    model = UserLoginModel(username=payload.username, password=payload.password) if payload else None
    result = await service.login(model)
    _raise_for_error(result)
    return TokenResponse(token=result.value.token, expires=result.value.expires)
