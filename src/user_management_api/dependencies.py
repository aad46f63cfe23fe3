from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from user_management_api.models.base import get_db
from user_management_api.repositories.user_repository import UserRepository
from user_management_api.services.accounts import AccountService
from user_management_api.services.token import TokenIssuer

_bearer_scheme = HTTPBearer(auto_error=False)


def get_token_issuer() -> TokenIssuer:
    return TokenIssuer()


def get_account_service(
    db: Session = Depends(get_db),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> AccountService:
    return AccountService(UserRepository(db), token_issuer)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> dict:
    """
    Require a valid bearer token and return its claims.

    Raises HTTPException with status 401 when the token is missing, invalid or expired.
    """
    claims = None
    if credentials is not None:
        claims = token_issuer.decode(credentials.credentials)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims
