import logging

from passlib.context import CryptContext

# Create a CryptContext for password hashing and verification
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    """
    Hash a plain password with bcrypt. Every call uses a fresh random salt.
    """
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against its hashed version using passlib.

    Returns False for a malformed or empty hash instead of raising.
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False
    except Exception as e:
        logging.error(e, exc_info=True)
        return False


def dummy_verify() -> None:
    """
    Burn the cost of one verification when there is no stored hash to check.
    """
    pwd_context.dummy_verify()
