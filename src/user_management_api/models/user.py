from sqlalchemy import Column, Integer, String
from user_management_api.models.base import Base


class User(Base):
    """
    SQLAlchemy model representing a managed user account.
    Attributes:
        id (int): Unique identifier assigned by the database.
        username (str): Unique login name.
        email (str): Contact email address.
        first_name (str): Given name.
        last_name (str): Family name.
        password_hash (str): bcrypt hash of the user's password.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String, nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    password_hash = Column(String, nullable=False)
