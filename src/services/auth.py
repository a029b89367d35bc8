"""Authentication service for JWT, password handling and account management."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.user import User
from src.schemas.auth import ProfileUpdate, UserSignup
from src.services import errors

logger = logging.getLogger(__name__)

settings = get_settings()

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(frozen=True)
class Identity:
    """Caller identity decoded from a bearer token."""

    id: int
    email: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(user_id: int, email: str) -> str:
    """Create a JWT access token."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_expiration_minutes)
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "exp": expire,
    }
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a JWT token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return payload
    except JWTError:
        return None


def identity_from_token(token: str) -> Identity:
    """Verify a bearer token and return the identity it carries."""
    payload = decode_access_token(token)
    if payload is None:
        raise errors.UnauthorizedError("Invalid or expired token")

    user_id = payload.get("sub")
    try:
        return Identity(id=int(user_id), email=payload.get("email", ""))
    except (TypeError, ValueError):
        raise errors.UnauthorizedError("Invalid or expired token") from None


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == email).first()


class AuthService:
    """Account lifecycle: signup, login, password reset and profile."""

    def __init__(self, db: Session):
        self.db = db

    def sign_up(self, data: UserSignup) -> tuple[User, str]:
        """Register a user and mint their first token."""
        if get_user_by_email(self.db, data.email):
            raise errors.ConflictError(f"User already exists with email: {data.email}")

        user = User(
            name=data.name,
            email=data.email,
            phone=data.phone,
            gender=data.gender,
            password_hash=get_password_hash(data.password),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race on the unique email index
            self.db.rollback()
            raise errors.ConflictError(f"User already exists with email: {data.email}") from None
        self.db.refresh(user)

        logger.info(f"Registered user {user.id}")
        return user, create_access_token(user.id, user.email)

    def login(self, email: str, password: str) -> tuple[User, str]:
        """Authenticate by email and password.

        Unknown email and wrong password fail identically.
        """
        user = get_user_by_email(self.db, email)
        if not user or not verify_password(password, user.password_hash):
            raise errors.UnauthorizedError(INVALID_CREDENTIALS)
        return user, create_access_token(user.id, user.email)

    def forgot_password(self, email: str, new_password: str) -> None:
        """Overwrite a user's password given only their email.

        No proof of identity beyond the email is required.
        """
        user = get_user_by_email(self.db, email)
        if not user:
            raise errors.NotFoundError("Invalid user, cannot change password")

        user.password_hash = get_password_hash(new_password)
        self.db.commit()
        logger.warning(f"Password reset without verification for user {user.id}")

    def get_profile(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise errors.NotFoundError("User not found")
        return user

    def update_profile(self, user_id: int, data: ProfileUpdate) -> User:
        user = self.get_profile(user_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete_account(self, user_id: int) -> None:
        """Delete a user; their journals go with them.

        Image blobs of the deleted journals are left in the store.
        """
        user = self.db.get(User, user_id)
        if user is not None:
            self.db.delete(user)
            self.db.commit()
            logger.info(f"Deleted account {user_id}")
