"""Account directory: registration, login and profile maintenance."""

import logging
import re
from collections.abc import Mapping

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    InvalidInputError,
    NotFoundError,
    UnauthenticatedError,
)
from app.models.user import SINGLE_ACCOUNT_SLOT, User
from app.services.password import PasswordHasher, get_password_hasher

logger = logging.getLogger("water_temperature")

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
NAME_MAX_LEN = 50
EMAIL_MAX_LEN = 100
FIELD_MAX_LENGTHS = {"email": EMAIL_MAX_LEN, "first_name": NAME_MAX_LEN, "last_name": NAME_MAX_LEN}
PROFILE_FIELDS = ("email", "first_name", "last_name", "profile_picture")


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.match(email) is not None


def _strip(value: str | None) -> str | None:
    return value.strip() if value is not None else None


def _check_field_lengths(fields: Mapping[str, str | None]) -> None:
    for field, limit in FIELD_MAX_LENGTHS.items():
        value = fields.get(field)
        if value is not None and len(value) > limit:
            label = field.replace("_", " ").capitalize()
            raise InvalidInputError(f"{label} must be at most {limit} characters")


class AccountDirectory:
    """Enforces account rules and persists users.

    In single-account mode registration is refused once any account exists.
    The up-front count only gives a friendly error; the unique ``account_slot``
    column is what actually stops two concurrent registrations.
    """

    def __init__(self, hasher: PasswordHasher, min_password_length: int = 8, single_account: bool = True) -> None:
        self.hasher = hasher
        self.min_password_length = min_password_length
        self.single_account = single_account

    def exists_any(self, db: Session) -> bool:
        """Return True if at least one account is stored."""
        return db.query(User.id).first() is not None

    def _check_password_strength(self, password: str) -> None:
        if len(password) < self.min_password_length:
            raise InvalidInputError(f"Password must be at least {self.min_password_length} characters long")

    def register(
        self,
        db: Session,
        user_name: str | None,
        password: str | None,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """Create the account. Raises ConflictError or InvalidInputError."""
        if self.single_account and self.exists_any(db):
            raise ConflictError("Only one account may exist")

        if not user_name or not user_name.strip() or not password or not password.strip():
            raise InvalidInputError("Username and password required")

        self._check_password_strength(password)

        user_name = user_name.strip()
        if not USERNAME_MIN_LEN <= len(user_name) <= USERNAME_MAX_LEN:
            raise InvalidInputError(f"Username must be between {USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} characters")

        email = _strip(email) or None
        if email and not is_valid_email(email):
            raise InvalidInputError("Invalid email format")

        first_name = _strip(first_name) or None
        last_name = _strip(last_name) or None
        _check_field_lengths({"email": email, "first_name": first_name, "last_name": last_name})

        user = User(
            user_name=user_name,
            password_hash=self.hasher.hash(password),
            email=email,
            first_name=first_name,
            last_name=last_name,
            account_slot=SINGLE_ACCOUNT_SLOT if self.single_account else None,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if self.single_account:
                raise ConflictError("Only one account may exist") from None
            raise ConflictError("Username or email is already taken") from None
        db.refresh(user)

        logger.info("Registered account %d (%s)", user.id, user.user_name)
        return user

    def authenticate(self, db: Session, user_name: str, password: str) -> User:
        """Authenticate a user by username and password.

        Unknown usernames and wrong passwords raise the same error.
        """
        user = db.query(User).filter(User.user_name == user_name).first()
        if user is None:
            self.hasher.verify_dummy(password)
            raise UnauthenticatedError("Invalid username or password")

        if not self.hasher.verify(password, user.password_hash):
            raise UnauthenticatedError("Invalid username or password")

        return user

    def get_profile(self, db: Session, user_id: int) -> User:
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundError("Account not found")
        return user

    def update_profile(self, db: Session, user_id: int, changes: Mapping[str, str | None]) -> User:
        """Apply profile changes. Keys absent from ``changes`` are left alone; None clears."""
        user = self.get_profile(db, user_id)

        unknown = set(changes) - set(PROFILE_FIELDS)
        if unknown:
            raise InvalidInputError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

        email = changes.get("email")
        if email is not None and not is_valid_email(email):
            raise InvalidInputError("Invalid email format")

        _check_field_lengths(changes)

        for field, value in changes.items():
            setattr(user, field, value)

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Email is already in use") from None
        db.refresh(user)
        return user

    def change_password(self, db: Session, user_id: int, current_password: str, new_password: str) -> None:
        """Replace the password hash after re-verifying the current password."""
        # Lock the row so verify-then-overwrite is atomic (ignored by SQLite).
        user = db.query(User).filter(User.id == user_id).with_for_update().first()
        if user is None:
            raise NotFoundError("Account not found")

        if not self.hasher.verify(current_password, user.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")
        if not new_password or not new_password.strip():
            raise InvalidInputError("New password required")
        self._check_password_strength(new_password)

        user.password_hash = self.hasher.hash(new_password)
        db.commit()
        logger.info("Password changed for account %d", user.id)


_account_directory: AccountDirectory | None = None


def get_account_directory() -> AccountDirectory:
    """Get singleton account directory instance."""
    global _account_directory
    if _account_directory is None:
        settings = get_settings()
        _account_directory = AccountDirectory(
            get_password_hasher(),
            min_password_length=settings.MIN_PASSWORD_LENGTH,
            single_account=settings.SINGLE_ACCOUNT,
        )
    return _account_directory
