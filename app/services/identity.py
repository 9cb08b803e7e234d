"""Credential sign-up and sign-in.

Every failure is raised as one of the `AuthError` subclasses so the caller can
show the matching message.
"""

import re
from uuid import uuid4

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    EmailAlreadyInUseError,
    InvalidEmailError,
    PasswordMismatchError,
    UserDisabledError,
    UserNotFoundError,
    WeakPasswordError,
    WrongPasswordError,
)
from app.core.security import hash_password, verify_password
from app.crud.user import create_user, get_user_by_email
from app.models.users import User

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


def normalize_email(email: str) -> str:
    email = (email or "").strip().lower()
    if not EMAIL_RE.match(email):
        raise InvalidEmailError()
    return email


class IdentityProvider:
    def __init__(self, min_password_length: int = MIN_PASSWORD_LENGTH):
        self.min_password_length = min_password_length

    def sign_up(
        self,
        db: Session,
        *,
        email: str,
        password: str,
        display_name: str,
        confirm_password: str | None = None,
    ) -> str:
        """Create the account and its user document; return the new uid."""
        email = normalize_email(email)
        if confirm_password is not None and confirm_password != password:
            raise PasswordMismatchError()
        if len(password) < self.min_password_length:
            raise WeakPasswordError()
        if get_user_by_email(db, email) is not None:
            raise EmailAlreadyInUseError()

        try:
            user = create_user(
                db,
                uid=uuid4().hex,
                email=email,
                password_hash=hash_password(password),
                display_name=display_name.strip(),
            )
        except IntegrityError as exc:
            db.rollback()
            raise EmailAlreadyInUseError() from exc

        logger.info(f"Registered user {user.uid} <{email}>")
        return user.uid

    def sign_in(self, db: Session, *, email: str, password: str) -> User:
        email = normalize_email(email)
        user = get_user_by_email(db, email)
        if user is None:
            raise UserNotFoundError()
        if not user.is_active:
            raise UserDisabledError()
        if not verify_password(password, user.password_hash):
            raise WrongPasswordError()
        return user


identity_provider = IdentityProvider()
