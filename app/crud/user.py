from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.security import new_jti
from app.models.reservations import Reservation
from app.models.users import User


def create_user(
    db: Session,
    *,
    uid: str,
    email: str,
    password_hash: str,
    display_name: str = "",
    is_admin: bool = False,
) -> User:
    user = User(
        uid=uid,
        email=email,
        password_hash=password_hash,
        display_name=display_name,
        is_admin=is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def get_user(db: Session, uid: str) -> User | None:
    return db.get(User, uid)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == email.strip().lower()))


def update_user_jti(db: Session, uid: str) -> str:
    """Rotate the user's session id; tokens carrying an older one stop working."""
    user = db.get(User, uid)
    if user is None:
        raise LookupError(uid)
    user.jti = new_jti()
    db.commit()
    return user.jti


def clear_user_jti(db: Session, uid: str) -> None:
    user = db.get(User, uid)
    if user is None:
        return
    user.jti = None
    db.commit()


def touch_last_login(db: Session, uid: str, when: datetime | None = None) -> None:
    user = db.get(User, uid)
    if user is None:
        return
    user.last_login_at = when or datetime.now(timezone.utc)
    db.commit()


def get_reservation_set(db: Session, uid: str) -> set[int]:
    rows = db.scalars(select(Reservation.event_id).where(Reservation.user_id == uid))
    return set(rows)
