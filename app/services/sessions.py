"""Per-request authentication context and the login notification hub."""

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Callable

from loguru import logger
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidTokenError
from app.core.security import create_access_token, decode_access_token
from app.crud.user import clear_user_jti, get_user, touch_last_login, update_user_jti
from app.models.users import User


@dataclass(frozen=True)
class AuthContext:
    uid: str
    email: str
    display_name: str
    is_admin: bool
    login_time: datetime
    is_logged_in: bool = True

    @classmethod
    def from_user(cls, user: User, login_time: datetime) -> "AuthContext":
        return cls(
            uid=user.uid,
            email=user.email,
            display_name=user.display_name,
            is_admin=user.is_admin,
            login_time=login_time,
        )

    def to_record(self) -> dict:
        """The serializable session record handed to the client."""
        record = asdict(self)
        record["login_time"] = self.login_time.isoformat()
        return record


LoginListener = Callable[[AuthContext, Session], None]


class LoginNotifier:
    """Synchronous observer list; listeners run in registration order."""

    def __init__(self) -> None:
        self._listeners: list[LoginListener] = []

    def subscribe(self, listener: LoginListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, context: AuthContext, db: Session) -> None:
        for listener in list(self._listeners):
            try:
                listener(context, db)
            except Exception:
                logger.exception(f"Login listener {listener!r} failed for user {context.uid}")


def record_last_login(context: AuthContext, db: Session) -> None:
    touch_last_login(db, context.uid, context.login_time)
    logger.info(f"User {context.uid} signed in (admin={context.is_admin})")


login_notifier = LoginNotifier()
login_notifier.subscribe(record_last_login)


def start_session(db: Session, user: User, notifier: LoginNotifier = login_notifier) -> tuple[str, AuthContext]:
    """Issue a fresh token for `user`; earlier tokens stop being accepted."""
    login_time = datetime.now(timezone.utc)
    jti = update_user_jti(db, user.uid)
    token = create_access_token(
        data={"sub": user.uid, "login_time": login_time.isoformat()},
        jti=jti,
    )
    context = AuthContext.from_user(user, login_time)
    notifier.publish(context, db)
    return token, context


def resolve_session(db: Session, token: str) -> AuthContext:
    payload = decode_access_token(token)
    uid = payload.get("sub")
    user = get_user(db, uid) if uid else None
    if user is None or not user.is_active or user.jti is None or user.jti != payload.get("jti"):
        raise InvalidTokenError()

    login_time = payload.get("login_time")
    return AuthContext.from_user(
        user,
        datetime.fromisoformat(login_time) if login_time else datetime.now(timezone.utc),
    )


def end_session(db: Session, context: AuthContext) -> None:
    clear_user_jti(db, context.uid)
    logger.info(f"User {context.uid} signed out")
