from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.exceptions import ForbiddenError, InvalidTokenError
from app.database.db import get_db
from app.services.sessions import AuthContext, resolve_session

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> AuthContext:
    if credentials is None:
        raise InvalidTokenError("Please sign in")
    return resolve_session(db, credentials.credentials)


def get_optional_auth_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> AuthContext | None:
    if credentials is None:
        return None
    try:
        return resolve_session(db, credentials.credentials)
    except InvalidTokenError:
        # stale token on a public page: render it as signed out
        return None


def require_admin(context: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if not context.is_admin:
        raise ForbiddenError()
    return context
