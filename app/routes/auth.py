from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.routes.deps import get_auth_context
from app.schemas.auth import SessionOut, SignInOut, SignInRequest, SignUpOut, SignUpRequest
from app.services.identity import identity_provider
from app.services.sessions import AuthContext, end_session, start_session

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=SignUpOut, status_code=status.HTTP_201_CREATED)
def sign_up(payload: SignUpRequest, db: Session = Depends(get_db)):
    uid = identity_provider.sign_up(
        db,
        email=payload.email,
        password=payload.password,
        display_name=payload.display_name,
        confirm_password=payload.confirm_password,
    )
    return {"uid": uid}


@router.post("/signin", response_model=SignInOut)
def sign_in(payload: SignInRequest, db: Session = Depends(get_db)):
    user = identity_provider.sign_in(db, email=payload.email, password=payload.password)
    token, context = start_session(db, user)
    return {"access_token": token, "token_type": "bearer", "session": context.to_record()}


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(context: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
    end_session(db, context)


@router.get("/session", response_model=SessionOut)
def current_session(context: AuthContext = Depends(get_auth_context)):
    return context.to_record()
