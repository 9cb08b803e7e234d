from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.crud.user import create_user
from app.models.events import Event
from app.models.users import User

PASSWORD = "secret-pass"


def make_user(db: Session, uid: str, *, is_admin: bool = False) -> User:
    """Insert a user row directly; booking tests never need a real password."""
    return create_user(
        db,
        uid=uid,
        email=f"{uid}@example.com",
        password_hash="not-a-real-hash",
        display_name=uid.title(),
        is_admin=is_admin,
    )


def make_event(db: Session, *, capacity: int = 10, remaining: int | None = None, **fields) -> Event:
    event = Event(
        name=fields.pop("name", "Harbour Concert"),
        category=fields.pop("category", "music"),
        location=fields.pop("location", "Solent Quay"),
        latitude=fields.pop("latitude", 50.9),
        longitude=fields.pop("longitude", -1.4),
        description=fields.pop("description", ""),
        original_capacity=capacity,
        remaining_capacity=capacity if remaining is None else remaining,
        version=1,
        **fields,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def sign_up_and_in(client: TestClient, email: str, password: str = PASSWORD, name: str = "") -> dict[str, str]:
    response = client.post(
        "/auth/signup",
        json={"email": email, "password": password, "display_name": name or email.split("@")[0]},
    )
    assert response.status_code == 201, response.text
    response = client.post("/auth/signin", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
