from datetime import datetime

from pydantic import BaseModel, Field


# ---------- Event ----------
class EventCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=100)
    location: str = Field(min_length=1, max_length=200)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    description: str = Field(default="", max_length=5000)
    capacity: int = Field(ge=1)


class EventUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    location: str | None = Field(default=None, min_length=1, max_length=200)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    description: str | None = Field(default=None, max_length=5000)
    capacity: int | None = Field(default=None, ge=1)


class EventOut(BaseModel):
    id: int
    name: str
    category: str
    location: str
    latitude: float | None
    longitude: float | None
    description: str
    original_capacity: int
    remaining_capacity: int
    created_at: datetime | None

    class Config:
        from_attributes = True


class EventStatsOut(BaseModel):
    event_id: int
    capacity: int
    remaining_capacity: int
    booked_count: int
    reservation_count: int
    consistent: bool


class CatalogOut(BaseModel):
    events: list[EventOut]


class ReconcileOut(BaseModel):
    event_id: int
    previous_remaining: int
    remaining_capacity: int
    reservation_count: int
    repaired: bool
