from pydantic import BaseModel, Field


class BookRequest(BaseModel):
    event_id: int = Field(ge=1)


class BookingOut(BaseModel):
    event_id: int
    user_id: str
    remaining_capacity: int
    original_capacity: int
    reservation_set: list[int]

    class Config:
        from_attributes = True
