from pydantic import BaseModel


class MarkerOut(BaseModel):
    id: int
    lat: float
    lng: float
    name: str
    category: str
    description: str
    location: str
    available_spots: int
    bookable: bool


class MapOut(BaseModel):
    markers: list[MarkerOut]
    no_events_found: bool = False
