# Import every mapped class so relationships resolve and Base.metadata is complete.
from app.models.events import Event  # noqa: F401
from app.models.reservations import Reservation  # noqa: F401
from app.models.users import User  # noqa: F401
