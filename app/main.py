from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.database import models  # noqa: F401
from app.core.config import CORS_ORIGINS
from app.core.exception_handlers import register_exception_handlers
from app.core.logging_config import setup_logging
from app.database.db import Base, engine
from app.routes import admin, auth, bookings, events, markers, reports

setup_logging()

app = FastAPI(title="Event Booking")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Create all tables (in production, use migrations such as Alembic)
Base.metadata.create_all(bind=engine)

# Include the routers
app.include_router(auth.router)
app.include_router(events.router)
app.include_router(bookings.router)
app.include_router(markers.router)
app.include_router(admin.router)
app.include_router(reports.router)
