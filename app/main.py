from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.logging_config import configure_logging
from app.database.db import Base, engine
from app.models import events, registrations  # noqa: F401
from app.routes import events as event_routes
from app.routes import registrations as registration_routes
from app.routes import reports
from app.routes.errors import register_exception_handlers

configure_logging()

app = FastAPI(title="Event Registration")

# Configure CORS
origins = [
    "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create all tables (in production, use migrations such as Alembic)
Base.metadata.create_all(bind=engine)

register_exception_handlers(app)

# Include the routers
app.include_router(event_routes.router)
app.include_router(registration_routes.router)
app.include_router(reports.router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
