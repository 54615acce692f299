from fastapi import FastAPI

from scriptboard.core.config import settings
from scriptboard.core.logging import setup_logging
from scriptboard.db import Base, engine
from scriptboard import models  # noqa: F401  (registers tables)
from scriptboard.api.routes import health, projects, script_data, ws

setup_logging()

# Create DB tables on startup (for dev; later replace with Alembic)
Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.PROJECT_NAME)


app.include_router(health.router, prefix=settings.API_V1_PREFIX)
app.include_router(projects.router, prefix=settings.API_V1_PREFIX)
app.include_router(script_data.router, prefix=settings.API_V1_PREFIX)
app.include_router(ws.router)
