"""FastAPI application entry point."""

import logging
import tomllib
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables from .env file
# Must be called before settings are read
load_dotenv()

from api.dependencies import get_settings
from api.errors import register_error_handlers
from api.routes import auth, health
from adapter.mongodb.connection import get_mongodb_client, reset_client
from adapter.mongodb.user_repository import MongoUserRepository
from utils.logging import setup_structured_logging

# Set up structured JSON logging
setup_structured_logging()

logger = logging.getLogger(__name__)

# Read version from pyproject.toml (single source of truth)
_project_root = Path(__file__).parent.parent.parent
with open(_project_root / "pyproject.toml", "rb") as f:
    VERSION = tomllib.load(f)["project"]["version"]

SERVICE_NAME = "Spirits Vault Auth API"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    settings = get_settings()
    # Refuses to start with the default signing secret outside development.
    settings.validate()

    client = get_mongodb_client(settings)
    if client:
        if MongoUserRepository(client[settings.database_name]).ensure_indexes():
            logger.info("MongoDB indexes verified/created successfully")
        else:
            logger.warning("Failed to create some MongoDB indexes")
    else:
        logger.warning("MongoDB unavailable, skipping index creation")

    yield  # App runs here

    reset_client()


app = FastAPI(
    title=SERVICE_NAME,
    description="Account signup, Google sign-in and session tokens",
    version=VERSION,
    lifespan=lifespan,
)

# With wildcard origins browsers refuse credentials, so only enable them
# for an explicit comma-separated origin list.
cors_origins_env = get_settings().cors_origins

if cors_origins_env == "*":
    cors_origins = ["*"]
    allow_credentials = False
else:
    cors_origins = [origin.strip() for origin in cors_origins_env.split(",") if origin.strip()]
    allow_credentials = True
    logger.info(f"CORS configured with specific origins: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["POST", "GET", "OPTIONS", "PUT", "DELETE"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(auth.router)
app.include_router(health.router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "service": SERVICE_NAME,
        "version": VERSION,
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    # Application logs go through structured logging; uvicorn's access log is redundant
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=get_settings().port,
        access_log=False
    )
