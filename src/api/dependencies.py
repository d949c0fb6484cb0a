from functools import lru_cache

from fastapi import Depends, HTTPException

from adapter.external.google_identity import GoogleIdentityAdapter
from adapter.mongodb.connection import get_mongodb_client
from adapter.mongodb.user_repository import MongoUserRepository
from port.identity_provider import IdentityProvider
from port.user_repository import UserRepository
from services.token_service import TokenService
from utils.config import Settings


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


def _get_db(settings: Settings):
    """Get MongoDB database, raising 503 if unavailable."""
    client = get_mongodb_client(settings)
    if client is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return client[settings.database_name]


def get_user_repo(settings: Settings = Depends(get_settings)) -> UserRepository:
    return MongoUserRepository(_get_db(settings), timeout=settings.store_timeout_seconds)


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService.from_settings(settings)


def get_identity_provider(settings: Settings = Depends(get_settings)) -> IdentityProvider:
    return GoogleIdentityAdapter.from_settings(settings)
