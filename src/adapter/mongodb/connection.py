import logging
from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError

from utils.config import Settings

logger = logging.getLogger(__name__)

# Suppress verbose PyMongo logs (but cannot suppress MongoDB server logs)
# Set pymongo logger to WARNING to reduce noise from driver-level logs
pymongo_logger = logging.getLogger('pymongo')
pymongo_logger.setLevel(logging.WARNING)

_client_cache: MongoClient | None = None


def reset_client():
    global _client_cache
    if _client_cache is not None:
        _client_cache.close()
    _client_cache = None


def get_mongodb_client(settings: Settings) -> MongoClient | None:
    """Get MongoDB client with connection caching and reconnection logic.

    Connection strategy:
    1. Return cached client if healthy (ping succeeds)
    2. Otherwise open a new client bounded by the store timeout

    Returns:
        MongoDB client or None if connection fails
    """
    global _client_cache

    # Fast path: return cached client if healthy
    if _client_cache:
        try:
            _client_cache.admin.command('ping')
            return _client_cache
        except PyMongoError:
            _client_cache = None
            logger.debug("[MONGODB] Cached client failed ping, attempting reconnection...")

    timeout_ms = int(settings.store_timeout_seconds * 1000)
    try:
        client = MongoClient(
            settings.mongodb_uri,
            serverSelectionTimeoutMS=timeout_ms,
            connectTimeoutMS=timeout_ms,
            socketTimeoutMS=timeout_ms,
            maxPoolSize=10,
            waitQueueTimeoutMS=timeout_ms,
            # Store calls fail fast; the caller decides what a failure means.
            retryWrites=False,
            retryReads=False,
        )
        client.admin.command('ping')  # Verify connection works
        _client_cache = client
        logger.info(f"[MONGODB] Connected successfully to {settings.database_name}")
        return client
    except (ConnectionFailure, PyMongoError) as e:
        logger.error(f"[MONGODB] Connection failed: {str(e)[:200]}")
        return None
