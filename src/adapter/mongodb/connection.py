import logging
import threading

from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError

logger = logging.getLogger(__name__)

# Driver-level logs are noisy at INFO
logging.getLogger('pymongo').setLevel(logging.WARNING)

USERS_COLLECTION_NAME = 'users'

_clients: dict[str, MongoClient] = {}
_failed_urls: set[str] = set()
_lock = threading.Lock()


def reset_clients():
    """Close and forget every cached client."""
    with _lock:
        for client in _clients.values():
            client.close()
        _clients.clear()
        _failed_urls.clear()


def get_mongodb_client(mongo_url: str | None) -> MongoClient | None:
    """Get a cached MongoDB client for ``mongo_url``.

    Connection strategy:
    1. Return the cached client if it still answers ping
    2. If the cached client fails, drop it and reconnect
    3. If the first connection for this URL failed, don't retry

    Returns:
        MongoDB client or None if not configured or unreachable
    """
    if not mongo_url:
        logger.error("[MONGODB] MONGO_URL not configured")
        return None

    with _lock:
        cached = _clients.get(mongo_url)
        if cached is not None:
            try:
                cached.admin.command('ping')
                return cached
            except PyMongoError:
                logger.debug("[MONGODB] Cached client failed ping, reconnecting")
                _clients.pop(mongo_url, None)

        if mongo_url in _failed_urls:
            return None

        try:
            client = MongoClient(
                mongo_url,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000,
                socketTimeoutMS=30000,
                maxPoolSize=20,
                retryWrites=True,
                retryReads=True,
            )
            client.admin.command('ping')
        except (ConnectionFailure, PyMongoError) as e:
            logger.error("[MONGODB] Initial connection failed", extra={"error": str(e)[:200]})
            _failed_urls.add(mongo_url)
            return None

        _clients[mongo_url] = client
        logger.info("[MONGODB] Connected successfully")
        return client
