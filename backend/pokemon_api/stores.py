# backend/pokemon_api/stores.py
import logging
from typing import Optional

from pymongo import AsyncMongoClient

from .config import settings
from .credential_store import CredentialStore, JsonFileCredentialStore, MongoCredentialStore
from .json_file import JsonListFile
from .record_store import JsonFileRecordStore, MongoRecordStore, RecordStore

logger = logging.getLogger(__name__)

POKEMONS_COLLECTION = "pokemons"
USERS_COLLECTION = "users"

# --- Process-wide instances ---
# Built on first use; main.lifespan builds them at startup and closes them on shutdown.
# Tests replace them through app.dependency_overrides.
_mongo_client: Optional[AsyncMongoClient] = None
_record_store: Optional[RecordStore] = None
_credential_store: Optional[CredentialStore] = None

def get_mongo_client() -> AsyncMongoClient:
    """Gets or creates the MongoDB client for the configured URI."""
    global _mongo_client
    if _mongo_client is None:
        logger.info("Creating MongoDB client.")
        _mongo_client = AsyncMongoClient(settings.mongo_uri, tz_aware=True)
    return _mongo_client

def _mongo_database():
    return get_mongo_client()[settings.mongo_db_name]

async def get_record_store() -> RecordStore:
    """FastAPI dependency: the configured Pokémon record store."""
    global _record_store
    if _record_store is None:
        if settings.storage_backend == "mongo":
            _record_store = MongoRecordStore(_mongo_database()[POKEMONS_COLLECTION])
        else:
            _record_store = JsonFileRecordStore(settings.pokemons_path)
        logger.info(f"Record store ready: {type(_record_store).__name__}")
    return _record_store

async def get_credential_store() -> CredentialStore:
    """FastAPI dependency: the configured account store."""
    global _credential_store
    if _credential_store is None:
        if settings.storage_backend == "mongo":
            _credential_store = MongoCredentialStore(_mongo_database()[USERS_COLLECTION])
        else:
            _credential_store = JsonFileCredentialStore(settings.users_path)
        logger.info(f"Credential store ready: {type(_credential_store).__name__}")
    return _credential_store

async def prepare_stores() -> None:
    """Startup work: load file stores, or create Mongo indexes and seed an empty collection."""
    record_store = await get_record_store()
    credential_store = await get_credential_store()
    if isinstance(record_store, MongoRecordStore):
        await record_store.ensure_indexes()
        if settings.seed_database and await record_store.count() == 0:
            logger.warning("Pokemons collection is empty, seeding it from the catalog file...")
            inserted = await record_store.seed(JsonListFile(settings.pokemons_path).load())
            logger.info(f"Seeded {inserted} Pokémon into MongoDB.")
    if isinstance(credential_store, MongoCredentialStore):
        await credential_store.ensure_indexes()

async def close_stores() -> None:
    """Drops the cached stores and closes the MongoDB client."""
    global _mongo_client, _record_store, _credential_store
    _record_store = None
    _credential_store = None
    if _mongo_client is not None:
        await _mongo_client.close()
        _mongo_client = None
        logger.info("MongoDB client closed.")
