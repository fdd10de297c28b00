# backend/pokemon_api/credential_store.py

import abc
import asyncio
import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError, PyMongoError

from .errors import StorageError, UniqueConstraintError
from .json_file import JsonListFile

logger = logging.getLogger(__name__)

Account = Dict[str, Any]

# Fields that must be unique across all accounts, in the order they are checked
UNIQUE_FIELDS = ("email", "username")

def sanitize_account(account: Account) -> Dict[str, Any]:
    """Public view of an account. The password hash never leaves the store layer."""
    created_at = account.get("createdAt")
    if isinstance(created_at, datetime):
        if created_at.tzinfo is None:
            # Mongo hands back naive UTC datetimes
            created_at = created_at.replace(tzinfo=timezone.utc)
        created_at = created_at.isoformat()
    return {
        "id": str(account.get("id", account.get("_id"))),
        "username": account["username"],
        "email": account["email"],
        "createdAt": created_at,
    }


class CredentialStore(abc.ABC):
    """Persistence for user accounts (username, email, password hash)."""

    @abc.abstractmethod
    async def find_by_email(self, email: str) -> Optional[Account]:
        ...

    @abc.abstractmethod
    async def find_by_username(self, username: str) -> Optional[Account]:
        ...

    @abc.abstractmethod
    async def create(self, username: str, email: str, password_hash: str) -> Account:
        """Stores a new account. Raises UniqueConstraintError on a taken username or email."""


class JsonFileCredentialStore(CredentialStore):
    def __init__(self, path: str):
        self._file = JsonListFile(path)
        self._accounts: List[Account] = self._file.load()
        self._lock = asyncio.Lock()

    def _find(self, field: str, value: str) -> Optional[Account]:
        for account in self._accounts:
            if account.get(field) == value:
                return copy.deepcopy(account)
        return None

    async def find_by_email(self, email: str) -> Optional[Account]:
        return self._find("email", email)

    async def find_by_username(self, username: str) -> Optional[Account]:
        return self._find("username", username)

    async def create(self, username: str, email: str, password_hash: str) -> Account:
        account = {
            "id": uuid.uuid4().hex,
            "username": username,
            "email": email,
            "password": password_hash,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        async with self._lock:
            # Re-checked under the lock: the handler's pre-checks are not atomic
            for field in UNIQUE_FIELDS:
                if self._find(field, account[field]) is not None:
                    raise UniqueConstraintError(field)
            updated = self._accounts + [account]
            await self._file.save(updated)
            self._accounts = updated
        logger.info(f"Stored account '{username}' ({len(self._accounts)} accounts)")
        return copy.deepcopy(account)


class MongoCredentialStore(CredentialStore):
    """Accounts in a MongoDB collection with unique indexes on username and email."""

    def __init__(self, collection):
        self.collection = collection

    async def ensure_indexes(self) -> None:
        try:
            for field in UNIQUE_FIELDS:
                await self.collection.create_index(field, unique=True)
        except PyMongoError as e:
            raise StorageError(f"Could not create indexes on users: {e}") from e

    async def _find(self, field: str, value: str) -> Optional[Account]:
        try:
            return await self.collection.find_one({field: value})
        except PyMongoError as e:
            raise StorageError(str(e)) from e

    async def find_by_email(self, email: str) -> Optional[Account]:
        return await self._find("email", email)

    async def find_by_username(self, username: str) -> Optional[Account]:
        return await self._find("username", username)

    async def create(self, username: str, email: str, password_hash: str) -> Account:
        account = {
            "username": username,
            "email": email,
            "password": password_hash,
            "createdAt": datetime.now(timezone.utc),
        }
        try:
            result = await self.collection.insert_one(account)
        except DuplicateKeyError as e:
            raise UniqueConstraintError(_duplicate_field(e)) from e
        except PyMongoError as e:
            raise StorageError(str(e)) from e
        account["_id"] = result.inserted_id
        logger.info(f"Stored account '{username}'")
        return account


def _duplicate_field(error: DuplicateKeyError) -> str:
    """Name of the field behind a duplicate key error, from the server's details."""
    details = error.details or {}
    key_value = details.get("keyValue") or details.get("keyPattern") or {}
    if key_value:
        return next(iter(key_value))
    for field in UNIQUE_FIELDS:
        if f"{field}_1" in str(error):
            return field
    return "email"
