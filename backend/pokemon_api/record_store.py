# backend/pokemon_api/record_store.py

import abc
import asyncio
import copy
import logging
from typing import Any, Dict, List

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from .errors import PokemonNotFoundError, StorageError
from .json_file import JsonListFile

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

class RecordStore(abc.ABC):
    """Persistence for Pokémon records, keyed by their integer `id`."""

    @abc.abstractmethod
    async def list_all(self) -> List[Record]:
        """Every stored record, in backend-native order."""

    @abc.abstractmethod
    async def create(self, record: Record) -> Record:
        """Stores `record` as given and returns it."""

    @abc.abstractmethod
    async def get_by_id(self, pokemon_id: int) -> Record:
        """Raises PokemonNotFoundError when no record has this id."""

    @abc.abstractmethod
    async def update(self, pokemon_id: int, changes: Record) -> Record:
        """Shallow-merges `changes` onto the stored record and returns the result."""

    @abc.abstractmethod
    async def delete(self, pokemon_id: int) -> Record:
        """Removes the record and returns it."""


class JsonFileRecordStore(RecordStore):
    """In-memory list mirrored to a JSON file.

    The file is read once on construction. Each mutation runs under a single
    lock: the new list is written to disk first and only then becomes the
    in-memory list, so the two never disagree once a call returns.
    Duplicate ids are accepted on create; lookups return the first match.
    """

    def __init__(self, path: str):
        self._file = JsonListFile(path)
        self._records: List[Record] = self._file.load()
        self._lock = asyncio.Lock()

    @property
    def path(self) -> str:
        return self._file.path

    def _index_of(self, pokemon_id: int) -> int:
        for i, record in enumerate(self._records):
            if record.get("id") == pokemon_id:
                return i
        raise PokemonNotFoundError(pokemon_id)

    async def list_all(self) -> List[Record]:
        return copy.deepcopy(self._records)

    async def create(self, record: Record) -> Record:
        async with self._lock:
            updated = self._records + [copy.deepcopy(record)]
            await self._file.save(updated)
            self._records = updated
        logger.info(f"Added Pokémon id={record.get('id')} ({len(self._records)} stored)")
        return copy.deepcopy(record)

    async def get_by_id(self, pokemon_id: int) -> Record:
        return copy.deepcopy(self._records[self._index_of(pokemon_id)])

    async def update(self, pokemon_id: int, changes: Record) -> Record:
        async with self._lock:
            index = self._index_of(pokemon_id)
            merged = {**self._records[index], **copy.deepcopy(changes)}
            updated = list(self._records)
            updated[index] = merged
            await self._file.save(updated)
            self._records = updated
        logger.info(f"Updated Pokémon id={pokemon_id} fields={sorted(changes)}")
        return copy.deepcopy(merged)

    async def delete(self, pokemon_id: int) -> Record:
        async with self._lock:
            index = self._index_of(pokemon_id)
            updated = list(self._records)
            removed = updated.pop(index)
            await self._file.save(updated)
            self._records = updated
        logger.info(f"Deleted Pokémon id={pokemon_id}")
        return copy.deepcopy(removed)


class MongoRecordStore(RecordStore):
    """Records kept in a MongoDB collection with a unique index on `id`.

    Driver errors, including duplicate ids on insert, surface as StorageError.
    """

    # Hide Mongo's own _id from every result
    PROJECTION = {"_id": 0}

    def __init__(self, collection):
        self.collection = collection

    async def ensure_indexes(self) -> None:
        try:
            await self.collection.create_index("id", unique=True)
        except PyMongoError as e:
            raise StorageError(f"Could not create index on pokemons.id: {e}") from e

    async def count(self) -> int:
        try:
            return await self.collection.count_documents({})
        except PyMongoError as e:
            raise StorageError(str(e)) from e

    async def seed(self, records: List[Record]) -> int:
        """Inserts `records` in bulk. Used to populate an empty collection."""
        if not records:
            return 0
        try:
            result = await self.collection.insert_many([dict(r) for r in records])
        except PyMongoError as e:
            raise StorageError(f"Seeding pokemons failed: {e}") from e
        return len(result.inserted_ids)

    async def list_all(self) -> List[Record]:
        try:
            cursor = self.collection.find({}, self.PROJECTION)
            return await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StorageError(str(e)) from e

    async def create(self, record: Record) -> Record:
        # insert_one adds _id to the dict it is given
        document = dict(record)
        try:
            await self.collection.insert_one(document)
        except PyMongoError as e:
            raise StorageError(str(e)) from e
        logger.info(f"Inserted Pokémon id={record.get('id')}")
        return dict(record)

    async def get_by_id(self, pokemon_id: int) -> Record:
        try:
            record = await self.collection.find_one({"id": pokemon_id}, self.PROJECTION)
        except PyMongoError as e:
            raise StorageError(str(e)) from e
        if record is None:
            raise PokemonNotFoundError(pokemon_id)
        return record

    async def update(self, pokemon_id: int, changes: Record) -> Record:
        if not changes:
            return await self.get_by_id(pokemon_id)
        try:
            record = await self.collection.find_one_and_update(
                {"id": pokemon_id},
                {"$set": changes},
                projection=self.PROJECTION,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise StorageError(str(e)) from e
        if record is None:
            raise PokemonNotFoundError(pokemon_id)
        logger.info(f"Updated Pokémon id={pokemon_id} fields={sorted(changes)}")
        return record

    async def delete(self, pokemon_id: int) -> Record:
        try:
            record = await self.collection.find_one_and_delete(
                {"id": pokemon_id}, projection=self.PROJECTION
            )
        except PyMongoError as e:
            raise StorageError(str(e)) from e
        if record is None:
            raise PokemonNotFoundError(pokemon_id)
        logger.info(f"Deleted Pokémon id={pokemon_id}")
        return record
