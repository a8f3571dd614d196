"""
Storage and Entity Store

Every collection is persisted as one JSON array under a single key
(storage prefix + type name). The backing key-value storage is injected:
MemoryStorage for development and tests, MongoStorage when DATABASE_URL
is set.
"""
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar, Union

from bson import ObjectId
from pydantic import BaseModel, ValidationError
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from schemas import (
    Collaboration,
    Event,
    Meeting,
    Message,
    Project,
    Reply,
    Resource,
    Semillero,
    Session,
    Student,
    User,
)

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "semilleros")
STORAGE_PREFIX = os.getenv("STORAGE_PREFIX", "semillero_")

T = TypeVar("T", bound=BaseModel)


class StorageError(Exception):
    """Raised by a storage backend when a read or write cannot complete"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(ObjectId())


class Storage:
    """Key-value persistence holding one JSON array per key"""

    def read(self, key: str) -> Optional[List[Dict[str, Any]]]:
        raise NotImplementedError

    def write(self, key: str, records: List[Dict[str, Any]]) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(Storage):
    """Process-local storage. Values are kept serialized, like a browser's local storage."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    def read(self, key):
        raw = self.data.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise StorageError(f"Corrupted value under {key}: {e}") from e

    def write(self, key, records):
        self.data[key] = json.dumps(records, ensure_ascii=False)

    def remove(self, key):
        self.data.pop(key, None)


class MongoStorage(Storage):
    """Keeps each key as a single document {_id: key, value: [...]}"""

    def __init__(self, url: str, database: str = DATABASE_NAME, collection: str = "storage"):
        self.client = MongoClient(url)
        self.collection = self.client[database][collection]

    def read(self, key):
        try:
            doc = self.collection.find_one({"_id": key})
        except PyMongoError as e:
            raise StorageError(str(e)) from e
        return doc.get("value") if doc else None

    def write(self, key, records):
        try:
            self.collection.replace_one({"_id": key}, {"_id": key, "value": records}, upsert=True)
        except PyMongoError as e:
            raise StorageError(str(e)) from e

    def remove(self, key):
        try:
            self.collection.delete_one({"_id": key})
        except PyMongoError as e:
            raise StorageError(str(e)) from e


def get_storage() -> Storage:
    if DATABASE_URL:
        logger.info("Using MongoDB storage (database=%s)", DATABASE_NAME)
        return MongoStorage(DATABASE_URL, DATABASE_NAME)
    logger.info("DATABASE_URL not set, using in-memory storage")
    return MemoryStorage()


Fields = Union[BaseModel, Dict[str, Any]]


def _as_dict(fields: Fields) -> Dict[str, Any]:
    if isinstance(fields, BaseModel):
        return fields.model_dump(mode="json", exclude_unset=True)
    return dict(fields)


class Collection(Generic[T]):
    """
    list / get / create / update / delete over one stored JSON array.

    Reads that fail fall back to the last value seen (or an empty list).
    Writes that fail raise StorageError after logging it.
    """

    def __init__(self, storage: Storage, name: str, model: Type[T], prefix: str = STORAGE_PREFIX):
        self.storage = storage
        self.name = name
        self.model = model
        self.key = f"{prefix}{name}"
        self._cache: Optional[List[Dict[str, Any]]] = None

    def _load(self) -> List[Dict[str, Any]]:
        try:
            records = self.storage.read(self.key)
        except StorageError as e:
            logger.error("Error loading %s: %s", self.name, e)
            return list(self._cache or [])
        self._cache = list(records or [])
        return list(self._cache)

    def _save(self, records: List[Dict[str, Any]]) -> None:
        try:
            self.storage.write(self.key, records)
        except StorageError as e:
            logger.error("Error saving %s: %s", self.name, e)
            raise
        self._cache = list(records)

    def _parse(self, record: Dict[str, Any]) -> Optional[T]:
        try:
            return self.model.model_validate(record)
        except ValidationError as e:
            logger.warning("Skipping invalid %s record %s: %s", self.name, record.get("id"), e)
            return None

    def list(self) -> List[T]:
        items = (self._parse(r) for r in self._load())
        return [x for x in items if x is not None]

    def find(self, predicate: Callable[[T], bool]) -> List[T]:
        return [x for x in self.list() if predicate(x)]

    def get(self, item_id: str) -> Optional[T]:
        for record in self._load():
            if record.get("id") == item_id:
                return self._parse(record)
        return None

    def is_empty(self) -> bool:
        return len(self._load()) == 0

    def create(self, fields: Fields) -> T:
        record = _as_dict(fields)
        record["id"] = new_id()
        if "created_at" in self.model.model_fields:
            record["created_at"] = _now()
        item = self.model.model_validate(record)
        records = self._load()
        records.append(item.model_dump(mode="json"))
        self._save(records)
        return item

    def update(self, item_id: str, fields: Fields) -> bool:
        changes = {k: v for k, v in _as_dict(fields).items() if k not in ("id", "created_at")}
        records = self._load()
        for index, record in enumerate(records):
            if record.get("id") == item_id:
                item = self.model.model_validate({**record, **changes})
                records[index] = item.model_dump(mode="json")
                self._save(records)
                return True
        return False

    def delete(self, item_id: str) -> bool:
        records = self._load()
        kept = [r for r in records if r.get("id") != item_id]
        if len(kept) == len(records):
            return False
        self._save(kept)
        return True

    def replace_all(self, items: Iterable[Fields]) -> None:
        records = [self.model.model_validate(_as_dict(x)).model_dump(mode="json") for x in items]
        self._save(records)


class EntityStore:
    """All collections of the app over one storage"""

    def __init__(self, storage: Storage, prefix: str = STORAGE_PREFIX):
        self.storage = storage
        self.projects: Collection[Project] = Collection(storage, "projects", Project, prefix)
        self.resources: Collection[Resource] = Collection(storage, "resources", Resource, prefix)
        self.messages: Collection[Message] = Collection(storage, "messages", Message, prefix)
        self.meetings: Collection[Meeting] = Collection(storage, "meetings", Meeting, prefix)
        self.events: Collection[Event] = Collection(storage, "events", Event, prefix)
        self.collaborations: Collection[Collaboration] = Collection(storage, "collaborations", Collaboration, prefix)
        self.students: Collection[Student] = Collection(storage, "students", Student, prefix)
        self.semilleros: Collection[Semillero] = Collection(storage, "semilleros", Semillero, prefix)
        self.users: Collection[User] = Collection(storage, "users", User, prefix)
        self.sessions: Collection[Session] = Collection(storage, "sessions", Session, prefix)

    def add_reply(self, message_id: str, fields: Fields) -> bool:
        message = self.messages.get(message_id)
        if message is None:
            return False
        reply = Reply.model_validate({**_as_dict(fields), "id": new_id(), "created_at": _now()})
        replies = [r.model_dump(mode="json") for r in message.replies]
        replies.append(reply.model_dump(mode="json"))
        return self.messages.update(message_id, {"replies": replies})
