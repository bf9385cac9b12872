import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from dotenv import load_dotenv
from pymongo import MongoClient
from pymongo.errors import PyMongoError

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

# Collections
PRODUCTS = "Product"
CATEGORIES = "LcOrganicCategory"
ORDERS = "Order"
DELIVERIES = "Delivery"
HEROES = "Hero"
ANNOUNCEMENT_BAR = "AnnouncementBar"
SHOP_NOW = "Shopnow"
INSTAGRAM = "Instagram"

Sort = List[Tuple[str, int]]


class PersistenceError(RuntimeError):
    """Raised when the datastore cannot complete a read or a write."""


db = None
if DATABASE_URL and DATABASE_NAME:
    _client = MongoClient(DATABASE_URL, tz_aware=True)
    db = _client[DATABASE_NAME]


class Datastore:
    """Thin wrapper over a pymongo database.

    Every pymongo failure is re-raised as PersistenceError so callers only
    have one failure type to handle.
    """

    def __init__(self, database):
        self.database = database

    def count_in_range(self, collection: str, field: str, start: datetime, end: datetime) -> int:
        try:
            return self.database[collection].count_documents({field: {"$gte": start, "$lte": end}})
        except PyMongoError as e:
            raise PersistenceError(f"count on {collection} failed: {e}") from e

    def find_one_by_field(self, collection: str, field: str, value: Any) -> Optional[dict]:
        return self.find_one(collection, {field: value})

    def find_one(self, collection: str, query: Optional[dict] = None, sort: Optional[Sort] = None) -> Optional[dict]:
        try:
            return self.database[collection].find_one(query or {}, sort=sort)
        except PyMongoError as e:
            raise PersistenceError(f"lookup on {collection} failed: {e}") from e

    def find(
        self,
        collection: str,
        query: Optional[dict] = None,
        sort: Optional[Sort] = None,
    ) -> List[dict]:
        try:
            cursor = self.database[collection].find(query or {})
            if sort:
                cursor = cursor.sort(sort)
            return list(cursor)
        except PyMongoError as e:
            raise PersistenceError(f"query on {collection} failed: {e}") from e

    def insert_one(self, collection: str, record: Dict[str, Any]) -> str:
        try:
            result = self.database[collection].insert_one(record)
        except PyMongoError as e:
            raise PersistenceError(f"insert into {collection} failed: {e}") from e
        return str(result.inserted_id) if result.inserted_id else ""

    def ping(self) -> List[str]:
        """Round-trip to the server; returns up to ten collection names."""
        try:
            return self.database.list_collection_names()[:10]
        except PyMongoError as e:
            raise PersistenceError(str(e)) from e


def get_datastore() -> Optional[Datastore]:
    if db is None:
        return None
    return Datastore(db)
