"""Shared test fixtures.

Provides an in-memory stand-in for the MongoDB datastore, a frozen clock and
a TestClient wired to both.
"""

from __future__ import annotations

import copy
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

import main
from database import CATEGORIES, PRODUCTS
from schemas import Product

FROZEN_NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class InMemoryDatastore:
    """Dict-backed Datastore with the same method surface as database.Datastore."""

    def __init__(self) -> None:
        self.collections: dict[str, list[dict]] = defaultdict(list)
        self.inserts: list[tuple[str, dict]] = []
        self.calls: list[str] = []

    def seed(self, collection: str, *docs: dict) -> list[dict]:
        stored = []
        for doc in docs:
            doc = copy.deepcopy(doc)
            doc.setdefault("_id", ObjectId())
            self.collections[collection].append(doc)
            stored.append(doc)
        return stored

    @staticmethod
    def _matches(doc: dict, query: dict | None) -> bool:
        return all(doc.get(k) == v for k, v in (query or {}).items())

    def count_in_range(self, collection: str, field: str, start: datetime, end: datetime) -> int:
        self.calls.append("count_in_range")
        return sum(
            1 for d in self.collections[collection] if d.get(field) is not None and start <= d[field] <= end
        )

    def find_one_by_field(self, collection: str, field: str, value: Any) -> dict | None:
        self.calls.append("find_one_by_field")
        return self.find_one(collection, {field: value})

    def find_one(self, collection: str, query: dict | None = None, sort=None) -> dict | None:
        found = self.find(collection, query, sort=sort)
        return found[0] if found else None

    def find(self, collection: str, query: dict | None = None, sort=None) -> list[dict]:
        docs = [copy.deepcopy(d) for d in self.collections[collection] if self._matches(d, query)]
        for field, direction in reversed(sort or []):
            docs.sort(key=lambda d: d.get(field), reverse=direction < 0)
        return docs

    def insert_one(self, collection: str, record: dict) -> str:
        self.calls.append("insert_one")
        record = copy.deepcopy(record)
        record["_id"] = ObjectId()
        self.collections[collection].append(record)
        self.inserts.append((collection, record))
        return str(record["_id"])

    def ping(self) -> list[str]:
        return sorted(self.collections)[:10]


@pytest.fixture
def store() -> InMemoryDatastore:
    return InMemoryDatastore()


@pytest.fixture
def frozen_clock():
    return lambda: FROZEN_NOW


@pytest.fixture
def client(store: InMemoryDatastore, frozen_clock):
    main.app.dependency_overrides[main.get_store] = lambda: store
    main.app.dependency_overrides[main.get_clock] = lambda: frozen_clock
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


def make_product(**overrides: Any) -> dict:
    """Product document as stored in MongoDB (camelCase keys)."""
    fields = {
        "title": "Lavender Soap",
        "slug": "lavender-soap",
        "price": 100.0,
        "images": ["/img/lavender.jpg"],
        "description": "Cold-pressed",
        "stock": 5,
        "category": "Body Care",
        "created_at": FROZEN_NOW - timedelta(days=1),
    }
    fields.update(overrides)
    return Product(**fields).model_dump(by_alias=True)


@pytest.fixture
def catalog_store(store: InMemoryDatastore) -> InMemoryDatastore:
    store.seed(
        CATEGORIES,
        {"name": "Body Care", "description": "Soaps and oils", "image": "/c/body.jpg",
         "createdAt": FROZEN_NOW - timedelta(days=3)},
        {"name": "Hair  Care", "image": "/c/hair.jpg", "createdAt": FROZEN_NOW - timedelta(days=2)},
    )
    store.seed(
        PRODUCTS,
        make_product(),
        make_product(
            title="Rose Oil",
            slug="rose-oil",
            price=40.0,
            enable_sale=True,
            sale_price=30.0,
            sale_end_date=FROZEN_NOW + timedelta(days=1),
            is_featured=True,
            length=["30ml", "50ml"],
            created_at=FROZEN_NOW,
        ),
        make_product(
            title="Argan Shampoo",
            slug="argan-shampoo",
            price=25.0,
            enable_sale=True,
            sale_price=20.0,
            sale_end_date=FROZEN_NOW - timedelta(days=1),
            images=[],
            category="Hair  Care",
            created_at=FROZEN_NOW - timedelta(hours=1),
        ),
    )
    return store
