"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest
from bson import ObjectId
from dotenv import load_dotenv
from pymongo.results import DeleteResult

# Load .env before any imports that use settings
ROOT_DIR = Path(__file__).resolve().parents[1]
ENV_FILE = ROOT_DIR / ".env"
if ENV_FILE.exists():
    load_dotenv(ENV_FILE)


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    for field, expected in query.items():
        if field == "$or":
            if not any(_matches(doc, clause) for clause in expected):
                return False
        elif isinstance(expected, dict) and "$in" in expected:
            if doc.get(field) not in expected["$in"]:
                return False
        elif doc.get(field) != expected:
            return False
    return True


class FakeCursor:
    def __init__(self, documents: list[dict[str, Any]]) -> None:
        self._documents = documents

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        # Yield like a network round trip so concurrent callers can interleave.
        await asyncio.sleep(0)
        if length is None:
            return list(self._documents)
        return self._documents[:length]


class FakeCollection:
    """Implements the slice of AsyncIOMotorCollection the stores use."""

    def __init__(self, documents: list[dict[str, Any]] | None = None) -> None:
        self.documents: list[dict[str, Any]] = []
        self.indexes: list[list[tuple[str, int]]] = []
        for doc in documents or []:
            self.documents.append({"_id": ObjectId(), **doc})

    async def find_one(
        self, query: dict[str, Any], projection: dict[str, int] | None = None
    ) -> dict[str, Any] | None:
        for doc in self.documents:
            if _matches(doc, query):
                return dict(doc)
        return None

    def find(
        self, query: dict[str, Any], projection: dict[str, int] | None = None
    ) -> FakeCursor:
        return FakeCursor([dict(doc) for doc in self.documents if _matches(doc, query)])

    async def count_documents(self, query: dict[str, Any]) -> int:
        return sum(1 for doc in self.documents if _matches(doc, query))

    async def insert_one(self, document: dict[str, Any]) -> None:
        self.documents.append({"_id": ObjectId(), **document})

    async def delete_one(self, query: dict[str, Any]) -> DeleteResult:
        for index, doc in enumerate(self.documents):
            if _matches(doc, query):
                del self.documents[index]
                return DeleteResult({"n": 1, "ok": 1.0}, acknowledged=True)
        return DeleteResult({"n": 0, "ok": 1.0}, acknowledged=True)

    async def create_index(self, keys: list[tuple[str, int]]) -> str:
        self.indexes.append(keys)
        return "_".join(f"{name}_{direction}" for name, direction in keys)


@pytest.fixture
def fake_collection_factory():
    return FakeCollection
