"""
Database helpers

Connects to MongoDB using DATABASE_URL and DATABASE_NAME. When either is
missing, `db` is None and callers must degrade gracefully.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pymongo import MongoClient

logger = logging.getLogger(__name__)


class DatabaseNotConfigured(RuntimeError):
    pass


DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

db = None
if DATABASE_URL and DATABASE_NAME:
    client = MongoClient(DATABASE_URL)
    db = client[DATABASE_NAME]
else:
    logger.warning("DATABASE_URL or DATABASE_NAME not set, catalog is unavailable")


def now() -> datetime:
    return datetime.now(timezone.utc)


def to_dict(data: Union[BaseModel, dict]) -> dict:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return dict(data)


def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert a document stamped with createdAt/updatedAt and return its id."""
    if db is None:
        raise DatabaseNotConfigured("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")
    doc = to_dict(data)
    doc["createdAt"] = doc["updatedAt"] = now()
    result = db[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[Dict[str, Any]] = None, limit: Optional[int] = None) -> List[dict]:
    if db is None:
        raise DatabaseNotConfigured("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")
    cursor = db[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)
