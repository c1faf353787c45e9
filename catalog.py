"""
Catalog queries and admin writes against MongoDB.

Collections: product, category, banner, settings.
"""

import logging
import re
from typing import List, Optional

from bson import ObjectId
from pydantic import ValidationError
from pymongo import DESCENDING

import database
from database import DatabaseNotConfigured, create_document, get_documents, now, to_dict
from schemas import Banner, CatalogProduct, Category, EnquirySettings, Product

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"
FEATURED_LIMIT = 8
NEW_ARRIVALS_LIMIT = 4
ENQUIRY_SETTINGS_ID = "enquiry"


class InvalidIdError(ValueError):
    pass


# Utility to convert Mongo _id to string

def serialize_doc(doc: dict):
    if not doc:
        return doc
    doc = dict(doc)
    _id = doc.get("_id")
    if isinstance(_id, ObjectId):
        doc["id"] = str(_id)
        del doc["_id"]
    return doc


def object_id(value: str) -> ObjectId:
    if not ObjectId.is_valid(value):
        raise InvalidIdError(f"Invalid id: {value}")
    return ObjectId(value)


def _collection(name: str):
    if database.db is None:
        raise DatabaseNotConfigured("Database not configured")
    return database.db[name]


# Products

def list_products(category: Optional[str] = None, search: Optional[str] = None, limit: Optional[int] = None) -> List[dict]:
    query = {}
    if category and category != ALL_CATEGORIES:
        query["category"] = category
    if search:
        pattern = re.escape(search)
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]
    return [serialize_doc(d) for d in get_documents("product", query, limit)]


def featured_products() -> List[dict]:
    return list_products(limit=FEATURED_LIMIT)


def new_arrivals() -> List[dict]:
    docs = _collection("product").find().sort("createdAt", DESCENDING).limit(NEW_ARRIVALS_LIMIT)
    return [serialize_doc(d) for d in docs]


def get_product(product_id: str) -> Optional[CatalogProduct]:
    doc = _collection("product").find_one({"_id": object_id(product_id)})
    if not doc:
        return None
    try:
        return CatalogProduct(**serialize_doc(doc))
    except ValidationError as e:
        logger.warning("Stored product %s is invalid, ignoring: %s", product_id, e)
        return None


def create_product(payload: Product) -> str:
    _id = create_document("product", payload)
    logger.info("Created product %s (%s)", _id, payload.name)
    return _id


def _update(collection_name: str, doc_id: str, payload) -> bool:
    data = to_dict(payload)
    data["updatedAt"] = now()
    result = _collection(collection_name).update_one({"_id": object_id(doc_id)}, {"$set": data})
    if result.matched_count:
        logger.info("Updated %s %s", collection_name, doc_id)
    return result.matched_count > 0


def _delete(collection_name: str, doc_id: str) -> bool:
    result = _collection(collection_name).delete_one({"_id": object_id(doc_id)})
    if result.deleted_count:
        logger.info("Deleted %s %s", collection_name, doc_id)
    return result.deleted_count > 0


def update_product(product_id: str, payload: Product) -> bool:
    return _update("product", product_id, payload)


def delete_product(product_id: str) -> bool:
    return _delete("product", product_id)


# Categories

def list_categories() -> List[dict]:
    return [serialize_doc(d) for d in get_documents("category")]


def category_exists(name: str) -> bool:
    return _collection("category").count_documents({"name": name}, limit=1) > 0


def create_category(payload: Category) -> str:
    _id = create_document("category", payload)
    logger.info("Created category %s (%s)", _id, payload.name)
    return _id


def update_category(category_id: str, payload: Category) -> bool:
    return _update("category", category_id, payload)


def delete_category(category_id: str) -> bool:
    return _delete("category", category_id)


# Banners

def list_banners(active_only: bool = True) -> List[dict]:
    query = {"isActive": True} if active_only else {}
    return [serialize_doc(d) for d in get_documents("banner", query)]


def create_banner(payload: Banner) -> str:
    _id = create_document("banner", payload)
    logger.info("Created banner %s (%s)", _id, payload.title)
    return _id


def update_banner(banner_id: str, payload: Banner) -> bool:
    return _update("banner", banner_id, payload)


def delete_banner(banner_id: str) -> bool:
    return _delete("banner", banner_id)


# Enquiry settings

def get_enquiry_settings() -> Optional[EnquirySettings]:
    """Stored settings, or None when the database or document is missing."""
    if database.db is None:
        logger.warning("Database not configured, enquiry settings unavailable")
        return None
    doc = database.db["settings"].find_one({"_id": ENQUIRY_SETTINGS_ID})
    if not doc:
        return None
    try:
        return EnquirySettings(whatsappNumber=doc.get("whatsappNumber", ""), prefilledText=doc.get("prefilledText", ""))
    except ValidationError as e:
        logger.warning("Stored enquiry settings are invalid, ignoring: %s", e)
        return None


def save_enquiry_settings(payload: EnquirySettings) -> None:
    data = to_dict(payload)
    data["updatedAt"] = now()
    _collection("settings").update_one({"_id": ENQUIRY_SETTINGS_ID}, {"$set": data}, upsert=True)
    logger.info("Saved enquiry settings for %s", payload.whatsappNumber)
