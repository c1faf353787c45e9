from unittest.mock import MagicMock, patch

import pytest
from bson import ObjectId

import catalog
import database
from catalog import InvalidIdError
from database import DatabaseNotConfigured
from schemas import EnquirySettings, Product

PRODUCT_ID = ObjectId()


@pytest.fixture
def mock_db():
    db = MagicMock()
    with patch("database.db", db):
        yield db


def product_doc(**overrides):
    doc = {
        "_id": PRODUCT_ID,
        "name": "Shirt",
        "description": "A plain cotton shirt",
        "price": 500.0,
        "category": "Apparel",
        "imageUrls": ["https://img/a.jpg"],
        "showPrice": True,
    }
    doc.update(overrides)
    return doc


def test_serialize_doc_exposes_string_id():
    assert catalog.serialize_doc({"_id": PRODUCT_ID, "name": "x"}) == {"id": str(PRODUCT_ID), "name": "x"}


def test_list_products_builds_category_and_search_filter(mock_db):
    mock_db["product"].find.return_value = [product_doc()]

    result = catalog.list_products(category="Apparel", search="shirt (blue)")

    query = mock_db["product"].find.call_args[0][0]
    assert query["category"] == "Apparel"
    assert query["$or"][0] == {"name": {"$regex": r"shirt\ \(blue\)", "$options": "i"}}
    assert result[0]["id"] == str(PRODUCT_ID)


def test_list_products_all_category_means_no_filter(mock_db):
    mock_db["product"].find.return_value = []
    catalog.list_products(category="All")
    mock_db["product"].find.assert_called_with({})


def test_new_arrivals_sorted_by_creation(mock_db):
    cursor = mock_db["product"].find.return_value
    cursor.sort.return_value.limit.return_value = [product_doc()]

    result = catalog.new_arrivals()

    cursor.sort.assert_called_with("createdAt", -1)
    cursor.sort.return_value.limit.assert_called_with(4)
    assert len(result) == 1


def test_get_product(mock_db):
    mock_db["product"].find_one.return_value = product_doc()
    product = catalog.get_product(str(PRODUCT_ID))
    assert product.id == str(PRODUCT_ID)
    assert product.imageUrls == ["https://img/a.jpg"]


def test_get_product_missing_and_invalid(mock_db):
    mock_db["product"].find_one.return_value = None
    assert catalog.get_product(str(ObjectId())) is None
    with pytest.raises(InvalidIdError):
        catalog.get_product("not-an-id")


def test_update_product_reports_match(mock_db):
    mock_db["product"].update_one.return_value.matched_count = 0
    payload = Product(**{k: v for k, v in product_doc().items() if k != "_id"})
    assert catalog.update_product(str(PRODUCT_ID), payload) is False


def test_list_banners_active_only(mock_db):
    mock_db["banner"].find.return_value = []
    catalog.list_banners()
    mock_db["banner"].find.assert_called_with({"isActive": True})


def test_enquiry_settings_roundtrip(mock_db):
    mock_db["settings"].find_one.return_value = {"_id": "enquiry", "whatsappNumber": "911234567890", "prefilledText": "Hi {{items}} {{total}}"}
    settings = catalog.get_enquiry_settings()
    assert settings == EnquirySettings(whatsappNumber="911234567890", prefilledText="Hi {{items}} {{total}}")

    catalog.save_enquiry_settings(settings)
    args, kwargs = mock_db["settings"].update_one.call_args
    assert args[0] == {"_id": "enquiry"}
    assert args[1]["$set"]["whatsappNumber"] == "911234567890"
    assert kwargs == {"upsert": True}


def test_enquiry_settings_invalid_or_missing(mock_db):
    mock_db["settings"].find_one.return_value = {"_id": "enquiry", "whatsappNumber": "+91 12"}
    assert catalog.get_enquiry_settings() is None
    mock_db["settings"].find_one.return_value = None
    assert catalog.get_enquiry_settings() is None


def test_without_database():
    with patch("database.db", None):
        assert catalog.get_enquiry_settings() is None
        with pytest.raises(DatabaseNotConfigured):
            catalog.list_products()


def test_get_product_invalid_stored_document(mock_db):
    mock_db["product"].find_one.return_value = product_doc(name="x", price=None)
    assert catalog.get_product(str(PRODUCT_ID)) is None


def test_featured_products_limit(mock_db):
    cursor = mock_db["product"].find.return_value
    cursor.limit.return_value = [product_doc()]

    result = catalog.featured_products()

    mock_db["product"].find.assert_called_with({})
    cursor.limit.assert_called_with(8)
    assert result[0]["id"] == str(PRODUCT_ID)


def test_category_exists(mock_db):
    mock_db["category"].count_documents.return_value = 1
    assert catalog.category_exists("Apparel") is True
    mock_db["category"].count_documents.assert_called_with({"name": "Apparel"}, limit=1)

    mock_db["category"].count_documents.return_value = 0
    assert catalog.category_exists("Nope") is False


def test_create_document_stamps_one_timestamp(mock_db):
    mock_db["category"].insert_one.return_value.inserted_id = PRODUCT_ID

    _id = database.create_document("category", {"name": "Books", "description": "Paper things"})

    doc = mock_db["category"].insert_one.call_args[0][0]
    assert _id == str(PRODUCT_ID)
    assert doc["createdAt"] == doc["updatedAt"]
