"""
Database Schemas

Define your MongoDB collection schemas here using Pydantic models.
These schemas are used for data validation in your application.

Each Pydantic model represents a collection in your database.
Model name is converted to lowercase for the collection name:
- Product -> "product" collection
- Category -> "category" collection
- Banner -> "banner" collection
- EnquirySettings is a single document ("enquiry") in the "settings" collection
"""

from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List

MAX_IMAGES = 5


class Product(BaseModel):
    """
    Products collection schema
    Collection name: "product"
    """
    name: str = Field(..., min_length=2, description="Product name")
    description: str = Field(..., min_length=10, description="Product description")
    price: float = Field(..., ge=0, description="Price in INR")
    category: str = Field(..., min_length=1, description="Category name")
    imageUrls: List[str] = Field(..., min_length=1, max_length=MAX_IMAGES, description="Ordered image URLs, first is the cover")
    showPrice: bool = Field(True, description="Show the price to buyers and count it in totals")


class CatalogProduct(Product):
    """A product as stored in the catalog. Older documents may lack images."""
    id: str
    description: str = ""
    imageUrls: List[str] = Field(default_factory=list)
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class Category(BaseModel):
    """
    Categories collection schema
    Collection name: "category"
    """
    name: str = Field(..., min_length=2, description="Category name")
    description: str = Field(..., min_length=5, description="Short description")


class Banner(BaseModel):
    """
    Banners collection schema
    Collection name: "banner"
    """
    title: str = Field(..., min_length=2)
    subtitle: str = Field(..., min_length=2)
    buttonText: str = Field(..., min_length=2)
    buttonLink: str = Field(..., description="Absolute URL or internal path starting with /")
    imageUrl: str = Field(..., min_length=1, description="Banner image URL")
    isActive: bool = Field(True, description="Shown on the home page")

    @field_validator("buttonLink")
    @classmethod
    def check_link(cls, v: str) -> str:
        if v.startswith("/") or v.startswith("http://") or v.startswith("https://"):
            return v
        raise ValueError("Please enter a valid URL or an internal link starting with /")


class EnquirySettings(BaseModel):
    """
    Enquiry settings document
    Collection name: "settings", document id: "enquiry"
    """
    whatsappNumber: str = Field(..., pattern=r"^[0-9]+$", description="Country code and number, digits only")
    prefilledText: str = Field(..., min_length=10, description="Message template with {{items}} and {{total}}")


class CartLineItem(BaseModel):
    """One product in a cart. Not persisted."""
    id: str
    name: str
    price: float
    category: str
    imageUrl: str
    showPrice: bool = True
    quantity: int = Field(1, ge=1)


class CartView(BaseModel):
    items: List[CartLineItem]
    count: int
    total: float


class Enquiry(BaseModel):
    message: str
    deepLinkUrl: str
