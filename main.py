import logging
import os
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Security, status
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from pydantic import BaseModel

import catalog
import database
from cart import CartStore
from catalog import InvalidIdError
from database import DatabaseNotConfigured
from enquiry import DEFAULT_TEMPLATE, FALLBACK_WHATSAPP_NUMBER, compose_enquiry
from schemas import Banner, CartView, Category, Enquiry, EnquirySettings, Product

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger("storefront")

app = FastAPI(title="Storefront Enquiry API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

carts = CartStore()


def get_carts() -> CartStore:
    return carts


@app.exception_handler(InvalidIdError)
async def invalid_id_handler(request: Request, exc: InvalidIdError):
    return JSONResponse(status_code=400, content={"detail": "Invalid id"})


@app.exception_handler(DatabaseNotConfigured)
async def database_not_configured_handler(request: Request, exc: DatabaseNotConfigured):
    logger.warning("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Database not configured"})


# Admin auth
api_key_header = APIKeyHeader(name="X-API-KEY", auto_error=False)


async def require_admin(api_key: Optional[str] = Security(api_key_header)) -> str:
    expected = os.getenv("ADMIN_API_KEY")
    if not expected:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Admin key not configured")
    if not api_key or api_key != expected:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Could not validate credentials")
    return api_key


# Basic
@app.get("/")
def read_root():
    return {"message": "Storefront Enquiry API running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }
    db = database.db
    if db is None:
        return response
    response["database"] = "✅ Available"
    response["database_url"] = "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set"
    response["database_name"] = db.name
    response["connection_status"] = "Connected"
    try:
        response["collections"] = db.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
    except Exception as e:
        response["database"] = f"⚠️ Connected but Error: {str(e)[:50]}"
    return response


# Catalog
@app.get("/products", response_model=List[dict])
def list_products(category: Optional[str] = None, search: Optional[str] = None):
    return catalog.list_products(category=category, search=search)


@app.get("/products/featured", response_model=List[dict])
def featured_products():
    return catalog.featured_products()


@app.get("/products/new-arrivals", response_model=List[dict])
def new_arrivals():
    return catalog.new_arrivals()


@app.get("/products/{product_id}")
def get_product(product_id: str):
    product = catalog.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Not found")
    return product


@app.get("/categories", response_model=List[dict])
def list_categories():
    return catalog.list_categories()


@app.get("/banners", response_model=List[dict])
def list_banners():
    return catalog.list_banners(active_only=True)


# Cart

class AddToCartRequest(BaseModel):
    product_id: str


class UpdateQuantityRequest(BaseModel):
    quantity: int


def empty_cart_view() -> CartView:
    return CartView(items=[], count=0, total=0)


@app.get("/cart/{session_id}", response_model=CartView)
async def get_cart(session_id: str, carts: CartStore = Depends(get_carts)):
    cart = carts.peek(session_id)
    return cart.view() if cart else empty_cart_view()


@app.post("/cart/{session_id}/items", response_model=CartView, status_code=201)
async def add_to_cart(session_id: str, req: AddToCartRequest, carts: CartStore = Depends(get_carts)):
    product = await run_in_threadpool(catalog.get_product, req.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    cart = carts.get(session_id)
    cart.add_to_cart(product)
    return cart.view()


@app.patch("/cart/{session_id}/items/{product_id}", response_model=CartView)
async def update_quantity(session_id: str, product_id: str, req: UpdateQuantityRequest, carts: CartStore = Depends(get_carts)):
    cart = carts.peek(session_id)
    if not cart:
        return empty_cart_view()
    cart.update_quantity(product_id, req.quantity)
    return cart.view()


@app.delete("/cart/{session_id}/items/{product_id}", response_model=CartView)
async def remove_from_cart(session_id: str, product_id: str, carts: CartStore = Depends(get_carts)):
    cart = carts.peek(session_id)
    if not cart:
        return empty_cart_view()
    cart.remove_from_cart(product_id)
    return cart.view()


@app.delete("/cart/{session_id}", response_model=CartView)
async def clear_cart(session_id: str, carts: CartStore = Depends(get_carts)):
    cart = carts.peek(session_id)
    if cart:
        cart.clear_cart()
        carts.discard(session_id)
    return empty_cart_view()


@app.post("/cart/{session_id}/enquiry", response_model=Enquiry)
async def send_enquiry(session_id: str, carts: CartStore = Depends(get_carts)):
    cart = carts.peek(session_id)
    if not cart or not cart.items:
        raise HTTPException(status_code=400, detail="Your cart is empty")
    settings = await run_in_threadpool(catalog.get_enquiry_settings)
    return compose_enquiry(cart.items, settings)


# Admin
admin = [Depends(require_admin)]


def check_category(payload: Product) -> None:
    if not catalog.category_exists(payload.category):
        raise HTTPException(status_code=400, detail=f"Unknown category: {payload.category}")


@app.post("/admin/products", status_code=201, dependencies=admin)
def create_product(payload: Product):
    check_category(payload)
    return {"id": catalog.create_product(payload)}


@app.put("/admin/products/{product_id}", dependencies=admin)
def update_product(product_id: str, payload: Product):
    check_category(payload)
    if not catalog.update_product(product_id, payload):
        raise HTTPException(status_code=404, detail="Not found")
    return {"id": product_id}


@app.delete("/admin/products/{product_id}", status_code=204, dependencies=admin)
def delete_product(product_id: str):
    if not catalog.delete_product(product_id):
        raise HTTPException(status_code=404, detail="Not found")


@app.post("/admin/categories", status_code=201, dependencies=admin)
def create_category(payload: Category):
    return {"id": catalog.create_category(payload)}


@app.put("/admin/categories/{category_id}", dependencies=admin)
def update_category(category_id: str, payload: Category):
    if not catalog.update_category(category_id, payload):
        raise HTTPException(status_code=404, detail="Not found")
    return {"id": category_id}


@app.delete("/admin/categories/{category_id}", status_code=204, dependencies=admin)
def delete_category(category_id: str):
    if not catalog.delete_category(category_id):
        raise HTTPException(status_code=404, detail="Not found")


@app.get("/admin/banners", response_model=List[dict], dependencies=admin)
def list_all_banners():
    return catalog.list_banners(active_only=False)


@app.post("/admin/banners", status_code=201, dependencies=admin)
def create_banner(payload: Banner):
    return {"id": catalog.create_banner(payload)}


@app.put("/admin/banners/{banner_id}", dependencies=admin)
def update_banner(banner_id: str, payload: Banner):
    if not catalog.update_banner(banner_id, payload):
        raise HTTPException(status_code=404, detail="Not found")
    return {"id": banner_id}


@app.delete("/admin/banners/{banner_id}", status_code=204, dependencies=admin)
def delete_banner(banner_id: str):
    if not catalog.delete_banner(banner_id):
        raise HTTPException(status_code=404, detail="Not found")


@app.get("/admin/settings/enquiry", response_model=EnquirySettings, dependencies=admin)
def get_enquiry_settings():
    settings = catalog.get_enquiry_settings()
    if settings is None:
        return EnquirySettings(whatsappNumber=FALLBACK_WHATSAPP_NUMBER, prefilledText=DEFAULT_TEMPLATE)
    return settings


@app.put("/admin/settings/enquiry", response_model=EnquirySettings, dependencies=admin)
def save_enquiry_settings(payload: EnquirySettings):
    catalog.save_enquiry_settings(payload)
    return payload


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
