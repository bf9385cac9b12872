import os
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import catalog
from checkout import OrderValidationError, submit_order
from clock import Clock, utcnow
from database import (
    ANNOUNCEMENT_BAR,
    DELIVERIES,
    HEROES,
    INSTAGRAM,
    SHOP_NOW,
    Datastore,
    PersistenceError,
    get_datastore,
)
from notifications import format_order_message, whatsapp_url
from schemas import (
    AnnouncementBarOut,
    CategoryDetailOut,
    CategoryOut,
    CheckoutRequest,
    DeliveryOut,
    HeroOut,
    InstagramOut,
    OrderCreated,
    ProductDetailOut,
    ProductOut,
    ShopNowOut,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

STORE_NAME = os.getenv("STORE_NAME", "LC ORGANIC")
WHATSAPP_NUMBER = os.getenv("WHATSAPP_NUMBER")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

app = FastAPI(title="Storefront API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Errors ----------

class ApiError(HTTPException):
    """HTTPException whose detail dict is the whole response body, e.g. {"error": ...}."""

    def __init__(self, status_code: int, error: str, **extra):
        super().__init__(status_code=status_code, detail={"error": error, **extra})


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.detail)


# ---------- Dependencies ----------

def get_store() -> Datastore:
    store = get_datastore()
    if store is None:
        raise ApiError(500, "Database not configured")
    return store


def get_clock() -> Clock:
    return utcnow


def failure(message: str, exc: Exception) -> ApiError:
    logger.exception("%s", message)
    return ApiError(500, message, details=str(exc))


def not_found(what: str) -> ApiError:
    return ApiError(404, f"{what} not found")


# ---------- Basic Routes ----------

@app.get("/")
def read_root():
    return {"message": "Storefront Backend Running"}


@app.get("/api/health")
def health(store: Datastore = Depends(get_store)):
    try:
        collections = store.ping()
    except PersistenceError as e:
        return {"backend": "running", "database": "error", "details": str(e)[:50], "collections": []}
    return {"backend": "running", "database": "connected", "collections": collections}


# ---------- Product Routes ----------

@app.get("/api/products", response_model=List[ProductOut])
def list_products(
    featured: Optional[bool] = None,
    store: Datastore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    try:
        return catalog.list_products(store, featured=bool(featured), clock=clock)
    except PersistenceError as e:
        raise failure("Failed to fetch products", e)


@app.get("/api/products/{slug}", response_model=ProductDetailOut)
def get_product(slug: str, store: Datastore = Depends(get_store), clock: Clock = Depends(get_clock)):
    try:
        product = catalog.get_product(store, slug, clock=clock)
    except PersistenceError as e:
        raise failure("Failed to fetch product", e)
    if product is None:
        raise not_found("Product")
    return product


# ---------- Category Routes ----------

@app.get("/api/categories", response_model=List[CategoryOut])
def list_categories(store: Datastore = Depends(get_store)):
    try:
        return catalog.list_categories(store)
    except PersistenceError as e:
        raise failure("Failed to fetch categories", e)


@app.get("/api/categories/{slug}", response_model=CategoryDetailOut)
def get_category(slug: str, store: Datastore = Depends(get_store), clock: Clock = Depends(get_clock)):
    try:
        category = catalog.get_category(store, slug, clock=clock)
    except PersistenceError as e:
        raise failure("Failed to fetch category", e)
    if category is None:
        raise not_found("Category")
    return category


# ---------- Site Content Routes ----------

@app.get("/api/delivery", response_model=List[DeliveryOut])
def list_delivery_prices(store: Datastore = Depends(get_store)):
    try:
        docs = store.find(DELIVERIES, sort=[("governorate", 1)])
    except PersistenceError as e:
        raise failure("Failed to fetch delivery prices", e)
    return [catalog.serialize_delivery(d) for d in docs]


@app.get("/api/hero", response_model=List[HeroOut])
def list_heroes(store: Datastore = Depends(get_store)):
    try:
        docs = store.find(HEROES, sort=catalog.NEWEST_FIRST)
    except PersistenceError as e:
        raise failure("Failed to fetch heroes", e)
    return [catalog.serialize_hero(d) for d in docs]


@app.get("/api/announcementbar", response_model=AnnouncementBarOut)
def get_announcement_bar(store: Datastore = Depends(get_store)):
    try:
        doc = store.find_one(ANNOUNCEMENT_BAR, sort=[("updatedAt", -1)])
    except PersistenceError as e:
        raise failure("Failed to fetch announcement bar", e)
    return catalog.serialize_announcement_bar(doc)


@app.get("/api/shopnow", response_model=ShopNowOut)
def get_shop_now(store: Datastore = Depends(get_store)):
    try:
        doc = store.find_one(SHOP_NOW)
    except PersistenceError as e:
        raise failure("Failed to fetch Shopnow data", e)
    if doc is None:
        raise not_found("Shopnow data")
    return catalog.serialize_shop_now(doc)


@app.get("/api/instagram", response_model=InstagramOut)
def get_instagram(store: Datastore = Depends(get_store)):
    try:
        doc = store.find_one(INSTAGRAM)
    except PersistenceError as e:
        raise failure("Failed to fetch Instagram data", e)
    if doc is None:
        raise not_found("Instagram data")
    return catalog.serialize_instagram(doc)


# ---------- Order Routes ----------

@app.post("/api/orders", response_model=OrderCreated, status_code=201, response_model_exclude_none=True)
def create_order(
    order: CheckoutRequest,
    store: Datastore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    try:
        receipt = submit_order(store, order, clock=clock)
    except OrderValidationError as e:
        extra = {"fields": e.fields} if e.fields else {}
        raise ApiError(400, str(e), **extra)
    except PersistenceError as e:
        raise failure("Failed to create order", e)

    link = None
    if WHATSAPP_NUMBER:
        message = format_order_message(order, STORE_NAME, order_number=receipt.order_number)
        link = whatsapp_url(WHATSAPP_NUMBER, message)

    return OrderCreated(order_id=receipt.order_id, order_number=receipt.order_number, whatsapp_url=link)


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
