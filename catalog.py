"""
Catalog read paths: turning stored documents into what the storefront shows.

Product prices always go through the sale rules at read time so a sale that
expired since the product was saved never reaches a client as discounted.
"""

import re
from typing import Any, List, Optional

from clock import Clock, utcnow
from database import CATEGORIES, PRODUCTS
from pricing import get_display_price, get_effective_enable_sale, usable_sale_price
from schemas import (
    AnnouncementBarOut,
    CategoryDetailOut,
    CategoryOut,
    DeliveryOut,
    HeroOut,
    InstagramOut,
    InstagramPostOut,
    ProductDetailOut,
    ProductOut,
    ShopNowOut,
)

PLACEHOLDER_IMAGE = "/placeholder.svg"
NEWEST_FIRST = [("createdAt", -1)]
VIDEO_PATTERN = re.compile(r"\.(mp4|webm|ogg|mov)$", re.IGNORECASE)


def doc_id(doc: dict) -> str:
    return str(doc["_id"])


def _cover_image(images: Optional[List[str]]) -> str:
    return images[0] if images else PLACEHOLDER_IMAGE


def _product_fields(doc: dict, clock: Clock) -> dict:
    images = doc.get("images") or []
    return {
        "id": doc_id(doc),
        "name": doc.get("title", ""),
        "title": doc.get("title", ""),
        "price": get_display_price(doc, clock),
        "original_price": doc.get("price"),
        "sale_price": usable_sale_price(doc.get("salePrice")),
        "enable_sale": get_effective_enable_sale(doc, clock),
        "image": _cover_image(images),
        "images": images,
        "slug": doc.get("slug"),
        "description": doc.get("description") or "",
        "stock": doc.get("stock"),
    }


def serialize_product(doc: dict, clock: Clock = utcnow) -> ProductOut:
    return ProductOut(**_product_fields(doc, clock))


def product_sku(doc: dict) -> str:
    slug = doc.get("slug")
    if slug:
        return slug.upper()
    return f"PROD-{doc_id(doc)[-6:]}"


def serialize_product_detail(doc: dict, clock: Clock = utcnow) -> ProductDetailOut:
    length = doc.get("length") or []
    return ProductDetailOut(
        **_product_fields(doc, clock),
        sku=product_sku(doc),
        options={"length": length} if length else None,
        category=doc.get("category"),
    )


def list_products(store, featured: bool = False, clock: Clock = utcnow) -> List[ProductOut]:
    query = {"isFeatured": True} if featured else {}
    return [serialize_product(d, clock) for d in store.find(PRODUCTS, query, sort=NEWEST_FIRST)]


def get_product(store, slug: str, clock: Clock = utcnow) -> Optional[ProductDetailOut]:
    doc = store.find_one_by_field(PRODUCTS, "slug", slug)
    if doc is None:
        return None
    return serialize_product_detail(doc, clock)


# ---------- Categories ----------

def category_slug(name: str) -> str:
    return re.sub(r"\s+", "-", name.lower())


def category_name_from_slug(slug: str) -> str:
    # "body-care" -> "Body Care"
    return " ".join(word[:1].upper() + word[1:].lower() for word in slug.split("-"))


def serialize_category(doc: dict) -> CategoryOut:
    return CategoryOut(
        id=doc_id(doc),
        name=doc["name"],
        description=doc.get("description"),
        image=doc.get("image"),
        slug=category_slug(doc["name"]),
        created_at=doc.get("createdAt"),
    )


def list_categories(store) -> List[CategoryOut]:
    return [serialize_category(d) for d in store.find(CATEGORIES, sort=NEWEST_FIRST)]


def find_category(store, slug: str) -> Optional[dict]:
    """Look a category up by slug: exact name first, then any name that slugifies to it."""
    category = store.find_one_by_field(CATEGORIES, "name", category_name_from_slug(slug))
    if category is not None:
        return category
    wanted = slug.lower()
    for candidate in store.find(CATEGORIES):
        if category_slug(candidate["name"]) == wanted:
            return candidate
    return None


def get_category(store, slug: str, clock: Clock = utcnow) -> Optional[CategoryDetailOut]:
    category = find_category(store, slug)
    if category is None:
        return None

    # Product.category holds the category name, not its id
    products = store.find(PRODUCTS, {"category": category["name"]}, sort=NEWEST_FIRST)
    return CategoryDetailOut(
        id=doc_id(category),
        name=category["name"],
        title=category["name"].upper(),
        description=category.get("description") or "",
        image=category.get("image"),
        slug=category_slug(category["name"]),
        products=[serialize_product(p, clock) for p in products],
    )


# ---------- Site content ----------

def serialize_delivery(doc: dict) -> DeliveryOut:
    return DeliveryOut(id=doc_id(doc), governorate=doc["governorate"], price=doc["price"])


def serialize_hero(doc: dict) -> HeroOut:
    return HeroOut(id=doc_id(doc), image=doc.get("image"), created_at=doc.get("createdAt"))


def serialize_announcement_bar(doc: Optional[dict]) -> AnnouncementBarOut:
    if doc is None:
        return AnnouncementBarOut(texts=[])
    return AnnouncementBarOut(texts=doc.get("texts") or [])


def serialize_shop_now(doc: dict) -> ShopNowOut:
    return ShopNowOut(
        id=doc_id(doc),
        image=doc.get("image"),
        description=doc.get("description"),
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


def _media_type(content: Any) -> str:
    if isinstance(content, str) and VIDEO_PATTERN.search(content):
        return "video"
    return "image"


def serialize_instagram(doc: dict) -> InstagramOut:
    account_id = doc_id(doc)
    posts = [
        InstagramPostOut(
            id=f"{account_id}-{index}",
            cover=post.get("coverimage"),
            type=_media_type(post.get("content")),
            media=post.get("content"),
            caption=post.get("description"),
        )
        for index, post in enumerate(doc.get("posts") or [])
    ]
    return InstagramOut(
        id=account_id,
        logo=doc.get("logo"),
        account_name=doc.get("accountname"),
        posts=posts,
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )
