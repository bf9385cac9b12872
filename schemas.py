from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for everything exchanged with the storefront (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


# ---------- Collections ----------

# Collection: Product
class Product(CamelModel):
    title: str = Field(..., description="Product title")
    slug: str = Field(..., description="URL slug")
    price: float = Field(..., gt=0, description="Regular price in dollars")
    enable_sale: bool = Field(False, description="Merchant sale toggle")
    sale_price: Optional[float] = Field(None, description="Honored only when > 0")
    sale_end_date: Optional[datetime] = Field(None, description="Absent means the sale never expires")
    images: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    stock: int = Field(0, ge=0)
    category: Optional[str] = Field(None, description="LcOrganicCategory name")
    is_featured: bool = False
    length: List[str] = Field(default_factory=list, description="Length options")
    created_at: Optional[datetime] = None


# Collection: Order
class OrderLine(CamelModel):
    product_id: str
    name: str
    variant: Optional[str] = None
    quantity: int = Field(..., gt=0)
    price: float


class Order(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)

    order_number: str
    status: OrderStatus = OrderStatus.PENDING
    customer_name: str
    customer_phone: str
    country: str
    governorate: str
    district: str
    city: str
    street_name: str
    building_name: Optional[str] = None
    items: List[OrderLine]
    subtotal: float
    shipping: float
    total: float
    payment_method: str = "Cash on Delivery"
    created_at: datetime
    updated_at: datetime
    delivered_at: Optional[datetime] = None


# ---------- Checkout ----------

class CartLineIn(CamelModel):
    # Everything is optional so presence checks report a readable reason
    id: Optional[str] = None
    name: Optional[str] = None
    variant: Optional[str] = None
    quantity: Optional[int] = None
    price: Optional[float] = None


class CheckoutRequest(CamelModel):
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    country: Optional[str] = None
    governorate: Optional[str] = None
    district: Optional[str] = None
    city: Optional[str] = None
    street_name: Optional[str] = None
    building_name: Optional[str] = None
    items: Optional[List[CartLineIn]] = None
    subtotal: Optional[float] = None
    shipping: Optional[float] = None
    total: Optional[float] = None
    payment_method: Optional[str] = None


class CheckoutForm(CamelModel):
    full_name: str = ""
    phone_number: str = ""
    country: str = "Lebanon"
    governorate: str = ""
    district: str = ""
    city: str = ""
    street_name: str = ""
    building_name: str = ""


class OrderCreated(CamelModel):
    success: bool = True
    message: str = "Order created successfully"
    order_id: str
    order_number: str
    whatsapp_url: Optional[str] = None


# ---------- Catalog ----------

class ProductOut(CamelModel):
    id: str
    name: str
    title: str
    price: Optional[float] = None
    original_price: Optional[float] = None
    sale_price: Optional[float] = None
    enable_sale: bool = False
    image: str
    images: List[str] = []
    slug: Optional[str] = None
    description: str = ""
    stock: Optional[int] = None


class ProductDetailOut(ProductOut):
    sku: str
    options: Optional[Dict[str, List[str]]] = None
    category: Optional[str] = None


class CategoryOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    slug: str
    created_at: Optional[datetime] = None


class CategoryDetailOut(CamelModel):
    id: str
    name: str
    title: str
    description: str = ""
    image: Optional[str] = None
    slug: str
    products: List[ProductOut] = []


class DeliveryOut(CamelModel):
    id: str
    governorate: str
    price: float


class HeroOut(CamelModel):
    id: str
    image: Optional[str] = None
    created_at: Optional[datetime] = None


class AnnouncementBarOut(CamelModel):
    texts: List[str] = []


class ShopNowOut(CamelModel):
    id: str
    image: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InstagramPostOut(CamelModel):
    id: str
    cover: Optional[str] = None
    type: str
    media: Optional[str] = None
    caption: Optional[str] = None


class InstagramOut(CamelModel):
    id: str
    logo: Optional[str] = None
    account_name: Optional[str] = None
    posts: List[InstagramPostOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
