from pydantic import BaseModel, Field
from typing import Any, ClassVar, Dict, List, Optional
from datetime import datetime


class StoreObject(BaseModel):
    """Anything the catalog can persist. id 0 means not saved yet."""
    object_type: ClassVar[str] = ""
    id: int = 0


# --- Catalog ---

class ProductAttribute(BaseModel):
    id: int = 0  # global attribute id, 0 for a product-local attribute
    name: str
    position: int = 0
    visible: bool = True
    variation: bool = True
    options: List[str] = []


class GlobalAttribute(StoreObject):
    object_type: ClassVar[str] = "attribute"
    name: str
    slug: str  # taxonomy name, e.g. pa_color
    type: str = "select"
    order_by: str = "menu_order"
    has_archives: bool = False


class Product(StoreObject):
    object_type: ClassVar[str] = "product"
    type: str = "simple"  # simple, variable
    status: str = "publish"
    name: str
    slug: str
    sku: str
    featured: bool = False
    catalog_visibility: str = "visible"
    description: str = ""
    short_description: str = ""
    regular_price: Optional[float] = None
    sale_price: Optional[float] = None
    date_on_sale_to: Optional[datetime] = None
    total_sales: int = 0
    tax_status: str = "taxable"
    tax_class: str = ""
    manage_stock: bool = False
    stock_quantity: Optional[int] = None
    stock_status: str = "instock"
    backorders: str = "no"
    sold_individually: bool = False
    virtual: bool = False
    downloadable: bool = False
    weight: Optional[int] = None
    length: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    upsell_ids: List[int] = []
    cross_sell_ids: List[int] = []
    category_ids: List[int] = []
    tag_ids: List[int] = []
    attributes: List[ProductAttribute] = []
    image: Optional[str] = None
    gallery: List[str] = []
    reviews_allowed: bool = True
    purchase_note: str = ""
    menu_order: int = 0
    date_created: datetime = Field(default_factory=datetime.now)

    @property
    def price(self) -> Optional[float]:
        return self.sale_price if self.sale_price is not None else self.regular_price


class ProductVariation(StoreObject):
    object_type: ClassVar[str] = "product_variation"
    parent_id: int
    attributes: Dict[str, str]  # attribute name → chosen option
    sku: str = ""
    regular_price: float
    sale_price: Optional[float] = None
    date_on_sale_to: Optional[datetime] = None
    tax_status: str = "taxable"
    tax_class: str = ""
    manage_stock: bool = False
    stock_quantity: Optional[int] = None
    stock_status: str = "instock"
    virtual: bool = False
    downloadable: bool = False
    weight: Optional[int] = None
    length: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    image: Optional[str] = None

    @property
    def price(self) -> float:
        return self.sale_price if self.sale_price is not None else self.regular_price


class Term(StoreObject):
    object_type: ClassVar[str] = "term"
    taxonomy: str  # product_cat, product_tag
    name: str
    slug: str
    parent: int = 0
    description: str = ""


# --- People ---

class Address(BaseModel):
    first_name: str = ""
    last_name: str = ""
    company: str = ""
    address_1: str = ""
    address_2: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    country: str = ""
    email: str = ""
    phone: str = ""


class Customer(StoreObject):
    object_type: ClassVar[str] = "customer"
    role: str = "customer"
    email: str
    username: str
    first_name: str = ""
    last_name: str = ""
    display_name: str = ""
    password: str = "password"
    billing: Address = Field(default_factory=Address)
    shipping: Address = Field(default_factory=Address)
    date_created: datetime = Field(default_factory=datetime.now)


# --- Sales ---

class Coupon(StoreObject):
    object_type: ClassVar[str] = "coupon"
    code: str
    amount: float
    discount_type: str = "fixed_cart"
    date_created: datetime = Field(default_factory=datetime.now)


class OrderLineItem(BaseModel):
    product_id: int
    variation_id: int = 0
    name: str
    quantity: int
    subtotal: float
    total: float


class OrderFeeLine(BaseModel):
    name: str
    amount: float
    tax_status: str = "taxable"
    total: float


class OrderCouponLine(BaseModel):
    code: str
    discount: float


class Order(StoreObject):
    object_type: ClassVar[str] = "order"
    status: str  # completed, processing, on-hold, failed, ...
    currency: str = "USD"
    created_via: str = "smooth-generator"
    customer_id: int = 0  # 0 for guests
    billing: Address = Field(default_factory=Address)
    shipping: Address = Field(default_factory=Address)
    line_items: List[OrderLineItem] = []
    fee_lines: List[OrderFeeLine] = []
    coupon_lines: List[OrderCouponLine] = []
    subtotal: float = 0.0
    discount_total: float = 0.0
    total_tax: float = 0.0
    total: float = 0.0
    date_created: datetime
    date_paid: Optional[datetime] = None
    date_completed: Optional[datetime] = None
    meta_data: Dict[str, Any] = {}

    def calculate_totals(self) -> None:
        """Recompute subtotal, discount and total from the order's lines."""
        self.subtotal = round(sum(item.subtotal for item in self.line_items), 2)
        fees = round(sum(fee.total for fee in self.fee_lines), 2)
        discount = round(sum(c.discount for c in self.coupon_lines), 2)
        # A fixed-cart coupon can't take the order below zero
        self.discount_total = min(discount, self.subtotal)
        for item in self.line_items:
            share = item.subtotal / self.subtotal if self.subtotal else 0
            item.total = round(item.subtotal - self.discount_total * share, 2)
        self.total = round(self.subtotal - self.discount_total + fees + self.total_tax, 2)


ORDER_STATUSES = ["pending", "processing", "on-hold", "completed", "cancelled", "refunded", "failed"]
