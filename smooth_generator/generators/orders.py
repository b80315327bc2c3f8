"""
Order generator.

Each order gets a customer (existing, new, or a guest), 1-10 existing
products with quantities, sometimes an extra fee and a coupon, a status,
a creation date and (for recent dates) attribution meta. Paid and completed
dates follow from the status.
"""
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

from smooth_generator.generators.base import Generator
from smooth_generator.generators.coupons import CouponGenerator
from smooth_generator.generators.customers import CustomerGenerator
from smooth_generator.generators.order_attribution import OrderAttribution
from smooth_generator.schemas.woocommerce import (
    ORDER_STATUSES, Customer, Order, OrderCouponLine, OrderFeeLine, OrderLineItem, Product, ProductVariation,
)

logger = logging.getLogger(__name__)

ORDER_STATUS_WEIGHTS = {"completed": 70, "processing": 15, "on-hold": 5, "failed": 10}

FEE_PROBABILITY = 20  # percent of orders with an extra fee

# Orders dated before this predate the attribution feature
ATTRIBUTION_START = datetime(2024, 1, 9)


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValueError(f'The date "{value}" is not a valid YYYY-MM-DD date.') from None


class OrderGenerator(Generator):
    key = "orders"

    def __init__(
        self,
        *args,
        customers: Optional[CustomerGenerator] = None,
        coupons: Optional[CouponGenerator] = None,
        attribution: Optional[OrderAttribution] = None,
        currency: str = "USD",
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.customers = customers or CustomerGenerator(self.catalog, faker=self.faker)
        self.coupons = coupons or CouponGenerator(self.catalog, faker=self.faker)
        self.attribution = attribution or OrderAttribution(self.rng)
        self.currency = currency

    def generate(self, save: bool = True, **args) -> Order:
        status = self.get_status(args)
        created = self.get_date_created(args)
        customer = self.get_customer()

        order = Order(
            status=status,
            currency=self.currency,
            customer_id=customer.id,
            billing=customer.billing.model_copy(),
            shipping=customer.shipping.model_copy(),
            date_created=created,
        )

        for product in self.get_random_products(1, 10):
            quantity = self.faker.random_int(1, 10)
            is_variation = isinstance(product, ProductVariation)
            subtotal = round((product.price or 0) * quantity, 2)
            order.line_items.append(OrderLineItem(
                product_id=product.parent_id if is_variation else product.id,
                variation_id=product.id if is_variation else 0,
                name=self._line_name(product),
                quantity=quantity,
                subtotal=subtotal,
                total=subtotal,
            ))

        if self.rng.randint(0, 100) <= FEE_PROBABILITY:
            fee = round(self.rng.uniform(0.05, 100), 2)
            order.fee_lines.append(OrderFeeLine(name="Extra Fee", amount=fee, total=fee))

        if args.get("coupons"):
            coupon = self.coupons.generate(True)
            order.coupon_lines.append(OrderCouponLine(code=coupon.code, discount=coupon.amount))

        order.calculate_totals()

        if created >= ATTRIBUTION_START:
            self.attribution.add_order_attribution_meta(order, args)

        if status in ("completed", "processing"):
            order.date_paid = created + timedelta(hours=self.rng.randint(0, 36))
            if status == "completed":
                order.date_completed = order.date_paid + timedelta(hours=self.rng.randint(0, 36))

        if save:
            self.catalog.save(order)
        return order

    # ═══════════════════════════════════════════════════════════════
    # PARTS
    # ═══════════════════════════════════════════════════════════════

    def get_customer(self) -> Customer:
        """An existing customer half the time; otherwise a new one, saved unless it's a guest."""
        guest = self.faker.boolean()
        existing = self.faker.boolean()

        if existing:
            customer = self.catalog.random_customer()
            if customer:
                return customer

        return self.customers.generate(save=not guest)

    def get_status(self, args: dict) -> str:
        status = args.get("status")
        if status:
            if status not in ORDER_STATUSES:
                raise ValueError(f'The argument "{status}" is not a valid order status.')
            return status
        return self.random_weighted_element(ORDER_STATUS_WEIGHTS)

    def get_date_created(self, args: dict) -> datetime:
        """
        A random day between date_start and date_end (today when no end is
        given) at a random hour; today when no start is given.
        """
        today = date.today()
        start = parse_date(args.get("date_start"))
        end = parse_date(args.get("date_end")) or today

        if start is None:
            day = today
        else:
            if start > end:
                raise ValueError("The start date must be on or before the end date.")
            day = start + timedelta(days=self.rng.randint(0, (end - start).days))

        return datetime(day.year, day.month, day.day, self.rng.randint(0, 23))

    def get_random_products(self, min_amount: int = 1, max_amount: int = 4) -> List[Union[Product, ProductVariation]]:
        """Random published products; variable products contribute one random variation."""
        wanted = min(self.rng.randint(min_amount, max_amount), self.catalog.count(Product.object_type))
        products = []
        for product_id in self.catalog.random_ids(Product.object_type, wanted, status="publish"):
            product = self.catalog.get(Product.object_type, product_id)
            if product.type == "variable":
                variations = self.catalog.variations(product_id)
                if not variations:
                    continue
                products.append(self.rng.choice(variations))
            else:
                products.append(product)
        return products

    def _line_name(self, product: Union[Product, ProductVariation]) -> str:
        if not isinstance(product, ProductVariation):
            return product.name
        parent = self.catalog.get(Product.object_type, product.parent_id)
        options = ", ".join(product.attributes.values())
        return f"{parent.name} - {options}" if parent else options

