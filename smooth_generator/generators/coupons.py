"""Coupon generator: fixed-cart coupons whose code spells out the discount."""
from typing import Any

from smooth_generator.generators.base import Generator
from smooth_generator.schemas.woocommerce import Coupon

PROMOTION_ADJECTIVES = [
    "Amazing", "Awesome", "Cool", "Good", "Great", "Incredible", "Killer", "Premium",
    "Special", "Stellar", "Sweet", "Super", "Mega", "Happy", "Lucky",
]
PROMOTION_NOUNS = [
    "Sale", "Code", "Discount", "Deal", "Price", "Promo", "Savings", "Offer", "Bargain", "Gift",
]

DEFAULT_MIN = 5
DEFAULT_MAX = 100


def _positive_int(value: Any):
    try:
        value = int(value)
    except (TypeError, ValueError):
        return None
    return value if value >= 1 else None


class CouponGenerator(Generator):
    key = "coupons"

    def generate(self, save: bool = True, **args) -> Coupon:
        minimum = _positive_int(args.get("min", DEFAULT_MIN))
        maximum = _positive_int(args.get("max", DEFAULT_MAX))

        if minimum is None:
            raise ValueError("The minimum coupon amount must be a valid positive integer.")
        if maximum is None:
            raise ValueError("The maximum coupon amount must be a valid positive integer.")
        if minimum > maximum:
            raise ValueError(
                "The maximum coupon amount must be an integer that is greater than or equal to the minimum amount."
            )

        code = self.faker.random_element(PROMOTION_ADJECTIVES) + self.faker.random_element(PROMOTION_NOUNS)
        amount = self.faker.random_int(minimum, maximum)
        coupon = Coupon(code=f"{code}{amount}", amount=amount)

        if save:
            self.catalog.save(coupon)
        return coupon
