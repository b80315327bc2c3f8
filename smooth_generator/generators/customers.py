"""Customer generator: a person or a company with billing and (sometimes) shipping addresses."""
import logging
import re
from typing import Optional

from smooth_generator.generators.base import Generator
from smooth_generator.generators.customer_info import CustomerInfo
from smooth_generator.schemas.woocommerce import Address, Customer

logger = logging.getLogger(__name__)

CUSTOMER_TYPE_WEIGHTS = {"person": 70, "company": 30}
COUNTRY_PATTERN = re.compile(r"^[A-Za-z]{2}$")


class CustomerGenerator(Generator):
    key = "customers"

    def __init__(self, *args, info: Optional[CustomerInfo] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.info = info or CustomerInfo(self.catalog, rng=self.rng)

    def generate(self, save: bool = True, **args) -> Customer:
        country = args.get("country") or ""
        if not COUNTRY_PATTERN.match(country):
            country = ""
        customer_type = args.get("type")
        if customer_type not in CUSTOMER_TYPE_WEIGHTS:
            customer_type = self.random_weighted_element(CUSTOMER_TYPE_WEIGHTS)

        if customer_type == "company":
            data = self.info.generate_company(country)
            other = self.info.generate_company(country)
            address_keys = ["email", "company"]
        else:
            data = self.info.generate_person(country)
            other = self.info.generate_person(country)
            address_keys = ["email", "first_name", "last_name"]

        billing = Address(
            **self.info.generate_address(country),
            **{k: data[k] for k in address_keys},
        )

        shipping = Address()
        if self.rng.random() < 0.5:
            if self.rng.random() < 0.5:
                shipping = billing.model_copy()
            else:
                shipping = Address(
                    **self.info.generate_address(country),
                    **{k: other[k] for k in address_keys},
                )
            # Shipping addresses don't carry an email
            shipping.email = ""

        customer = Customer(
            email=data["email"],
            username=data["username"],
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            display_name=data["display_name"],
            password=data["password"],
            billing=billing,
            shipping=shipping,
        )

        if save:
            self.catalog.save(customer)
        return customer
