import random

import pytest

from smooth_generator.generators.customer_info import COUNTRY_STATES, CustomerInfo
from smooth_generator.generators.customers import CustomerGenerator


@pytest.fixture
def info(catalog):
    return CustomerInfo(catalog, allowed_countries=["US", "DE"], seed=1234, rng=random.Random(1234))


@pytest.fixture
def customers(catalog, fake, info):
    return CustomerGenerator(catalog, faker=fake, info=info)


# --- CustomerInfo ---

def test_unknown_country_code_is_rejected(info):
    with pytest.raises(ValueError, match='country code "XX"'):
        info.get_valid_country_code("xx")


def test_blank_country_picks_an_allowed_one(info):
    assert {info.get_valid_country_code("") for _ in range(20)} <= {"US", "DE"}
    assert info.get_valid_country_code("fr") == "FR"


def test_one_faker_per_locale(info):
    assert info.get_faker("DE") is info.get_faker("DE")
    assert info.get_faker("AT") is not info.get_faker("DE")
    assert info.get_faker("ZZ") is info.get_faker("US")


def test_person_email_and_username_follow_the_name(info):
    person = info.generate_person("US")

    assert person["display_name"] == f"{person['first_name']} {person['last_name']}"
    assert "@" in person["email"]
    assert len(person["username"]) >= 3


def test_non_latin_names_still_get_a_handle(info):
    person = info.generate_person("JP")
    assert person["email"].split("@")[0]
    assert person["username"]


def test_address_fields(info):
    address = info.generate_address("US")

    assert address["country"] == "US"
    assert address["address_1"]
    assert address["state"] in COUNTRY_STATES["US"]


# --- CustomerGenerator ---

def test_person_customer(customers, catalog):
    customer = customers.generate(type="person", country="DE")

    assert customer.first_name and customer.last_name
    assert customer.billing.country == "DE"
    assert customer.billing.email == customer.email
    assert catalog.get("customer", customer.id).username == customer.username


def test_company_customer(customers):
    customer = customers.generate(type="company", country="US")

    assert customer.billing.company
    assert customer.first_name == ""
    assert customer.display_name == customer.billing.company


def test_malformed_country_falls_back_to_an_allowed_one(customers):
    customer = customers.generate(country="Germany")
    assert customer.billing.country in {"US", "DE"}


def test_unknown_country_fails_the_batch(customers, catalog):
    result = customers.bulk_generate(3, {"country": "XX"})

    assert not result.ok
    assert result.error == 'No data for a country with country code "XX"'
    assert catalog.count("customer") == 0


def test_shipping_never_carries_an_email(customers):
    for _ in range(20):
        assert customers.generate().shipping.email == ""


def test_emails_and_usernames_are_unique(customers, catalog):
    customers.bulk_generate(30, {"country": "US"})

    saved = catalog.all("customer")
    assert len({c.email.lower() for c in saved}) == 30
    assert len({c.username.lower() for c in saved}) == 30


def test_unsaved_customer_has_no_id(customers, catalog):
    customer = customers.generate(save=False)
    assert customer.id == 0
    assert catalog.count("customer") == 0
