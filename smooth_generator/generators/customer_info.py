"""
Locale-aware customer data: people, companies and addresses that read as
coherent for a given country (names, emails and usernames agree with each
other; address lines come from the country's Faker locale).
"""
import logging
import random
from typing import Dict, List, Optional

from faker import Faker
from faker.utils.text import slugify

from smooth_generator.catalog import StoreCatalog

logger = logging.getLogger(__name__)

# Country code → Faker locale
COUNTRY_LOCALES: Dict[str, str] = {
    "AR": "es_AR", "AT": "de_AT", "AU": "en_AU", "BE": "nl_BE", "BR": "pt_BR",
    "CA": "en_CA", "CH": "de_CH", "CL": "es_CL", "CN": "zh_CN", "CO": "es_CO",
    "CZ": "cs_CZ", "DE": "de_DE", "DK": "da_DK", "ES": "es_ES", "FI": "fi_FI",
    "FR": "fr_FR", "GB": "en_GB", "GR": "el_GR", "IE": "en_IE", "IL": "he_IL",
    "IN": "en_IN", "IT": "it_IT", "JP": "ja_JP", "KR": "ko_KR", "MX": "es_MX",
    "NL": "nl_NL", "NO": "no_NO", "NZ": "en_NZ", "PL": "pl_PL", "PT": "pt_PT",
    "RO": "ro_RO", "RU": "ru_RU", "SE": "sv_SE", "TR": "tr_TR", "TW": "zh_TW",
    "UA": "uk_UA", "US": "en_US", "ZA": "en_US",
}

# Countries whose addresses carry a state code
COUNTRY_STATES: Dict[str, List[str]] = {
    "US": [
        "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "DC", "FL", "GA", "HI", "ID", "IL", "IN",
        "IA", "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH",
        "NJ", "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC", "SD", "TN", "TX", "UT",
        "VT", "VA", "WA", "WV", "WI", "WY",
    ],
    "CA": ["AB", "BC", "MB", "NB", "NL", "NT", "NS", "NU", "ON", "PE", "QC", "SK", "YT"],
    "AU": ["ACT", "NSW", "NT", "QLD", "SA", "TAS", "VIC", "WA"],
    "BR": ["AC", "AL", "AM", "BA", "CE", "DF", "ES", "GO", "MA", "MG", "MS", "MT", "PA", "PR", "RJ", "RS", "SC", "SP"],
    "IN": ["AP", "BR", "DL", "GJ", "KA", "KL", "MH", "RJ", "TN", "UP", "WB"],
    "MX": ["AGS", "BC", "CHIH", "CDMX", "JAL", "NL", "PUE", "QRO", "VER", "YUC"],
    "ES": ["B", "M", "V", "SE", "MA", "BI", "Z", "PM", "GC", "TF"],
    "IT": ["AG", "BA", "BO", "FI", "GE", "MI", "NA", "PA", "RM", "TO", "VE"],
    "JP": ["JP01", "JP04", "JP13", "JP14", "JP23", "JP26", "JP27", "JP28", "JP40", "JP47"],
}

# Address lines a country's checkout treats as optional; skipped half the time
OPTIONAL_LINES = {"address_2", "phone"}
ADDRESS_LINES = ["address_1", "address_2", "city", "state", "postcode", "country", "phone"]


class CustomerInfo:
    def __init__(
        self,
        catalog: StoreCatalog,
        allowed_countries: Optional[List[str]] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        self.catalog = catalog
        self.allowed_countries = [c.upper() for c in (allowed_countries or ["US"])]
        self.seed = seed
        self.rng = rng or random.Random(seed)
        self._fakers: Dict[str, Faker] = {}

    def get_valid_country_code(self, country_code: str = "") -> str:
        country_code = (country_code or "").upper()
        if country_code and country_code not in COUNTRY_LOCALES:
            raise ValueError(f'No data for a country with country code "{country_code}"')
        if not country_code:
            country_code = self.rng.choice(self.allowed_countries)
        return country_code

    def get_faker(self, country_code: str = "US") -> Faker:
        """One Faker per locale, created on first use."""
        locale = COUNTRY_LOCALES.get(country_code, "en_US")
        if locale not in self._fakers:
            faker = Faker(locale)
            faker.seed_instance(self.rng.randrange(2 ** 32) if self.seed is None else self.seed)
            self._fakers[locale] = faker
        return self._fakers[locale]

    # ═══════════════════════════════════════════════════════════════
    # PEOPLE & COMPANIES
    # ═══════════════════════════════════════════════════════════════

    def generate_person(self, country_code: str = "") -> Dict[str, str]:
        """First and last name, display name, plus an email and username built from the same name."""
        country_code = self.get_valid_country_code(country_code)
        faker = self.get_faker(country_code)

        if self.rng.random() < 0.5:
            first_name = faker.first_name_male()
        else:
            first_name = faker.first_name_female()
        last_name = faker.last_name()

        person = {
            "first_name": first_name,
            "last_name": last_name,
            "display_name": f"{first_name} {last_name}",
            "password": "password",
        }

        # Non-latin names don't transliterate; fall back to the default locale
        handle = slugify(f"{first_name} {last_name}").replace("-", ".")
        if not handle:
            default_faker = self.get_faker()
            handle = slugify(f"{default_faker.first_name()} {default_faker.last_name()}").replace("-", ".")

        person["email"] = self._unique_email(lambda: f"{handle}{self._suffix()}@{faker.safe_domain_name()}")
        person["username"] = self._unique_username(lambda: f"{handle.replace('.', '')}{self._suffix()}")
        return person

    def generate_company(self, country_code: str = "") -> Dict[str, str]:
        """Company name used for display, with an email and username on the company's domain."""
        country_code = self.get_valid_country_code(country_code)
        faker = self.get_faker(country_code)

        company_name = faker.company()
        company = {
            "company": company_name,
            "display_name": company_name,
            "password": "password",
        }

        domain_word = slugify(company_name).replace("-", "")[:20]
        if not domain_word:
            domain_word = self.get_faker().domain_word()

        company["email"] = self._unique_email(
            lambda: f"{self.get_faker().user_name()}{self._suffix()}@{domain_word}.{faker.tld()}"
        )
        company["username"] = self._unique_username(lambda: f"{domain_word}{self._suffix()}")
        return company

    def _suffix(self) -> str:
        # Roughly half the handles get a two-digit number
        return str(self.rng.randint(10, 99)) if self.rng.random() < 0.5 else ""

    def _unique_email(self, make) -> str:
        email = make()
        while self.catalog.email_exists(email):
            email = make()
        return email

    def _unique_username(self, make) -> str:
        username = make()
        while self.catalog.username_exists(username) or len(username) < 3:
            username = make() + str(self.rng.randint(0, 9))
        return username

    # ═══════════════════════════════════════════════════════════════
    # ADDRESSES
    # ═══════════════════════════════════════════════════════════════

    def generate_address(self, country_code: str = "") -> Dict[str, str]:
        country_code = self.get_valid_country_code(country_code)
        faker = self.get_faker(country_code)

        address = {line: "" for line in ADDRESS_LINES}
        for line in ADDRESS_LINES:
            if line in OPTIONAL_LINES and self.rng.random() < 0.5:
                continue
            if line == "address_1":
                address[line] = faker.street_address()
            elif line == "address_2":
                address[line] = f"{self.rng.choice(['Apt.', 'Suite', 'Unit'])} {self.rng.randint(1, 999)}"
            elif line == "city":
                address[line] = faker.city()
            elif line == "state":
                address[line] = self.rng.choice(COUNTRY_STATES.get(country_code, [""]))
            elif line == "postcode":
                address[line] = faker.postcode()
            elif line == "country":
                address[line] = country_code
            elif line == "phone":
                address[line] = faker.phone_number()
        return address
