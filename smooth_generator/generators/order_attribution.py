"""
Order attribution meta: where a simulated order "came from".

Adds `_wc_order_attribution_*` meta to an order: source type and origin,
device and user agent, session counters and start time, entry URL, and
for a share of orders a marketing campaign's utm fields.
"""
import random
from datetime import timedelta
from typing import Any, Dict, Optional

from smooth_generator.schemas.woocommerce import Order

META_PREFIX = "_wc_order_attribution_"

CAMPAIGN_PROBABILITY = 15  # percent of orders with campaign data

SOURCE_TYPES = ["typein", "organic", "referral", "utm", "admin", "mobile_app", "unknown"]
# Only the source type is recorded for these
BARE_SOURCE_TYPES = {"admin", "mobile_app", "unknown"}

DEVICE_TYPE_WEIGHTS = {"Mobile": 50, "Desktop": 35, "Tablet": 15}
CAMPAIGN_TYPE_WEIGHTS = {"seasonal": 40, "promotional": 30, "product": 20, "general": 10}

UTM_MEDIUMS = ["referral", "cpc", "email", "social", "organic", "unknown"]
UTM_CONTENT = ["/", "campaign_a", "campaign_b"]

ORIGIN_LABELS = {
    "utm": "Source: {source}",
    "organic": "Organic: {source}",
    "referral": "Referral: {source}",
    "typein": "Direct",
    "admin": "Web admin",
    "mobile_app": "Mobile app",
}

USER_AGENTS = {
    "Mobile": [
        "Mozilla/5.0 (iPhone; CPU iPhone OS 16_5 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/16.5 Mobile/15E148 Safari/604.1",
        "Mozilla/5.0 (iPhone; CPU iPhone OS 16_5 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) CriOS/114.0.5735.99 Mobile/15E148 Safari/604.1",
        "Mozilla/5.0 (Linux; Android 10; K) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/114.0.0.0 Mobile Safari/537.36",
        "Mozilla/5.0 (Linux; Android 13; SAMSUNG SM-S918B) AppleWebKit/537.36 (KHTML, like Gecko) SamsungBrowser/21.0 Chrome/110.0.5481.154 Mobile Safari/537.36",
    ],
    "Tablet": [
        "Mozilla/5.0 (iPad; CPU OS 16_5 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) CriOS/114.0.5735.124 Mobile/15E148 Safari/604.1",
        "Mozilla/5.0 (Linux; Android 12; SM-X906C Build/QP1A.190711.020; wv) AppleWebKit/537.36 (KHTML, like Gecko) Version/4.0 Chrome/80.0.3987.119 Mobile Safari/537.36",
    ],
    "Desktop": [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/42.0.2311.135 Safari/537.36 Edge/12.246",
        "Mozilla/5.0 (X11; CrOS x86_64 8172.45.0) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/51.0.2704.64 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_11_2) AppleWebKit/601.3.9 (KHTML, like Gecko) Version/9.0.2 Safari/601.3.9",
    ],
}

# campaign type → (utm_source, utm_medium, {campaign name: (content, term)})
CAMPAIGNS = {
    "seasonal": ("email", "email", {
        "summer_sale_2024": ("summer_deals", "seasonal_discount"),
        "black_friday_2024": ("bf_deals", "black_friday_sale"),
        "holiday_special": ("holiday_deals", "christmas_sale"),
    }),
    "promotional": ("social", "cpc", {
        "flash_sale": ("24hr_sale", "limited_time"),
        "membership_promo": ("member_exclusive", "join_now"),
    }),
    "product": ("google", "cpc", {
        "new_product_launch": ("product_launch", "new_arrival"),
        "spring_collection": ("spring_2024", "new_collection"),
    }),
    "general": ("email", "email", {
        "newsletter_special": ("newsletter_special", "newsletter_special"),
        "social_campaign": ("social_campaign", "social_campaign"),
        "influencer_collab": ("influencer_collab", "influencer_collab"),
    }),
}


def _weighted(rng: random.Random, weights: Dict[str, int]) -> str:
    keys = list(weights)
    return rng.choices(keys, weights=[weights[k] for k in keys], k=1)[0]


class OrderAttribution:
    def __init__(self, rng: Optional[random.Random] = None, store_url: str = "https://example.com"):
        self.rng = rng or random.Random()
        self.store_url = store_url.rstrip("/")

    def add_order_attribution_meta(self, order: Order, args: Optional[Dict[str, Any]] = None) -> None:
        if (args or {}).get("skip_order_attribution"):
            return
        if not order.line_items:
            return

        rng = self.rng
        source_type = rng.choice(SOURCE_TYPES)

        if source_type in BARE_SOURCE_TYPES:
            meta = {"source_type": source_type}
        else:
            device_type = self.get_random_device_type()
            product_id = rng.choice(order.line_items).product_id
            meta = {
                "origin": self.get_origin(source_type, "woo.com"),
                "device_type": device_type,
                "user_agent": rng.choice(USER_AGENTS[device_type]),
                "session_count": rng.randint(1, 10),
                "session_pages": rng.randint(1, 10),
                "session_start_time": self.get_random_session_start_time(order),
                "session_entry": f"{self.store_url}/?p={product_id}",
                "source_type": source_type,
            }
            if rng.randint(1, 100) <= CAMPAIGN_PROBABILITY:
                meta.update(self.get_campaign_data())
            else:
                meta["utm_content"] = rng.choice(UTM_CONTENT)

        # Direct traffic has no medium
        if source_type != "typein" and source_type not in BARE_SOURCE_TYPES:
            meta["utm_medium"] = rng.choice(UTM_MEDIUMS)

        for key, value in meta.items():
            order.meta_data[META_PREFIX + key] = value

    def get_origin(self, source_type: str, source: str) -> str:
        return ORIGIN_LABELS.get(source_type, "Unknown").format(source=source)

    def get_random_device_type(self) -> str:
        return _weighted(self.rng, DEVICE_TYPE_WEIGHTS)

    def get_random_session_start_time(self, order: Order) -> str:
        """10 minutes to 6 hours before the order was created."""
        start = order.date_created - timedelta(minutes=self.rng.randint(10, 360))
        return start.strftime("%Y-%m-%d %H:%M:%S")

    def get_campaign_data(self) -> Dict[str, str]:
        utm_source, utm_medium, campaigns = CAMPAIGNS[_weighted(self.rng, CAMPAIGN_TYPE_WEIGHTS)]
        name = self.rng.choice(list(campaigns))
        content, term = campaigns[name]
        return {
            "utm_campaign": name,
            "utm_content": content,
            "utm_term": term,
            "utm_source": utm_source,
            "utm_medium": utm_medium,
        }
