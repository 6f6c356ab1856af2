# services/exchange_rate_service.py
"""
Exchange rate lookups against the public rates API.

The rates document for a base currency is cached for
EXCHANGE_RATE_TTL_SECONDS, so repeated lookups for the same base make a
single outbound call.
"""
import logging
from decimal import Decimal

import requests

import config
from errors import ExternalServiceError
from utils.cache import TTLCache, generate_cache_key
from utils.currency import to_decimal

logger = logging.getLogger(__name__)

rates_cache = TTLCache(default_ttl=config.EXCHANGE_RATE_TTL_SECONDS)


def _fetch_rates(base: str) -> dict:
     url = config.EXCHANGE_RATE_URL.format(base=base)
     try:
          response = requests.get(url, timeout=10)
     except requests.RequestException as exc:
          logger.error("Exchange rate request for %s failed: %s", base, exc)
          raise ExternalServiceError("Failed to fetch exchange rate") from exc
     if response.status_code != 200:
          logger.error("Exchange rate API returned %s for %s", response.status_code, base)
          raise ExternalServiceError("Failed to fetch exchange rate", context={"status": response.status_code})
     try:
          rates = response.json()["rates"]
     except (ValueError, KeyError) as exc:
          raise ExternalServiceError("Exchange rate API returned an unexpected response") from exc
     return rates


def get_exchange_rate(base: str = "USD", target: str = "ZMW", force_refresh: bool = False) -> dict:
     """
     Look up the rate for converting one unit of base into target.

     Returns:
          {"base", "target", "rate"}

     Raises:
          ExternalServiceError: If the API is unreachable or doesn't quote target
     """
     base = base.upper()
     target = target.upper()
     key = generate_cache_key("rates", base=base)
     rates = None if force_refresh else rates_cache.get(key)
     if rates is None:
          rates = _fetch_rates(base)
          rates_cache.set(key, rates)
          logger.info("Fetched %d exchange rates for %s", len(rates), base)

     if target not in rates:
          raise ExternalServiceError(f"No exchange rate available for {base} to {target}")
     return {"base": base, "target": target, "rate": Decimal(str(rates[target]))}


def convert(amount, rate) -> Decimal:
     """Convert amount at rate, rounded to cents."""
     return to_decimal(Decimal(str(amount)) * Decimal(str(rate)))
