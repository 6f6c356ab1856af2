from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import patch

from utils.cache import TTLCache, generate_cache_key
from utils.currency import format_currency, to_decimal
from utils.dates import add_months, date_difference, first_of_next_month, format_date, format_date_long, parse_date
from utils.email import send_request_approved_email


class FakeClock:
     def __init__(self):
          self.now = 1000.0

     def __call__(self):
          return self.now


def test_to_decimal_rounds_half_up():
     assert to_decimal("10.005") == Decimal("10.01")
     assert to_decimal(1234.5) == Decimal("1234.50")
     assert to_decimal(None) == Decimal("0.00")


def test_format_currency_uses_symbol_and_grouping():
     assert format_currency(1234.5) == "K1,234.50"
     assert format_currency(Decimal("99"), "USD") == "$99.00"
     assert format_currency(None) == "K0.00"
     assert format_currency(-5, "ZMW") == "-K5.00"


def test_format_currency_unknown_code_is_prefix():
     assert format_currency(10, "abc") == "ABC 10.00"


def test_format_date_variants():
     assert format_date(date(2025, 1, 15)) == "15/01/2025"
     assert format_date("2025-01-15T08:30:00") == "15/01/2025"
     assert format_date("not a date") == ""
     assert format_date(None) == ""
     assert format_date_long(date(2025, 1, 15)) == "Wednesday, January 15, 2025"


def test_parse_date_promotes_dates():
     assert parse_date(date(2025, 3, 1)) == datetime(2025, 3, 1)
     assert parse_date("") is None


def test_date_difference_rounds_up_per_unit():
     assert date_difference(date(2025, 1, 1), date(2025, 1, 11)) == 10
     assert date_difference(date(2025, 1, 1), date(2025, 1, 9), "weeks") == 2
     assert date_difference(date(2025, 1, 1), date(2025, 3, 1), "months") == 2
     assert date_difference(None, date(2025, 1, 1)) == 0
     assert date_difference(date(2025, 1, 1), date(2025, 1, 3), "fortnights") == 2


def test_add_months_clamps_day():
     assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
     assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
     assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)
     assert add_months(date(2025, 4, 10), 0, day=31) == date(2025, 4, 30)
     assert first_of_next_month(date(2025, 12, 20)) == date(2026, 1, 1)


def test_cache_entries_expire():
     clock = FakeClock()
     cache = TTLCache(default_ttl=60, clock=clock)
     cache.set("a", 1)
     cache.set("b", 2, ttl=10)

     clock.now += 30
     assert cache.get("a") == 1
     assert cache.get("b") is None

     clock.now += 31
     assert cache.get("a") is None


def test_cache_cleanup_and_stats():
     clock = FakeClock()
     cache = TTLCache(default_ttl=5, clock=clock)
     cache.set("old", 1)
     cache.set("fresh", 2, ttl=100)
     clock.now += 10

     assert cache.cleanup() == 1
     assert cache.stats() == {"size": 1, "keys": ["fresh"]}


def test_cache_get_or_set_calls_factory_once():
     cache = TTLCache(clock=FakeClock())
     calls = []

     def factory():
          calls.append(1)
          return {"value": 42}

     assert cache.get_or_set("k", factory) == {"value": 42}
     assert cache.get_or_set("k", factory) == {"value": 42}
     assert len(calls) == 1


def test_generate_cache_key_is_order_independent():
     assert generate_cache_key("stats", user=3, role="landlord") == "stats:role:landlord|user:3"
     assert generate_cache_key("stats", role="landlord", user=3) == generate_cache_key("stats", user=3, role="landlord")
     assert generate_cache_key("plain") == "plain"


def test_request_approved_email_escapes_user_text():
     tenant = SimpleNamespace(name="<b>Tom</b>", email="tenant@example.com")
     request = SimpleNamespace(id=4, tenant=tenant, response_message="<script>alert(1)</script>",
                               next_steps="Sign & return")

     with patch("utils.email.send_email") as send:
          send_request_approved_email(request, "Lana <Landlord>", "12 Kabulonga Road")

     html = send.call_args.args[2]
     assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
     assert "<script>" not in html
     assert "&lt;b&gt;Tom&lt;/b&gt;" in html
     assert "Lana &lt;Landlord&gt;" in html
     assert "Sign &amp; return" in html
     assert "<script>" in send.call_args.kwargs["text"]
