from decimal import Decimal
from unittest.mock import Mock, patch

import pytest
import requests

from errors import ExternalServiceError
from services.exchange_rate_service import convert, get_exchange_rate


def _response(status_code=200, rates=None):
     response = Mock(status_code=status_code)
     response.json.return_value = {"base": "USD", "rates": rates or {"ZMW": 26.5, "EUR": 0.92}}
     return response


def test_rate_is_fetched_once_per_base():
     with patch("services.exchange_rate_service.requests.get", return_value=_response()) as get:
          first = get_exchange_rate("usd", "zmw")
          second = get_exchange_rate("USD", "EUR")

     assert first == {"base": "USD", "target": "ZMW", "rate": Decimal("26.5")}
     assert second["rate"] == Decimal("0.92")
     get.assert_called_once()
     assert get.call_args.args[0].endswith("/USD")


def test_force_refresh_skips_cache():
     with patch("services.exchange_rate_service.requests.get", return_value=_response()) as get:
          get_exchange_rate()
          get_exchange_rate(force_refresh=True)

     assert get.call_count == 2


def test_unknown_target():
     with patch("services.exchange_rate_service.requests.get", return_value=_response()):
          with pytest.raises(ExternalServiceError, match="No exchange rate available for USD to XYZ"):
               get_exchange_rate("USD", "XYZ")


@pytest.mark.parametrize("outcome", [
     {"return_value": _response(status_code=503)},
     {"side_effect": requests.ConnectionError("unreachable")},
])
def test_fetch_failures(outcome):
     with patch("services.exchange_rate_service.requests.get", **outcome):
          with pytest.raises(ExternalServiceError, match="Failed to fetch exchange rate"):
               get_exchange_rate()


def test_convert_rounds_to_cents():
     assert convert(100, Decimal("26.555")) == Decimal("2655.50")
     assert convert("19.99", 0.92) == Decimal("18.39")


def test_exchange_rate_endpoint(client):
     with patch("services.exchange_rate_service.requests.get", return_value=_response()):
          response = client.get("/api/exchange-rate", params={"base": "USD", "target": "ZMW"})

     assert response.status_code == 200
     assert response.json()["base"] == "USD"
     assert Decimal(str(response.json()["rate"])) == Decimal("26.5")


def test_exchange_rate_endpoint_upstream_failure(client):
     with patch("services.exchange_rate_service.requests.get", return_value=_response(status_code=500)):
          response = client.get("/api/exchange-rate")

     assert response.status_code == 502
     assert response.json() == {"error": "Failed to fetch exchange rate"}


def test_health(client):
     response = client.get("/health")

     assert response.status_code == 200
     assert response.json()["status"] == "ok"
