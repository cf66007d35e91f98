"""
Tests for wizybot/services/currency_service.py - currency conversion over HTTP.

The Open Exchange Rates API is replaced by an httpx.MockTransport.
"""
import httpx
import pytest

from wizybot.services.currency_service import CurrencyService, CurrencyServiceError

API_URL = "https://rates.test/api"

CURRENCIES = {
    "USD": "United States Dollar",
    "EUR": "Euro",
    "COP": "Colombian Peso",
    "CAD": "Canadian Dollar",
    "XAU": "Gold (troy ounce)",
}

RATES = {
    "base": "USD",
    "rates": {"USD": 1, "EUR": 0.8, "COP": 4000, "CAD": 1.25},
}


def make_transport(currencies=CURRENCIES, rates=RATES, status_code=200, requests=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        if request.url.path.endswith("/currencies.json"):
            return httpx.Response(status_code, json=currencies)
        if request.url.path.endswith("/latest.json"):
            return httpx.Response(status_code, json=rates)
        return httpx.Response(404)

    return httpx.MockTransport(handler)


class TestConvert:
    """Conversion through the USD-based rate table."""

    @pytest.mark.asyncio
    async def test_cross_rate_conversion(self):
        """EUR to CAD goes through the USD base: 350 / 0.8 * 1.25."""
        service = CurrencyService(API_URL, "app-123", transport=make_transport())

        result = await service.convert(350, "EUR", "CAD")

        assert result == pytest.approx(546.875)

    @pytest.mark.asyncio
    async def test_small_amounts(self):
        service = CurrencyService(API_URL, "app-123", transport=make_transport())

        assert await service.convert(100, "COP", "USD") == pytest.approx(0.025)

    @pytest.mark.asyncio
    async def test_codes_are_case_insensitive(self):
        service = CurrencyService(API_URL, "app-123", transport=make_transport())

        assert await service.convert(10, "usd", "eur") == pytest.approx(8.0)

    @pytest.mark.asyncio
    async def test_requests_and_app_id(self):
        """The currency list is fetched first, then the latest rates with the app id."""
        requests = []
        service = CurrencyService(API_URL + "/", "app-123", transport=make_transport(requests=requests))

        await service.convert(1, "USD", "EUR")

        assert [str(r.url.path) for r in requests] == ["/api/currencies.json", "/api/latest.json"]
        assert requests[1].url.params["app_id"] == "app-123"

    @pytest.mark.asyncio
    async def test_unknown_currency_code(self):
        """Codes missing from the currency list fail before rates are fetched."""
        requests = []
        service = CurrencyService(API_URL, "app-123", transport=make_transport(requests=requests))

        with pytest.raises(CurrencyServiceError, match="Invalid currency code"):
            await service.convert(1, "USD", "ABC")

        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_missing_rate(self):
        """A listed currency without a rate is an error."""
        service = CurrencyService(API_URL, "app-123", transport=make_transport())

        with pytest.raises(CurrencyServiceError, match="Exchange rate data not found"):
            await service.convert(1, "XAU", "USD")

    @pytest.mark.asyncio
    async def test_zero_source_rate(self):
        rates = {"rates": {"USD": 1, "EUR": 0}}
        service = CurrencyService(API_URL, "app-123", transport=make_transport(rates=rates))

        with pytest.raises(CurrencyServiceError, match="Exchange rate data not found"):
            await service.convert(1, "EUR", "USD")

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        service = CurrencyService(API_URL, "app-123", transport=make_transport(status_code=500))

        with pytest.raises(CurrencyServiceError, match="Unable to fetch the currency list"):
            await service.convert(1, "USD", "EUR")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = CurrencyService(API_URL, "app-123", transport=httpx.MockTransport(handler))

        with pytest.raises(CurrencyServiceError) as exc_info:
            await service.convert(1, "USD", "EUR")

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [-1, "ten", None])
    async def test_invalid_amount(self, amount):
        service = CurrencyService(API_URL, "app-123", transport=make_transport())

        with pytest.raises(CurrencyServiceError):
            await service.convert(amount, "USD", "EUR")
