"""
Currency conversion backed by the Open Exchange Rates API.

API Documentation: https://docs.openexchangerates.org/reference/api-introduction
"""

from typing import Any, Dict, Optional
import logging

import httpx

from wizybot.core.config import Settings

logger = logging.getLogger(__name__)


class CurrencyServiceError(Exception):
    """Raised when a conversion cannot be computed"""
    pass


class CurrencyService:
    """
    Converts amounts between currencies using the latest USD-based rates.

    Both endpoints are fetched on every conversion; nothing is cached.
    """

    def __init__(
        self,
        api_url: str,
        app_id: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_url = api_url.rstrip("/")
        self.app_id = app_id
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "CurrencyService":
        return cls(
            api_url=settings.EXCHANGE_RATES_API,
            app_id=settings.EXCHANGE_RATES_APP_ID,
            timeout=settings.EXCHANGE_RATES_TIMEOUT,
        )

    async def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        """
        Convert an amount from one currency to another.

        Args:
            amount: Non-negative amount to convert
            from_currency: Currency code to convert from (e.g., "COP")
            to_currency: Currency code to convert to (e.g., "USD")

        Returns:
            The converted amount in the target currency

        Raises:
            CurrencyServiceError: if the API fails or a currency code is unknown
        """
        try:
            amount = float(amount)
        except (TypeError, ValueError) as e:
            raise CurrencyServiceError(f"CurrencyService: Invalid amount: {amount!r}") from e
        if amount < 0:
            raise CurrencyServiceError(f"CurrencyService: Amount must be non-negative, got {amount}")

        from_currency = str(from_currency).upper()
        to_currency = str(to_currency).upper()

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            currencies = await self._get_json(
                client,
                f"{self.api_url}/currencies.json",
                error_message=(
                    "CurrencyService: Unable to fetch the currency list. "
                    f"Please check the API endpoint: {self.api_url}"
                ),
            )

            if from_currency not in currencies or to_currency not in currencies:
                raise CurrencyServiceError(
                    f'CurrencyService: Invalid currency code(s): "{from_currency}" or "{to_currency}". '
                    "Please ensure both codes are valid."
                )

            rates_data = await self._get_json(
                client,
                f"{self.api_url}/latest.json",
                params={"app_id": self.app_id} if self.app_id else None,
                error_message=(
                    "CurrencyService: Unable to fetch the latest exchange rates. "
                    f"Please check the API endpoint: {self.api_url}/latest.json"
                ),
            )

        rates = rates_data.get("rates") or {}
        from_rate = rates.get(from_currency)
        to_rate = rates.get(to_currency)

        if not from_rate or to_rate is None:
            raise CurrencyServiceError(
                "CurrencyService: Exchange rate data not found for the currency code(s): "
                f'"{from_currency}" or "{to_currency}". Please ensure both codes are valid.'
            )

        converted = (amount / float(from_rate)) * float(to_rate)
        logger.info(f"Converted {amount} {from_currency} to {converted} {to_currency}")
        return converted

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        error_message: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        try:
            response = await client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Exchange rates request failed: {e}")
            raise CurrencyServiceError(error_message) from e

        if response.status_code != 200:
            logger.error(f"Exchange rates API returned {response.status_code} for {url}")
            raise CurrencyServiceError(error_message)

        try:
            data = response.json()
        except ValueError as e:
            raise CurrencyServiceError(error_message) from e

        if not isinstance(data, dict):
            raise CurrencyServiceError(error_message)
        return data
