"""
VALR REST API Client

This module provides an async HTTP client for the VALR REST API.
It handles:
- HTTP requests against a configurable base URL
- Signing of private requests (see auth.py)
- Status classification and JSON decoding into our Pydantic schemas
- Error wrapping with the name of the failed operation

API Documentation:
    https://docs.valr.com/

Failure Handling:
    - No retries, no backoff, no rate limiting: every call is one round trip
    - Network failures raise TransportError
    - Non-2xx responses raise StatusError (with the status code)
    - Unexpected response bodies raise DecodeError
    - Cancelling the awaiting task abandons the in-flight request

Usage:
    async with ValrAPIClient(ClientConfig(credentials=Credentials(api_key=key, api_secret=secret))) as client:
        balances = await client.get_balances()
        book = await client.get_order_book("BTCZAR")
"""

import asyncio
import json
import time
from decimal import Decimal
from functools import lru_cache
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import BaseModel, ConfigDict, Field, SecretStr, TypeAdapter, field_validator

from core.client_interface import PrivateClient, PublicClient
from core.config import settings
from core.exceptions import BodyReadError, DecodeError, StatusError, TransportError
from core.logging import get_logger, log_api_request, log_api_response
from core.params import (
    CancelOrderRequest,
    CryptoWithdrawalRequest,
    LimitOrderRequest,
    MarketOrderRequest,
    OrderLookup,
    OrderStatusRequest,
    PaginationRequest,
    QueryParamList,
    QueryParams,
    quote_segment,
    TradeHistoryRequest,
    TransactionHistoryRequest,
)
from core.schemas import (
    Balance,
    BankAccount,
    CryptoDeposit,
    CryptoWithdrawal,
    Currency,
    CurrencyPair,
    DepositAddress,
    MarketSummary,
    OpenOrder,
    OrderBook,
    OrderId,
    OrderStatus,
    OrderSummary,
    OrderType,
    OrderTypesEntry,
    OrderTypeValue,
    ServerTime,
    ServiceStatus,
    Status,
    StatusValue,
    Trade,
    Transaction,
    WithdrawalInfo,
    order_types_for_currency_to_map,
    order_types_to_map,
)
from .auth import PendingRequest, RequestHook, authentication_hook


# ============================================
# Client Configuration
# ============================================

class Credentials(BaseModel):
    """
    API key pair. The key is sent as a header; the secret only keys the HMAC.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str
    api_secret: SecretStr


class ClientConfig(BaseModel):
    """
    Immutable configuration of one client instance.

    Attributes:
        base_url: API root including the version segment (e.g., "https://api.valr.com/v1")
        credentials: Key pair for private endpoints (None for a public-only client)
        timeout: Total timeout per request in seconds
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(default_factory=lambda: settings.valr_base_url)
    credentials: Optional[Credentials] = None
    timeout: float = Field(default_factory=lambda: settings.request_timeout)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache(maxsize=None)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


class ValrAPIClient(PublicClient, PrivateClient):
    """
    Async HTTP client for the VALR REST API

    Implements both the PublicClient and PrivateClient interfaces. All methods
    return data decoded into our Pydantic schemas.

    Attributes:
        config: Immutable ClientConfig (base URL, credentials, timeout)
        session: aiohttp ClientSession for HTTP requests
        logger: Logger instance for debugging

    Example:
        >>> async with ValrAPIClient() as client:
        ...     pairs = await client.get_currency_pairs()
        ...     print(f"Fetched {len(pairs)} pairs")

    Notes:
        - Uses context manager for automatic session cleanup
        - Requests to private paths are signed only when credentials are configured
        - Safe to share between concurrent tasks; no mutable state besides the session
    """

    def __init__(self, config: Optional[ClientConfig] = None):
        """
        Initialize the VALR API client.

        Args:
            config: Client configuration (defaults to settings' base URL and
                    timeout, without credentials)
        """
        self.config = config or ClientConfig()
        self.logger = get_logger(__name__)
        self.session: Optional[aiohttp.ClientSession] = None

        self._hooks: List[RequestHook] = []
        if self.config.credentials is not None:
            self._hooks.append(authentication_hook(
                self.config.credentials.api_key,
                self.config.credentials.api_secret.get_secret_value()
            ))

    @property
    def has_credentials(self) -> bool:
        return self.config.credentials is not None

    # ============================================
    # Context Manager for Session Management
    # ============================================

    async def __aenter__(self):
        """
        Enter async context - creates HTTP session.

        Returns:
            Self for use in async with statement
        """
        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.config.timeout)
        )
        self.logger.debug("ValrAPIClient session created")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context - closes HTTP session."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session (safe to call more than once)."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("ValrAPIClient session closed")

    # ============================================
    # HTTP Request Handler
    # ============================================

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        params: Optional[QueryParamList] = None,
        body: Optional[bytes] = None
    ) -> bytes:
        """
        Make a single HTTP request and return the raw response body.

        This method handles:
        - Running the signing hook immediately before sending
        - Transport errors and timeouts
        - Status classification (2xx = success)

        Args:
            method: HTTP method ("GET", "POST", "DELETE")
            path: Endpoint path relative to the base URL (e.g., "/account/balances")
            operation: Short description used in error messages (e.g., "fetch account balances")
            params: Optional encoded query parameters
            body: Optional raw JSON body

        Returns:
            Raw response body bytes

        Raises:
            RuntimeError: If the session was not opened with 'async with'
            BodyReadError: If the body could not be read for signing
            TransportError: On connection failures and timeouts
            StatusError: On any non-2xx response
        """
        if not self.session:
            raise RuntimeError("Client session not initialized. Use 'async with' statement.")

        url = f"{self.config.base_url}{path}"
        request = PendingRequest(
            method=method,
            url=url,
            headers={"Content-Type": "application/json"},
            body=body
        )

        # Signing must happen per request, right before sending
        for hook in self._hooks:
            try:
                hook(request)
            except BodyReadError as e:
                raise BodyReadError(f"Failed to {operation}: {e}", operation=operation) from e

        log_api_request(method, path, params)
        started = time.monotonic()

        try:
            async with self.session.request(
                method,
                url,
                params=params or None,
                headers=request.headers,
                data=request.body
            ) as resp:
                status = resp.status
                raw = await resp.read()

        except asyncio.TimeoutError as e:
            self.logger.error(f"Timeout on {method} {path}")
            raise TransportError(f"Failed to {operation}: request timed out", operation=operation) from e

        except aiohttp.ClientError as e:
            self.logger.error(f"Request failed on {method} {path}: {e}")
            raise TransportError(f"Failed to {operation}: {e}", operation=operation) from e

        log_api_response(method, path, status, time.monotonic() - started)

        if not 200 <= status < 300:
            text = raw.decode("utf-8", errors="replace")[:500]
            self.logger.warning(f"HTTP {status} on {method} {path}: {text}")
            raise StatusError(
                f"Failed to {operation}: {status} status code received",
                status_code=status,
                body=text,
                operation=operation
            )

        return raw

    def _decode(self, raw: bytes, target: Any, operation: str) -> Any:
        """
        Decode a JSON body into the target type.

        JSON numbers with a fraction are parsed as Decimal, so monetary values
        that arrive as numbers keep their exact digits.

        Raises:
            DecodeError: If the body is not JSON or does not match the target shape
        """
        try:
            data = json.loads(raw, parse_float=Decimal)
            return _adapter(target).validate_python(data)
        except ValueError as e:
            self.logger.error(f"Undecodable response ({operation}): {e}")
            raise DecodeError(f"Failed to {operation}: unexpected response body: {e}", operation=operation) from e

    async def _get(
        self,
        path: str,
        target: Any,
        operation: str,
        request: Optional[QueryParams] = None
    ) -> Any:
        params = request.to_query_params() if request is not None else None
        raw = await self._request("GET", path, operation, params=params)
        return self._decode(raw, target, operation)

    # ============================================
    # Public API Methods
    # ============================================

    async def get_currencies(self) -> List[Currency]:
        """
        Fetch all currencies supported by VALR.

        VALR Endpoint:
            GET /public/currencies

        Response Format:
            [
              {"symbol": "R", "isActive": true, "shortName": "ZAR", "longName": "Rand"}
            ]
        """
        currencies = await self._get("/public/currencies", List[Currency], "fetch currencies")
        self.logger.info(f"Fetched {len(currencies)} currencies")
        return currencies

    async def get_currency_pairs(self) -> List[CurrencyPair]:
        """
        Fetch all currency pairs supported by VALR.

        VALR Endpoint:
            GET /public/pairs
        """
        pairs = await self._get("/public/pairs", List[CurrencyPair], "fetch currency pairs")
        self.logger.info(f"Fetched {len(pairs)} currency pairs")
        return pairs

    async def get_market_summary(self) -> List[MarketSummary]:
        """
        Fetch the market summary for all currency pairs.

        VALR Endpoint:
            GET /public/marketsummary
        """
        return await self._get("/public/marketsummary", List[MarketSummary], "fetch market summaries")

    async def get_market_summary_for_currency(self, pair: str) -> MarketSummary:
        """
        Fetch the market summary for one currency pair.

        Args:
            pair: Currency pair symbol (e.g., "BTCZAR")

        VALR Endpoint:
            GET /public/{pair}/marketsummary
        """
        return await self._get(
            f"/public/{quote_segment(pair)}/marketsummary", MarketSummary, "fetch market summary"
        )

    async def get_order_book(self, pair: str) -> OrderBook:
        """
        Fetch the top 20 bids and asks for a currency pair.

        Args:
            pair: Currency pair symbol (e.g., "BTCZAR")

        VALR Endpoint:
            GET /public/{pair}/orderbook

        Response Format:
            {
              "Asks": [{"side": "sell", "quantity": "0.101", "price": "9000",
                        "currencyPair": "BTCZAR", "orderCount": 1}, ...],
              "Bids": [...]
            }
        """
        return await self._get(f"/public/{quote_segment(pair)}/orderbook", OrderBook, "fetch order book")

    async def get_order_types(self) -> Dict[str, Dict[OrderType, bool]]:
        """
        Fetch the supported order types for every currency pair.

        VALR Endpoint:
            GET /public/ordertypes

        Response Format:
            [{"currencyPair": "BTCZAR", "orderTypes": ["post-only limit", "limit", "market"]}]

        Returns:
            Map of pair -> order type -> True for supported combinations
        """
        entries = await self._get("/public/ordertypes", List[OrderTypesEntry], "fetch order types")
        return order_types_to_map(entries)

    async def get_order_types_for_currency(self, pair: str) -> Dict[OrderType, bool]:
        """
        Fetch the supported order types for one currency pair.

        Args:
            pair: Currency pair symbol (e.g., "BTCZAR")

        VALR Endpoint:
            GET /public/{pair}/ordertypes

        Returns:
            Map of order type -> True for supported types
        """
        order_types = await self._get(
            f"/public/{quote_segment(pair)}/ordertypes", List[OrderTypeValue], "fetch order types for pair"
        )
        return order_types_for_currency_to_map(order_types)

    async def get_server_time(self) -> ServerTime:
        """
        Fetch the time on VALR's servers.

        VALR Endpoint:
            GET /public/time

        Response Format:
            {"epochTime": 1555513811, "time": "2019-04-17T15:10:11.956Z"}
        """
        return await self._get("/public/time", ServerTime, "fetch server time")

    async def get_status(self) -> Status:
        """
        Fetch the current status of VALR.

        VALR Endpoint:
            GET /public/status

        Response Format:
            {"status": "online"}

        Returns:
            Status.ONLINE, Status.READ_ONLY, or Status.UNKNOWN for unrecognised status strings

        Raises:
            DecodeError: If the body holds no status string (null, number, object without "status")
        """
        operation = "fetch status"
        raw = await self._request("GET", "/public/status", operation)
        if raw.lstrip().startswith(b"{"):
            return self._decode(raw, ServiceStatus, operation).status
        # Some deployments answer with a bare JSON string
        return self._decode(raw, StatusValue, operation)

    # ============================================
    # Account
    # ============================================

    async def get_balances(self) -> List[Balance]:
        """
        Fetch the balance of every currency in the account.

        VALR Endpoint:
            GET /account/balances

        Response Format:
            [
              {"currency": "ETH", "available": "0.01626594758", "reserved": "0.49",
               "total": "0.50626594758", "updatedAt": "2020-05-31T05:10:16.522Z"}
            ]
        """
        balances = await self._get("/account/balances", List[Balance], "fetch account balances")
        self.logger.info(f"Fetched {len(balances)} balances")
        return balances

    async def get_trade_history(
        self,
        pair: str,
        request: Optional[TradeHistoryRequest] = None
    ) -> List[Trade]:
        """
        Fetch the account's recent trades for a currency pair.

        Args:
            pair: Currency pair symbol (e.g., "BTCZAR")
            request: Optional options (limit)

        VALR Endpoint:
            GET /account/{pair}/tradehistory
        """
        return await self._get(
            f"/account/{quote_segment(pair)}/tradehistory", List[Trade], "fetch trade history", request
        )

    async def get_transaction_history(
        self,
        request: Optional[TransactionHistoryRequest] = None
    ) -> List[Transaction]:
        """
        Fetch the account's wallet transactions.

        Args:
            request: Optional filters (types, currency, time range, paging)

        VALR Endpoint:
            GET /account/transactionhistory

        Example:
            >>> history = await client.get_transaction_history(
            ...     TransactionHistoryRequest(transaction_types=[TransactionType.LIMIT_BUY], limit=10)
            ... )
        """
        return await self._get(
            "/account/transactionhistory", List[Transaction], "fetch transaction history", request
        )

    # ============================================
    # Market Data (authenticated)
    # ============================================

    async def get_market_trade_history(
        self,
        pair: str,
        request: Optional[TradeHistoryRequest] = None
    ) -> List[Trade]:
        """
        Fetch recent trades on the exchange for a currency pair.

        VALR Endpoint:
            GET /marketdata/{pair}/tradehistory
        """
        return await self._get(
            f"/marketdata/{quote_segment(pair)}/tradehistory", List[Trade], "fetch market trade history", request
        )

    async def get_full_order_book(self, pair: str) -> OrderBook:
        """
        Fetch the full, non-aggregated order book for a currency pair.

        VALR Endpoint:
            GET /marketdata/{pair}/orderbook/full
        """
        return await self._get(
            f"/marketdata/{quote_segment(pair)}/orderbook/full", OrderBook, "fetch full order book"
        )

    # ============================================
    # Wallets
    # ============================================

    async def get_deposit_address(self, currency: str) -> DepositAddress:
        """
        Fetch the default deposit address for a crypto currency.

        VALR Endpoint:
            GET /wallet/crypto/{currency}/deposit/address
        """
        return await self._get(
            f"/wallet/crypto/{quote_segment(currency)}/deposit/address",
            DepositAddress,
            "fetch default deposit address"
        )

    async def get_withdrawal_info(self, currency: str) -> WithdrawalInfo:
        """
        Fetch withdrawal limits and costs for a crypto currency.

        VALR Endpoint:
            GET /wallet/crypto/{currency}/withdraw
        """
        return await self._get(
            f"/wallet/crypto/{quote_segment(currency)}/withdraw", WithdrawalInfo, "fetch withdrawal info"
        )

    async def get_crypto_deposit_history(
        self,
        currency: str,
        request: Optional[PaginationRequest] = None
    ) -> List[CryptoDeposit]:
        """
        Fetch crypto deposit records for a currency.

        VALR Endpoint:
            GET /wallet/crypto/{currency}/deposit/history
        """
        return await self._get(
            f"/wallet/crypto/{quote_segment(currency)}/deposit/history",
            List[CryptoDeposit],
            "fetch crypto deposit history",
            request
        )

    async def get_crypto_withdrawal_history(
        self,
        currency: str,
        request: Optional[PaginationRequest] = None
    ) -> List[CryptoWithdrawal]:
        """
        Fetch crypto withdrawal records for a currency.

        VALR Endpoint:
            GET /wallet/crypto/{currency}/withdraw/history
        """
        return await self._get(
            f"/wallet/crypto/{quote_segment(currency)}/withdraw/history",
            List[CryptoWithdrawal],
            "fetch crypto withdrawal history",
            request
        )

    async def get_crypto_withdrawal_status(self, currency: str, withdrawal_id: str) -> CryptoWithdrawal:
        """
        Fetch the status of a single crypto withdrawal.

        VALR Endpoint:
            GET /wallet/crypto/{currency}/withdraw/{id}
        """
        return await self._get(
            f"/wallet/crypto/{quote_segment(currency)}/withdraw/{quote_segment(withdrawal_id)}",
            CryptoWithdrawal,
            "fetch crypto withdrawal status"
        )

    async def create_crypto_withdrawal(self, request: CryptoWithdrawalRequest) -> OrderId:
        """
        Withdraw crypto to an external address.

        VALR Endpoint:
            POST /wallet/crypto/{currency}/withdraw

        Returns:
            OrderId holding the withdrawal id
        """
        operation = "create crypto withdrawal"
        raw = await self._request(
            "POST",
            f"/wallet/crypto/{quote_segment(request.currency)}/withdraw",
            operation,
            body=request.to_body()
        )
        withdrawal = self._decode(raw, OrderId, operation)
        self.logger.info(f"Created {request.currency} withdrawal {withdrawal.id}")
        return withdrawal

    async def get_bank_accounts(self, currency: str) -> List[BankAccount]:
        """
        Fetch the bank accounts linked to the account for a fiat currency.

        VALR Endpoint:
            GET /wallet/fiat/{currency}/accounts
        """
        return await self._get(
            f"/wallet/fiat/{quote_segment(currency)}/accounts", List[BankAccount], "fetch bank accounts"
        )

    # ============================================
    # Orders
    # ============================================

    async def get_open_orders(self) -> List[OpenOrder]:
        """
        Fetch all open orders.

        VALR Endpoint:
            GET /orders/open
        """
        return await self._get("/orders/open", List[OpenOrder], "fetch open orders")

    async def get_order_history(self, request: Optional[PaginationRequest] = None) -> List[OrderSummary]:
        """
        Fetch historical orders.

        VALR Endpoint:
            GET /orders/history
        """
        return await self._get("/orders/history", List[OrderSummary], "fetch order history", request)

    async def get_order_history_summary(self, request: OrderLookup) -> OrderSummary:
        """
        Fetch the summary of an order that was filled, cancelled or failed.

        VALR Endpoint:
            GET /orders/history/summary/orderid/{orderId}
            GET /orders/history/summary/customerorderid/{customerOrderId}
        """
        return await self._get(
            f"/orders/history/summary/{request.id_path()}", OrderSummary, "fetch order history summary"
        )

    async def get_order_status(self, request: OrderStatusRequest) -> OrderStatus:
        """
        Fetch the current status of an order.

        VALR Endpoint:
            GET /orders/{pair}/orderid/{orderId}
            GET /orders/{pair}/customerorderid/{customerOrderId}
        """
        return await self._get(
            f"/orders/{quote_segment(request.pair)}/{request.id_path()}", OrderStatus, "fetch order status"
        )

    async def place_limit_order(self, request: LimitOrderRequest) -> OrderId:
        """
        Place a limit order.

        VALR Endpoint:
            POST /orders/limit

        Example:
            >>> order = await client.place_limit_order(LimitOrderRequest(
            ...     side="BUY", quantity="0.001", price="500000", pair="BTCZAR"
            ... ))
            >>> print(order.id)
        """
        operation = "place limit order"
        raw = await self._request("POST", "/orders/limit", operation, body=request.to_body())
        order = self._decode(raw, OrderId, operation)
        self.logger.info(f"Placed limit {request.side} on {request.pair}: {order.id}")
        return order

    async def place_market_order(self, request: MarketOrderRequest) -> OrderId:
        """
        Place a market order.

        VALR Endpoint:
            POST /orders/market
        """
        operation = "place market order"
        raw = await self._request("POST", "/orders/market", operation, body=request.to_body())
        order = self._decode(raw, OrderId, operation)
        self.logger.info(f"Placed market {request.side} on {request.pair}: {order.id}")
        return order

    async def cancel_order(self, request: CancelOrderRequest) -> None:
        """
        Cancel an open order. VALR answers 202 with an empty body.

        VALR Endpoint:
            DELETE /orders/order
        """
        await self._request("DELETE", "/orders/order", "cancel order", body=request.to_body())
        self.logger.info(f"Cancelled order on {request.pair}")
