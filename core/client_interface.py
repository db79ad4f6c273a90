"""
Client Interfaces: Public and Private Capability Sets

VALR splits its REST API in two:
- Public endpoints need no authentication and have stricter rate limits
- Private endpoints require signed requests and have more relaxed rate limits

This module defines one abstract base class per capability set. A single
concrete client (exchanges.valr.ValrAPIClient) implements both; code that
only needs market data should depend on PublicClient, so it cannot reach
account operations by accident.

Design Philosophy:
    "Program to an interface, not an implementation"

    Converting between the two is a matter of rebuilding the same client
    configuration with or without credentials attached (see
    exchanges.valr.to_public_client / to_private_client), never of mutating
    an existing client.

Example:
    async def print_spread(client: PublicClient, pair: str) -> None:
        book = await client.get_order_book(pair)
        print(book.asks[0].price, book.bids[0].price)
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from core.params import (
    CancelOrderRequest,
    CryptoWithdrawalRequest,
    LimitOrderRequest,
    MarketOrderRequest,
    OrderLookup,
    OrderStatusRequest,
    PaginationRequest,
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
    ServerTime,
    Status,
    Trade,
    Transaction,
    WithdrawalInfo,
)


class PublicClient(ABC):
    """
    Operations that do not require authentication.

    Every method performs exactly one HTTP round trip and raises a
    core.exceptions.ValrError subclass on failure.
    """

    @abstractmethod
    async def get_currencies(self) -> List[Currency]:
        """Return all currencies supported by VALR."""
        ...

    @abstractmethod
    async def get_currency_pairs(self) -> List[CurrencyPair]:
        """Return all currency pairs supported by VALR."""
        ...

    @abstractmethod
    async def get_market_summary(self) -> List[MarketSummary]:
        """Return a market summary for every supported currency pair."""
        ...

    @abstractmethod
    async def get_market_summary_for_currency(self, pair: str) -> MarketSummary:
        """Return the market summary for one currency pair."""
        ...

    @abstractmethod
    async def get_order_book(self, pair: str) -> OrderBook:
        """
        Return the top 20 bids and asks for a currency pair.

        Asks are sorted by price ascending, bids by price descending, and
        orders at the same price are aggregated by the server.
        """
        ...

    @abstractmethod
    async def get_order_types(self) -> Dict[str, Dict[OrderType, bool]]:
        """
        Return the supported order types for all currency pairs.

        The first key is the currency pair and the second the order type.
        Only supported combinations are present:

            if order_types.get("BTCZAR", {}).get(OrderType.SIMPLE, False):
                ...  # simple orders are supported for BTCZAR
        """
        ...

    @abstractmethod
    async def get_order_types_for_currency(self, pair: str) -> Dict[OrderType, bool]:
        """Return the supported order types for one currency pair."""
        ...

    @abstractmethod
    async def get_server_time(self) -> ServerTime:
        """Return the time on VALR's servers."""
        ...

    @abstractmethod
    async def get_status(self) -> Status:
        """Return the current operational status of VALR."""
        ...


class PrivateClient(ABC):
    """
    Operations that require signed requests.

    Every method performs exactly one HTTP round trip and raises a
    core.exceptions.ValrError subclass on failure.
    """

    # ============================================
    # Account
    # ============================================

    @abstractmethod
    async def get_balances(self) -> List[Balance]:
        """Return the balance of every currency in the account."""
        ...

    @abstractmethod
    async def get_trade_history(
        self,
        pair: str,
        request: Optional[TradeHistoryRequest] = None
    ) -> List[Trade]:
        """Return the account's recent trades for a currency pair."""
        ...

    @abstractmethod
    async def get_transaction_history(
        self,
        request: Optional[TransactionHistoryRequest] = None
    ) -> List[Transaction]:
        """Return the account's wallet transactions, optionally filtered."""
        ...

    # ============================================
    # Market Data (authenticated)
    # ============================================

    @abstractmethod
    async def get_market_trade_history(
        self,
        pair: str,
        request: Optional[TradeHistoryRequest] = None
    ) -> List[Trade]:
        """Return recent trades on the exchange for a currency pair."""
        ...

    @abstractmethod
    async def get_full_order_book(self, pair: str) -> OrderBook:
        """Return the full, non-aggregated order book for a currency pair."""
        ...

    # ============================================
    # Wallets
    # ============================================

    @abstractmethod
    async def get_deposit_address(self, currency: str) -> DepositAddress:
        """Return the default deposit address for a crypto currency."""
        ...

    @abstractmethod
    async def get_withdrawal_info(self, currency: str) -> WithdrawalInfo:
        """Return minimum amount and cost for withdrawing a crypto currency."""
        ...

    @abstractmethod
    async def get_crypto_deposit_history(
        self,
        currency: str,
        request: Optional[PaginationRequest] = None
    ) -> List[CryptoDeposit]:
        """Return crypto deposit records for a currency."""
        ...

    @abstractmethod
    async def get_crypto_withdrawal_history(
        self,
        currency: str,
        request: Optional[PaginationRequest] = None
    ) -> List[CryptoWithdrawal]:
        """Return crypto withdrawal records for a currency."""
        ...

    @abstractmethod
    async def get_crypto_withdrawal_status(self, currency: str, withdrawal_id: str) -> CryptoWithdrawal:
        """Return the status of a single crypto withdrawal."""
        ...

    @abstractmethod
    async def create_crypto_withdrawal(self, request: CryptoWithdrawalRequest) -> OrderId:
        """Withdraw crypto to an external address; returns the withdrawal id."""
        ...

    @abstractmethod
    async def get_bank_accounts(self, currency: str) -> List[BankAccount]:
        """Return the bank accounts linked to the account for a fiat currency."""
        ...

    # ============================================
    # Orders
    # ============================================

    @abstractmethod
    async def get_open_orders(self) -> List[OpenOrder]:
        """Return all open orders."""
        ...

    @abstractmethod
    async def get_order_history(self, request: Optional[PaginationRequest] = None) -> List[OrderSummary]:
        """Return historical orders, most recent first."""
        ...

    @abstractmethod
    async def get_order_history_summary(self, request: OrderLookup) -> OrderSummary:
        """Return the summary of a filled, cancelled or failed order."""
        ...

    @abstractmethod
    async def get_order_status(self, request: OrderStatusRequest) -> OrderStatus:
        """Return the current status of an order."""
        ...

    @abstractmethod
    async def place_limit_order(self, request: LimitOrderRequest) -> OrderId:
        """Place a limit order; returns the order id."""
        ...

    @abstractmethod
    async def place_market_order(self, request: MarketOrderRequest) -> OrderId:
        """Place a market order; returns the order id."""
        ...

    @abstractmethod
    async def cancel_order(self, request: CancelOrderRequest) -> None:
        """Cancel an open order."""
        ...
