"""
VALR Response Schemas

This module defines Pydantic models for every VALR REST response the client decodes.

Key Principles:
    - Wire names are VALR's camelCase JSON keys (declared as aliases); Python
      attributes are snake_case. Models can be populated by either name.
    - Monetary and quantity fields stay as decimal strings ("0.50626594758"),
      never floats, so no precision is lost between the exchange and the caller.
    - String enumerations (order type, transaction type, status) are closed
      Enums with an UNKNOWN member. Strings the client does not know yet decode
      to UNKNOWN instead of failing the whole response; non-string values (null,
      numbers, objects) are still a shape error.
    - Unknown extra keys in responses are ignored.

Models:
    Public:  Currency, CurrencyPair, MarketSummary, OrderBook, OrderBookEntry,
             OrderTypesEntry, ServerTime, ServiceStatus
    Account: Balance, Trade, Transaction, TransactionInfo, TransactionTypeInfo
    Wallet:  DepositAddress, WithdrawalInfo, CryptoDeposit, CryptoWithdrawal, BankAccount
    Orders:  OrderId, OpenOrder, OrderStatus, OrderSummary
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Dict, Iterable, List, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, field_validator


# ============================================
# Enumerations
# ============================================

class OrderType(str, Enum):
    """Kind of an order supported by a currency pair."""

    # Limit order that is cancelled instead of matching on placement
    POST_ONLY = "post-only limit"
    LIMIT = "limit"
    # Market order (only crypto-to-ZAR pairs)
    MARKET = "market"
    # Like market, but allows crypto-to-crypto pairs
    SIMPLE = "simple"
    STOP_LOSS_LIMIT = "stop-loss limit"
    TAKE_PROFIT_LIMIT = "take-profit limit"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        return cls.UNKNOWN


class TransactionType(str, Enum):
    """Kind of a wallet transaction; also usable as a transaction history filter."""

    LIMIT_BUY = "LIMIT_BUY"
    LIMIT_SELL = "LIMIT_SELL"
    MARKET_BUY = "MARKET_BUY"
    MARKET_SELL = "MARKET_SELL"
    SIMPLE_BUY = "SIMPLE_BUY"
    SIMPLE_SELL = "SIMPLE_SELL"
    MAKER_REWARD = "MAKER_REWARD"
    BLOCKCHAIN_RECEIVE = "BLOCKCHAIN_RECEIVE"
    BLOCKCHAIN_SEND = "BLOCKCHAIN_SEND"
    FIAT_DEPOSIT = "FIAT_DEPOSIT"
    FIAT_WITHDRAWAL = "FIAT_WITHDRAWAL"
    REFERRAL_REBATE = "REFERRAL_REBATE"
    REFERRAL_REWARD = "REFERRAL_REWARD"
    PROMOTIONAL_REBATE = "PROMOTIONAL_REBATE"
    INTERNAL_TRANSFER = "INTERNAL_TRANSFER"
    FIAT_WITHDRAWAL_REVERSAL = "FIAT_WITHDRAWAL_REVERSAL"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        return cls.UNKNOWN


class Status(str, Enum):
    """
    Operational status of the exchange.

    ONLINE:    all functionality is available
    READ_ONLY: only GET and OPTIONS requests are accepted; everything else gets a 503
    UNKNOWN:   the server reported a status this client does not recognise
    """

    ONLINE = "online"
    READ_ONLY = "read-only"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        return cls.UNKNOWN


# Calling the Enum routes unrecognised strings through _missing_ before validation;
# non-string values still fail validation
OrderTypeValue = Annotated[OrderType, BeforeValidator(OrderType)]
TransactionTypeValue = Annotated[TransactionType, BeforeValidator(TransactionType)]
StatusValue = Annotated[Status, BeforeValidator(Status)]


# ============================================
# Base Model
# ============================================

class ValrModel(BaseModel):
    """
    Base model for all VALR response schemas.

    Accepts both the camelCase wire names and the snake_case attribute names,
    ignores unknown keys, and is immutable once decoded.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True
    )


def _decimal_to_str(v):
    """Render JSON numbers (parsed as Decimal/int) as exact decimal strings."""
    if isinstance(v, (Decimal, int)) and not isinstance(v, bool):
        return str(v)
    return v


# ============================================
# Public Market Data
# ============================================

class Currency(ValrModel):
    """A fiat or crypto currency supported by VALR."""

    symbol: str = Field(..., alias="symbol")
    is_active: bool = Field(..., alias="isActive")
    short_name: str = Field(..., alias="shortName")
    long_name: str = Field(..., alias="longName")


class CurrencyPair(ValrModel):
    """A fiat/crypto or crypto/crypto pair supported by VALR."""

    symbol: str = Field(..., alias="symbol")
    base_currency: str = Field(..., alias="baseCurrency")
    quote_currency: str = Field(..., alias="quoteCurrency")
    short_name: str = Field(..., alias="shortName")
    active: bool = Field(..., alias="active")
    min_base_amount: str = Field(..., alias="minBaseAmount")
    max_base_amount: str = Field(..., alias="maxBaseAmount")
    min_quote_amount: str = Field(..., alias="minQuoteAmount")
    max_quote_amount: str = Field(..., alias="maxQuoteAmount")


class MarketSummary(ValrModel):
    """
    Summary of a market pair on the exchange.

    Example:
        >>> summary = await client.get_market_summary_for_currency("BTCZAR")
        >>> print(summary.last_traded_price)   # "7005"
    """

    currency_pair: str = Field(..., alias="currencyPair")
    ask_price: str = Field(..., alias="askPrice")
    bid_price: str = Field(..., alias="bidPrice")
    last_traded_price: str = Field(..., alias="lastTradedPrice")
    previous_close_price: str = Field(..., alias="previousClosePrice")
    base_volume: str = Field(..., alias="baseVolume")
    high_price: str = Field(..., alias="highPrice")
    low_price: str = Field(..., alias="lowPrice")
    created_at: datetime = Field(..., alias="created")
    change_from_previous: str = Field(..., alias="changeFromPrevious")


class OrderBookEntry(ValrModel):
    """A single (aggregated) price level in an order book."""

    side: str = Field(..., alias="side")
    quantity: str = Field(..., alias="quantity")
    price: str = Field(..., alias="price")
    currency_pair: str = Field(..., alias="currencyPair")
    order_count: int = Field(0, alias="orderCount")
    id: Optional[str] = Field(None, alias="id")


class OrderBook(ValrModel):
    """
    Order book snapshot.

    Asks are sorted by price ascending, bids by price descending. The server
    aggregates orders at the same price (except for the full order book).
    """

    asks: List[OrderBookEntry] = Field(default_factory=list, alias="Asks")
    bids: List[OrderBookEntry] = Field(default_factory=list, alias="Bids")
    last_change: Optional[datetime] = Field(None, alias="LastChange")


class OrderTypesEntry(ValrModel):
    """Order types supported by one currency pair (GET /public/ordertypes item)."""

    currency_pair: str = Field(..., alias="currencyPair")
    order_types: List[OrderTypeValue] = Field(default_factory=list, alias="orderTypes")


class ServerTime(ValrModel):
    """Time on VALR's servers."""

    epoch_time: int = Field(..., alias="epochTime")
    time: datetime = Field(..., alias="time")


class ServiceStatus(ValrModel):
    """Body of GET /public/status."""

    status: StatusValue = Field(..., alias="status")


# ============================================
# Account
# ============================================

class Balance(ValrModel):
    """Balance of one currency in the account."""

    currency: str = Field(..., alias="currency")
    available: str = Field(..., alias="available")
    reserved: str = Field(..., alias="reserved")
    total: str = Field(..., alias="total")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class Trade(ValrModel):
    """A single executed trade."""

    price: str = Field(..., alias="price")
    quantity: str = Field(..., alias="quantity")
    currency_pair: str = Field(..., alias="currencyPair")
    traded_at: datetime = Field(..., alias="tradedAt")
    # Market trade history reports the taker's side
    side: str = Field(..., alias="side", validation_alias=AliasChoices("side", "takerSide"))
    id: Optional[str] = Field(
        None, alias="id", validation_alias=AliasChoices("id", "tradeId")
    )
    sequence_id: Optional[int] = Field(None, alias="sequenceId")
    order_id: Optional[str] = Field(None, alias="orderId")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        """Older responses send a numeric tradeId"""
        return _decimal_to_str(v)


class TransactionTypeInfo(ValrModel):
    """Type and human readable description of a transaction."""

    type: TransactionTypeValue = Field(..., alias="type")
    description: Optional[str] = Field(None, alias="description")


class TransactionInfo(ValrModel):
    """Additional information attached to some transactions."""

    cost_per_coin: Optional[str] = Field(None, alias="costPerCoin")
    cost_per_coin_symbol: Optional[str] = Field(None, alias="costPerCoinSymbol")
    currency_pair_symbol: Optional[str] = Field(None, alias="currencyPairSymbol")
    order_id: Optional[str] = Field(
        None, alias="orderId", validation_alias=AliasChoices("orderId", "orderID")
    )

    @field_validator("cost_per_coin", mode="before")
    @classmethod
    def coerce_cost_per_coin(cls, v):
        """costPerCoin arrives as a JSON number"""
        return _decimal_to_str(v)


class Transaction(ValrModel):
    """
    A wallet activity (trade leg, deposit, withdrawal, reward, fee, ...).

    Every field is optional; VALR omits whatever does not apply to the
    transaction type.
    """

    type_info: Optional[TransactionTypeInfo] = Field(None, alias="transactionType")
    debit_currency: Optional[str] = Field(None, alias="debitCurrency")
    debit_value: Optional[str] = Field(None, alias="debitValue")
    credit_currency: Optional[str] = Field(None, alias="creditCurrency")
    credit_value: Optional[str] = Field(None, alias="creditValue")
    fee_currency: Optional[str] = Field(None, alias="feeCurrency")
    fee_value: Optional[str] = Field(None, alias="feeValue")
    event_at: Optional[datetime] = Field(None, alias="eventAt")
    additional_info: Optional[TransactionInfo] = Field(None, alias="additionalInfo")
    id: Optional[str] = Field(None, alias="id")


# ============================================
# Wallets
# ============================================

class DepositAddress(ValrModel):
    """Default deposit address of a crypto wallet."""

    currency: str = Field(..., alias="currency")
    address: str = Field(..., alias="address")


class WithdrawalInfo(ValrModel):
    """Withdrawal limits and costs for a currency."""

    currency: str = Field(..., alias="currency")
    minimum_withdraw_amount: str = Field(..., alias="minimumWithdrawAmount")
    withdraw_cost: str = Field(..., alias="withdrawCost")
    supports_payment_reference: bool = Field(False, alias="supportsPaymentReference")
    is_active: bool = Field(..., alias="isActive")


class CryptoDeposit(ValrModel):
    """A single crypto deposit history record."""

    currency_code: str = Field(..., alias="currencyCode")
    receive_address: Optional[str] = Field(None, alias="receiveAddress")
    transaction_hash: Optional[str] = Field(None, alias="transactionHash")
    amount: str = Field(..., alias="amount")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    confirmations: Optional[int] = Field(None, alias="confirmations")
    confirmed: bool = Field(False, alias="confirmed")
    confirmed_at: Optional[datetime] = Field(None, alias="confirmedAt")


class CryptoWithdrawal(ValrModel):
    """A crypto withdrawal, as returned by the history and status endpoints."""

    id: str = Field(..., alias="id")
    currency: str = Field(..., alias="currency")
    address: Optional[str] = Field(None, alias="address")
    amount: str = Field(..., alias="amount")
    fee_amount: Optional[str] = Field(None, alias="feeAmount")
    transaction_hash: Optional[str] = Field(None, alias="transactionHash")
    confirmations: Optional[int] = Field(None, alias="confirmations")
    last_confirmed_at: Optional[datetime] = Field(None, alias="lastConfirmedAt")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    verified: bool = Field(False, alias="verified")
    status: Optional[str] = Field(None, alias="status")


class BankAccount(ValrModel):
    """A bank account linked to the VALR account."""

    id: str = Field(..., alias="id")
    bank: str = Field(..., alias="bank")
    account_holder: str = Field(..., alias="accountHolder")
    account_number: str = Field(..., alias="accountNumber")
    branch_code: Optional[str] = Field(None, alias="branchCode")
    account_type: Optional[str] = Field(None, alias="accountType")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


# ============================================
# Orders
# ============================================

class OrderId(ValrModel):
    """Identifier returned when an order or withdrawal is accepted."""

    id: str = Field(..., alias="id")


class OpenOrder(ValrModel):
    """An order that is still open on the exchange."""

    order_id: str = Field(..., alias="orderId")
    side: str = Field(..., alias="side")
    remaining_quantity: str = Field(..., alias="remainingQuantity")
    price: str = Field(..., alias="price")
    currency_pair: str = Field(..., alias="currencyPair")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    original_quantity: str = Field(..., alias="originalQuantity")
    filled_percentage: Optional[str] = Field(None, alias="filledPercentage")
    customer_order_id: Optional[str] = Field(None, alias="customerOrderId")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    status: Optional[str] = Field(None, alias="status")
    type: OrderTypeValue = Field(..., alias="type")
    time_in_force: Optional[str] = Field(None, alias="timeInForce")


class OrderStatus(ValrModel):
    """Current status of a single order."""

    order_id: str = Field(..., alias="orderId")
    order_status_type: str = Field(..., alias="orderStatusType")
    currency_pair: str = Field(..., alias="currencyPair")
    original_price: Optional[str] = Field(None, alias="originalPrice")
    remaining_quantity: Optional[str] = Field(None, alias="remainingQuantity")
    original_quantity: Optional[str] = Field(None, alias="originalQuantity")
    order_side: Optional[str] = Field(None, alias="orderSide")
    order_type: OrderTypeValue = Field(..., alias="orderType")
    failed_reason: Optional[str] = Field(None, alias="failedReason")
    customer_order_id: Optional[str] = Field(None, alias="customerOrderId")
    order_updated_at: Optional[datetime] = Field(None, alias="orderUpdatedAt")
    order_created_at: Optional[datetime] = Field(None, alias="orderCreatedAt")
    time_in_force: Optional[str] = Field(None, alias="timeInForce")


class OrderSummary(OrderStatus):
    """A historical order (order history and order summary endpoints)."""

    average_price: Optional[str] = Field(None, alias="averagePrice")
    total: Optional[str] = Field(None, alias="total")
    total_fee: Optional[str] = Field(None, alias="totalFee")
    fee_currency: Optional[str] = Field(None, alias="feeCurrency")


# ============================================
# Derived Maps
# ============================================

def order_types_to_map(entries: Iterable[OrderTypesEntry]) -> Dict[str, Dict[OrderType, bool]]:
    """
    Collapse the /public/ordertypes list into a 2D presence map.

    The first key is the currency pair, the second the order type. Only
    supported combinations are present, so look-ups should use .get().

    Example:
        >>> types = order_types_to_map(entries)
        >>> if types.get("BTCZAR", {}).get(OrderType.SIMPLE, False):
        ...     print("simple orders are supported for BTCZAR")
    """
    types_map: Dict[str, Dict[OrderType, bool]] = {}
    for entry in entries:
        types_map[entry.currency_pair] = order_types_for_currency_to_map(entry.order_types)
    return types_map


def order_types_for_currency_to_map(order_types: Iterable[OrderType]) -> Dict[OrderType, bool]:
    """Collapse a list of order types into a presence map."""
    return {order_type: True for order_type in order_types}
