"""
Request Option Models and Query Parameter Encoding

Query-string requests are described declaratively: each field of a QueryParams
model carries its query parameter name (the field alias) and whether it should
be left out when empty (omit_empty). Fields that belong in the URL path, such as
the currency pair, are excluded from encoding.

Encoding rules:
    - datetime -> ISO-8601 UTC ("2019-05-07T10:55:09.949Z")
    - Enum     -> its value
    - bool     -> "true" / "false"
    - list     -> one repeated key per item
    - other    -> str(value)

No range validation is done here (e.g. page-size limits); out of range values
are passed through and left to the server to reject.

JSON body requests (orders, withdrawals) are plain models serialized by alias
with BodyParams.to_body().

Example:
    >>> req = TransactionHistoryRequest(currency="BTC", limit=10)
    >>> req.to_query_params()
    [('currency', 'BTC'), ('limit', '10')]
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Tuple
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.schemas import TransactionType
from core.utils.time import to_iso8601


QueryParamList = List[Tuple[str, str]]

OMIT_EMPTY = {"omit_empty": True}


def _is_empty(value: Any) -> bool:
    """Zero values in the sense of omit-if-empty."""
    return value is None or value is False or value == 0 or value == "" or value == []


def quote_segment(value: Any) -> str:
    """
    Percent-escape a value for use as one URL path segment.

    Reserved characters ("/", "?", "#", ...) are escaped, so an identifier
    like "ORDER?1" stays inside its segment instead of starting a query string.

    Example:
        >>> quote_segment("ORDER?1")
        'ORDER%3F1'
    """
    return quote(str(value), safe="")


def _encode_value(value: Any) -> str:
    if isinstance(value, datetime):
        return to_iso8601(value)
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ============================================
# Query Parameters
# ============================================

class QueryParams(BaseModel):
    """
    Base class for request option models encoded into the query string.

    Subclasses declare fields like:
        limit: Optional[int] = Field(None, alias="limit", json_schema_extra=OMIT_EMPTY)
        pair: str = Field(..., exclude=True)   # path parameter, never encoded
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_query_params(self) -> QueryParamList:
        """
        Encode this request into (name, value) pairs for the query string.

        Returns:
            List of key/value tuples, in field declaration order
        """
        params: QueryParamList = []

        for name, field in type(self).model_fields.items():
            if field.exclude:
                continue

            value = getattr(self, name)
            extra = field.json_schema_extra if isinstance(field.json_schema_extra, dict) else {}
            if extra.get("omit_empty") and _is_empty(value):
                continue
            if value is None:
                continue

            key = field.alias or name
            if isinstance(value, (list, tuple)):
                params.extend((key, _encode_value(item)) for item in value)
            else:
                params.append((key, _encode_value(value)))

        return params


class TradeHistoryRequest(QueryParams):
    """
    Options for trade history (account or market).

    GET /account/{pair}/tradehistory
    GET /marketdata/{pair}/tradehistory
    """

    limit: Optional[int] = Field(None, alias="limit", json_schema_extra=OMIT_EMPTY)


class PaginationRequest(QueryParams):
    """
    Skip/limit paging options.

    GET /wallet/crypto/{currency}/deposit/history
    GET /wallet/crypto/{currency}/withdraw/history
    GET /orders/history
    """

    offset: Optional[int] = Field(None, alias="skip", json_schema_extra=OMIT_EMPTY)
    limit: Optional[int] = Field(None, alias="limit", json_schema_extra=OMIT_EMPTY)


class TransactionHistoryRequest(QueryParams):
    """
    Filters for the account transaction history.

    GET /account/transactionhistory
    """

    offset: Optional[int] = Field(None, alias="skip", json_schema_extra=OMIT_EMPTY)
    limit: Optional[int] = Field(None, alias="limit", json_schema_extra=OMIT_EMPTY)
    transaction_types: List[TransactionType] = Field(
        default_factory=list, alias="transactionTypes", json_schema_extra=OMIT_EMPTY
    )
    currency: Optional[str] = Field(None, alias="currency", json_schema_extra=OMIT_EMPTY)
    start_time: Optional[datetime] = Field(None, alias="startTime", json_schema_extra=OMIT_EMPTY)
    end_time: Optional[datetime] = Field(None, alias="endTime", json_schema_extra=OMIT_EMPTY)
    before_id: Optional[str] = Field(None, alias="beforeId", json_schema_extra=OMIT_EMPTY)


# ============================================
# Path-only Requests
# ============================================

class OrderLookup(BaseModel):
    """
    Identifies one order by exactly one of its ids.

    GET /orders/history/summary/orderid/{orderId}
    GET /orders/history/summary/customerorderid/{customerOrderId}
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    order_id: Optional[str] = None
    customer_order_id: Optional[str] = None

    @model_validator(mode="after")
    def check_single_id(self):
        if bool(self.order_id) == bool(self.customer_order_id):
            raise ValueError("exactly one of order_id or customer_order_id must be provided")
        return self

    def id_path(self) -> str:
        """Path suffix selecting the order: "orderid/{id}" or "customerorderid/{id}"."""
        if self.order_id:
            return f"orderid/{quote_segment(self.order_id)}"
        return f"customerorderid/{quote_segment(self.customer_order_id)}"


class OrderStatusRequest(OrderLookup):
    """
    Status of an open or recent order on a pair.

    GET /orders/{pair}/orderid/{orderId}
    GET /orders/{pair}/customerorderid/{customerOrderId}
    """

    pair: str


# ============================================
# JSON Body Requests
# ============================================

class BodyParams(BaseModel):
    """Base class for requests sent as a JSON body."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_body(self) -> bytes:
        """
        Serialize to compact JSON bytes using the wire (alias) names.

        The returned bytes are exactly what gets signed and sent.
        """
        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        return json.dumps(payload, separators=(",", ":")).encode("utf-8")


class LimitOrderRequest(BodyParams):
    """
    Place a limit order.

    POST /orders/limit
    """

    side: str = Field(..., alias="side")
    quantity: str = Field(..., alias="quantity")
    price: str = Field(..., alias="price")
    pair: str = Field(..., alias="pair")
    post_only: bool = Field(False, alias="postOnly")
    customer_order_id: Optional[str] = Field(None, alias="customerOrderId")


class MarketOrderRequest(BodyParams):
    """
    Place a market order. Set either base_amount or quote_amount.

    POST /orders/market
    """

    side: str = Field(..., alias="side")
    pair: str = Field(..., alias="pair")
    base_amount: Optional[str] = Field(None, alias="baseAmount")
    quote_amount: Optional[str] = Field(None, alias="quoteAmount")
    customer_order_id: Optional[str] = Field(None, alias="customerOrderId")

    @model_validator(mode="after")
    def check_single_amount(self):
        if bool(self.base_amount) == bool(self.quote_amount):
            raise ValueError("exactly one of base_amount or quote_amount must be provided")
        return self


class CancelOrderRequest(BodyParams):
    """
    Cancel an open order by exactly one of its ids.

    DELETE /orders/order
    """

    pair: str = Field(..., alias="pair")
    order_id: Optional[str] = Field(None, alias="orderId")
    customer_order_id: Optional[str] = Field(None, alias="customerOrderId")

    @model_validator(mode="after")
    def check_single_id(self):
        if bool(self.order_id) == bool(self.customer_order_id):
            raise ValueError("exactly one of order_id or customer_order_id must be provided")
        return self


class CryptoWithdrawalRequest(BodyParams):
    """
    Withdraw crypto to an external address. The currency goes in the path.

    POST /wallet/crypto/{currency}/withdraw
    """

    currency: str = Field(..., exclude=True)
    amount: str = Field(..., alias="amount")
    address: str = Field(..., alias="address")
    payment_reference: Optional[str] = Field(None, alias="paymentReference")
