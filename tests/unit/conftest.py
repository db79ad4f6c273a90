"""
Shared fixtures: an in-process mock of the VALR REST API.

The mock serves canned JSON under /v1, records every request it receives and
checks signatures on private routes the same way VALR does (401 on a missing
or wrong signature). Individual tests can force a status code, a raw body or
a response delay.
"""

import asyncio
import hashlib
import hmac

import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from exchanges.valr import new_client, new_public_client


# Secret used in VALR's own signing examples
TEST_API_KEY = "test-api-key"
TEST_API_SECRET = "4961b74efac86b25cce8fbe4c9811c4c7a787b7a5996660afcc2e287ad864363"


# ============================================
# Canned Responses
# ============================================

FIXTURES = {
    "currencies": [
        {"symbol": "R", "isActive": True, "shortName": "ZAR", "longName": "Rand"},
        {"symbol": "BTC", "isActive": True, "shortName": "BTC", "longName": "Bitcoin"},
    ],
    "pairs": [
        {
            "symbol": "BTCZAR",
            "baseCurrency": "BTC",
            "quoteCurrency": "ZAR",
            "shortName": "BTC/ZAR",
            "active": True,
            "minBaseAmount": "0.0001",
            "maxBaseAmount": "2",
            "minQuoteAmount": "10",
            "maxQuoteAmount": "100000",
        }
    ],
    "marketsummary": {
        "currencyPair": "BTCZAR",
        "askPrice": "10000",
        "bidPrice": "7005",
        "lastTradedPrice": "7005",
        "previousClosePrice": "7005",
        "baseVolume": "0.16065663",
        "highPrice": "10000",
        "lowPrice": "7005",
        "created": "2019-04-20T13:02:03.228Z",
        "changeFromPrevious": "0",
    },
    "orderbook": {
        "Asks": [
            {"side": "sell", "quantity": "0.101", "price": "9000", "currencyPair": "BTCZAR", "orderCount": 1},
            {"side": "sell", "quantity": "0.2", "price": "9100", "currencyPair": "BTCZAR", "orderCount": 2},
        ],
        "Bids": [
            {"side": "buy", "quantity": "0.1", "price": "8802", "currencyPair": "BTCZAR", "orderCount": 1},
        ],
    },
    "orderbook_full": {
        "Asks": [
            {"side": "sell", "quantity": "0.101", "price": "9000", "currencyPair": "BTCZAR",
             "id": "ask-1", "positionAtPrice": 0},
        ],
        "Bids": [],
        "LastChange": "2019-05-13T15:14:48.422Z",
    },
    "ordertypes": [
        {"currencyPair": "BTCZAR", "orderTypes": ["post-only limit", "limit", "market", "simple"]},
        {"currencyPair": "ETHZAR", "orderTypes": ["limit", "iceberg"]},
    ],
    "ordertypes_for_pair": ["post-only limit", "limit", "market", "simple"],
    "time": {"epochTime": 1555513811, "time": "2019-04-17T15:10:11.956Z"},
    "status": {"status": "online"},
    "balances": [
        {
            "currency": "ETH",
            "available": "0.01626594758",
            "reserved": "0.49",
            "total": "0.50626594758",
            "updatedAt": "2020-05-31T05:10:16.522Z",
        },
        {
            "currency": "ZAR",
            "available": "1000",
            "reserved": "0",
            "total": "1000",
            "updatedAt": "2020-05-31T05:10:16.522Z",
        },
    ],
    "tradehistory": [
        {
            "price": "87000",
            "quantity": "0.0001",
            "currencyPair": "BTCZAR",
            "tradedAt": "2019-05-13T15:14:48.422Z",
            "side": "buy",
            "tradeId": 10634,
        }
    ],
    "market_tradehistory": [
        {
            "price": "900000",
            "quantity": "0.001",
            "currencyPair": "BTCZAR",
            "tradedAt": "2019-05-13T15:14:48.422Z",
            "takerSide": "sell",
            "sequenceId": 42,
            "id": "b2a7f1c0-trade",
            "quoteVolume": "900",
        }
    ],
    "transactionhistory": [
        {
            "transactionType": {"type": "REFERRAL_REBATE", "description": "Referral Rebate"},
            "creditCurrency": "BTC",
            "creditValue": "0.0000003",
            "eventAt": "2019-05-07T10:55:09.949Z",
        },
        {
            "transactionType": {"type": "LIMIT_BUY", "description": "Limit Buy"},
            "debitCurrency": "ZAR",
            "debitValue": "10",
            "creditCurrency": "BTC",
            "creditValue": "0.0001",
            "feeCurrency": "BTC",
            "feeValue": "0.0000001",
            "eventAt": "2019-05-07T11:00:00.000Z",
            "additionalInfo": {
                "costPerCoin": 100000.5,
                "costPerCoinSymbol": "R",
                "currencyPairSymbol": "BTCZAR",
                "orderId": "order-1",
            },
            "id": "tx-2",
        },
        {
            "transactionType": {"type": "STAKING_REWARD", "description": "Staking Reward"},
            "creditCurrency": "ETH",
            "creditValue": "0.5",
            "eventAt": "2019-05-08T00:00:00.000Z",
        },
    ],
    "depositaddress": {"currency": "ETH", "address": "0xA7Fae2Fd50886b962d46FF4280f595A3982aeAa5"},
    "withdrawinfo": {
        "currency": "BTC",
        "minimumWithdrawAmount": "0.0002",
        "withdrawCost": "0.0004",
        "supportsPaymentReference": False,
        "isActive": True,
    },
    "deposithistory": [
        {
            "currencyCode": "BTC",
            "receiveAddress": "2NB4zCixhSAbpTyu5AHyxMCKDZ6vSY5Y8cR",
            "transactionHash": "0x5e3c",
            "amount": "0.01",
            "createdAt": "2019-06-01T08:00:00.000Z",
            "confirmations": 3,
            "confirmed": True,
            "confirmedAt": "2019-06-01T08:30:00.000Z",
        }
    ],
    "withdrawal": {
        "id": "withdrawal-1",
        "currency": "BTC",
        "address": "2NB4zCixhSAbpTyu5AHyxMCKDZ6vSY5Y8cR",
        "amount": "0.01",
        "feeAmount": "0.0004",
        "transactionHash": "0x9a1b",
        "confirmations": 2,
        "lastConfirmedAt": "2019-06-02T08:30:00.000Z",
        "createdAt": "2019-06-02T08:00:00.000Z",
        "verified": True,
        "status": "Processing",
    },
    "bankaccounts": [
        {
            "id": "bank-1",
            "bank": "FNB",
            "accountHolder": "J Doe",
            "accountNumber": "62000000000",
            "branchCode": "250655",
            "accountType": "Cheque",
            "createdAt": "2019-06-01T08:00:00.000Z",
        }
    ],
    "openorders": [
        {
            "orderId": "order-1",
            "side": "sell",
            "remainingQuantity": "0.1",
            "price": "1000000",
            "currencyPair": "BTCZAR",
            "createdAt": "2019-06-01T08:00:00.000Z",
            "originalQuantity": "0.1",
            "filledPercentage": "0.00",
            "customerOrderId": "customer-1",
            "updatedAt": "2019-06-01T08:00:00.000Z",
            "status": "Placed",
            "type": "post-only limit",
            "timeInForce": "GTC",
        }
    ],
    "ordersummary": {
        "orderId": "order-2",
        "orderStatusType": "Filled",
        "currencyPair": "BTCZAR",
        "averagePrice": "900000",
        "originalPrice": "900000",
        "remainingQuantity": "0",
        "originalQuantity": "0.001",
        "total": "900",
        "totalFee": "0.0000001",
        "feeCurrency": "BTC",
        "orderSide": "buy",
        "orderType": "limit",
        "failedReason": "",
        "customerOrderId": "customer-2",
        "orderUpdatedAt": "2019-06-01T09:00:00.000Z",
        "orderCreatedAt": "2019-06-01T08:00:00.000Z",
        "timeInForce": "GTC",
    },
    "orderstatus": {
        "orderId": "order-1",
        "orderStatusType": "Placed",
        "currencyPair": "BTCZAR",
        "originalPrice": "1000000",
        "remainingQuantity": "0.1",
        "originalQuantity": "0.1",
        "orderSide": "sell",
        "orderType": "post-only limit",
        "customerOrderId": "customer-1",
        "orderUpdatedAt": "2019-06-01T08:00:00.000Z",
        "orderCreatedAt": "2019-06-01T08:00:00.000Z",
    },
    "orderid": {"id": "order-3"},
}


# ============================================
# Mock Server
# ============================================

class MockValrServer:
    """
    Canned VALR API.

    Attributes:
        requests: Every request received, as dicts (method, path, query, headers, body)
        force_status: When set, every route answers with this status
        force_body: When set, every route answers with these raw bytes
        delay: Seconds to sleep before answering
        base_url: Set once the server is listening (e.g., "http://127.0.0.1:PORT/v1")
    """

    def __init__(self, api_key: str = TEST_API_KEY, api_secret: str = TEST_API_SECRET):
        self.api_key = api_key
        self.api_secret = api_secret
        self.requests = []
        self.force_status = None
        self.force_body = None
        self.delay = 0.0
        self.base_url = None

    @property
    def last_request(self):
        return self.requests[-1]

    def _route(self, fixture, status=200):
        async def handler(request: web.Request) -> web.Response:
            body = await request.read()
            self.requests.append({
                "method": request.method,
                "path": request.path,
                "raw_path": request.rel_url.raw_path,
                "query": request.query.copy(),
                "headers": request.headers.copy(),
                "body": body,
            })

            if self.delay:
                await asyncio.sleep(self.delay)

            if "public" not in request.path and not self._signature_ok(request, body):
                return web.json_response({"code": -11252, "message": "Invalid signature"}, status=401)

            response_status = self.force_status or status
            if self.force_body is not None:
                return web.Response(body=self.force_body, status=response_status, content_type="application/json")
            if fixture is None:
                return web.Response(status=response_status)
            return web.json_response(FIXTURES[fixture], status=response_status)

        return handler

    def _signature_ok(self, request: web.Request, body: bytes) -> bool:
        timestamp = request.headers.get("X-VALR-TIMESTAMP")
        signature = request.headers.get("X-VALR-SIGNATURE")
        if request.headers.get("X-VALR-API-KEY") != self.api_key or not timestamp or not signature:
            return False

        # The path is signed as sent, still percent-encoded
        payload = timestamp.encode() + request.method.encode() + request.rel_url.raw_path.encode() + body
        expected = hmac.new(self.api_secret.encode(), payload, hashlib.sha512).hexdigest()
        return hmac.compare_digest(expected, signature)

    def build_app(self) -> web.Application:
        app = web.Application()
        r = app.router

        # Public
        r.add_get("/v1/public/currencies", self._route("currencies"))
        r.add_get("/v1/public/pairs", self._route("pairs"))
        r.add_get("/v1/public/marketsummary", self._route("marketsummary_all"))
        r.add_get("/v1/public/{pair}/marketsummary", self._route("marketsummary"))
        r.add_get("/v1/public/{pair}/orderbook", self._route("orderbook"))
        r.add_get("/v1/public/ordertypes", self._route("ordertypes"))
        r.add_get("/v1/public/{pair}/ordertypes", self._route("ordertypes_for_pair"))
        r.add_get("/v1/public/time", self._route("time"))
        r.add_get("/v1/public/status", self._route("status"))

        # Account
        r.add_get("/v1/account/balances", self._route("balances"))
        r.add_get("/v1/account/{pair}/tradehistory", self._route("tradehistory"))
        r.add_get("/v1/account/transactionhistory", self._route("transactionhistory"))

        # Market data (authenticated)
        r.add_get("/v1/marketdata/{pair}/tradehistory", self._route("market_tradehistory"))
        r.add_get("/v1/marketdata/{pair}/orderbook/full", self._route("orderbook_full"))

        # Wallets
        r.add_get("/v1/wallet/crypto/{currency}/deposit/address", self._route("depositaddress"))
        r.add_get("/v1/wallet/crypto/{currency}/deposit/history", self._route("deposithistory"))
        r.add_get("/v1/wallet/crypto/{currency}/withdraw", self._route("withdrawinfo"))
        r.add_post("/v1/wallet/crypto/{currency}/withdraw", self._route("orderid", status=202))
        r.add_get("/v1/wallet/crypto/{currency}/withdraw/history", self._route("withdrawalhistory"))
        r.add_get("/v1/wallet/crypto/{currency}/withdraw/{id}", self._route("withdrawal"))
        r.add_get("/v1/wallet/fiat/{currency}/accounts", self._route("bankaccounts"))

        # Orders
        r.add_get("/v1/orders/open", self._route("openorders"))
        r.add_get("/v1/orders/history", self._route("orderhistory"))
        r.add_get("/v1/orders/history/summary/{kind}/{id}", self._route("ordersummary"))
        r.add_post("/v1/orders/limit", self._route("orderid", status=202))
        r.add_post("/v1/orders/market", self._route("orderid", status=202))
        r.add_delete("/v1/orders/order", self._route(None, status=202))
        r.add_get("/v1/orders/{pair}/{kind}/{id}", self._route("orderstatus"))

        return app


FIXTURES["marketsummary_all"] = [FIXTURES["marketsummary"]]
FIXTURES["withdrawalhistory"] = [FIXTURES["withdrawal"]]
FIXTURES["orderhistory"] = [FIXTURES["ordersummary"]]


# ============================================
# Fixtures
# ============================================

@pytest_asyncio.fixture
async def valr_server():
    """Start the mock VALR API on a free local port"""
    mock = MockValrServer()
    server = TestServer(mock.build_app())
    await server.start_server()
    mock.base_url = str(server.make_url("/v1"))
    try:
        yield mock
    finally:
        await server.close()


@pytest_asyncio.fixture
async def public_client(valr_server):
    """Credential-less client pointed at the mock server"""
    async with new_public_client(base_url=valr_server.base_url) as client:
        yield client


@pytest_asyncio.fixture
async def private_client(valr_server):
    """Signing client pointed at the mock server"""
    async with new_client(TEST_API_KEY, TEST_API_SECRET, base_url=valr_server.base_url) as client:
        yield client
