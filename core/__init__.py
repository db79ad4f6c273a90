"""
Core Package

Contains the exchange-agnostic core logic including:
- PublicClient / PrivateClient: Abstract base classes for the two capability sets
- Schemas: Pydantic models for decoded responses (balances, order books, trades, etc.)
- Params: Request option models and their query string / JSON body encoding
- Exceptions: Typed error hierarchy raised by every client call
- Config & Logging: Environment-driven settings and the "valr" logger
"""
