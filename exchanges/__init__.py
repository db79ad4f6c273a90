"""
Exchange Connectors Package

Each exchange has its own subfolder with:
- api_client.py: REST API logic
- auth.py: request signing
- __init__.py: client constructors

Currently only VALR (exchanges.valr) is implemented.
"""
