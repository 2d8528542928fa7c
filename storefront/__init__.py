"""Storefront backend: Firebase Cloud Functions and the service layer behind them."""

__version__ = "0.1.0"
