"""Belleza storefront service: catalog, cart, checkout, accounts, reservations and notifications."""

__version__ = "1.0.0"
