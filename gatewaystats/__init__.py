"""Usage statistics queries for the gateway admin API."""

__version__ = "1.0.0"
