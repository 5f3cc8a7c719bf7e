"""DART disclosure monitor: filter new OpenDART filings and push the good ones to Telegram."""

__version__ = "0.1.0"
