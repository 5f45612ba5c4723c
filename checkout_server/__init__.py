"""Checkout MCP Server - product catalog, cart, discount codes and receipts."""

__version__ = "0.1.0"
