"""Solution Marketplace Pricing Console."""

__version__ = "0.1.0"
