"""Mock payment-processing API: customers, order checkout and settlement, stats."""

__version__ = "1.0.0"
