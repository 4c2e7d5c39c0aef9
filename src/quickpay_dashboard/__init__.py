"""QuickPay invoice dashboard."""

__version__ = "0.1.0"
