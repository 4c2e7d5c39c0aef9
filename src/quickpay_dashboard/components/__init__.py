"""Reflex components for the QuickPay dashboard."""
