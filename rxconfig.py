"""Reflex configuration for the QuickPay dashboard."""

import os

import reflex as rx

# Get port from environment
APP_PORT = int(os.getenv("DATABRICKS_APP_PORT", "8000"))

config = rx.Config(
    app_name="quickpay_dashboard",
    # Use the src directory structure
    app_module_import="quickpay_dashboard.app",
    backend_port=APP_PORT,
)
