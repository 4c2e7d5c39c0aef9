"""
Page chrome: the sidebar navigation and the top bar.
"""

import reflex as rx

from quickpay_dashboard.state import DashboardState

MAIN_NAV = [
    ("HOME", "/", "home"),
    ("COMPANY", "/company", "building-2"),
    ("PERKS", "/perks", "gift"),
    ("LEGAL", "/legal", "scale"),
    ("PAYMENTS", "/payments", "credit-card"),
]

SECONDARY_NAV = [
    ("Settings", "/settings", "settings"),
    ("Clients", "/clients", "users"),
]


def _nav_item(label: str, href: str, icon: str) -> rx.Component:
    return rx.link(
        rx.icon(icon, size=18),
        rx.text(label, class_name="nav-label"),
        href=href,
        class_name="nav-item",
        underline="none",
    )


def sidebar() -> rx.Component:
    """Build the left navigation column."""
    return rx.box(
        rx.link(
            rx.box(rx.text("Q", class_name="logo-mark-letter"), class_name="logo-mark"),
            rx.text("QuickPay", class_name="logo-text"),
            href="/",
            class_name="logo",
            underline="none",
        ),
        rx.box(
            *[_nav_item(*item) for item in MAIN_NAV],
            rx.box(
                *[_nav_item(*item) for item in SECONDARY_NAV],
                class_name="nav-secondary",
            ),
            class_name="nav",
        ),
        rx.box(
            rx.button(rx.icon("circle-help", size=18), "GET HELP", class_name="sidebar-action"),
            rx.button(
                rx.icon("message-circle", size=18), "CHAT WITH US", class_name="sidebar-action"
            ),
            class_name="sidebar-footer",
        ),
        class_name="sidebar",
    )


def top_bar(title: str) -> rx.Component:
    """Build the page title row with the create button and user menu."""
    return rx.box(
        rx.heading(title, size="6", as_="h1"),
        rx.box(
            rx.button(
                rx.icon("plus", size=16),
                "CREATE INVOICE",
                on_click=DashboardState.open_drawer,
                class_name="primary-button",
            ),
            rx.icon_button(rx.icon("bell", size=18), variant="ghost"),
            rx.box(
                rx.avatar(fallback="U", size="2", radius="full"),
                rx.text(
                    rx.cond(DashboardState.user_name != "", DashboardState.user_name, "Account"),
                    class_name="user-name",
                ),
                rx.icon("chevron-down", size=16),
                class_name="user-menu",
            ),
            class_name="top-bar-actions",
        ),
        class_name="top-bar",
    )


def _status_banners() -> rx.Component:
    return rx.fragment(
        rx.cond(
            DashboardState.error != "",
            rx.callout(
                rx.box(
                    rx.text(DashboardState.error),
                    rx.button(
                        "Dismiss",
                        size="1",
                        variant="ghost",
                        on_click=DashboardState.dismiss_error,
                    ),
                    class_name="banner-row",
                ),
                icon="triangle-alert",
                color_scheme="red",
                class_name="banner",
            ),
        ),
        rx.cond(
            DashboardState.is_fallback,
            rx.callout(
                rx.cond(
                    DashboardState.fallback_reason == "error",
                    "Showing sample invoices: the invoice service could not be reached.",
                    "Showing sample invoices: you have no invoices yet.",
                ),
                icon="info",
                color_scheme="blue",
                class_name="banner",
            ),
        ),
    )


def dashboard_layout(title: str, *children: rx.Component) -> rx.Component:
    """Wrap page content with the sidebar, top bar and status banners."""
    return rx.box(
        sidebar(),
        rx.box(
            top_bar(title),
            rx.box(
                _status_banners(),
                *children,
                class_name="page-content",
            ),
            class_name="main-panel",
        ),
        class_name="app-shell",
    )
