"""UI Theme Constants for the FreshCut storefront.

Centralises all colour, font, and sizing constants for the
CustomTkinter interface.  Dark sidebar, warm light content area and a
butcher-red accent.

This file contains **zero logic**; only ``Final`` constants.
"""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Colour palette
# ---------------------------------------------------------------------------

SIDEBAR_BG: Final[str] = "#2b1d1a"
SIDEBAR_HOVER: Final[str] = "#3d2a25"
SIDEBAR_ACTIVE: Final[str] = "#7a1f1f"
SIDEBAR_TEXT: Final[str] = "#f2e8e4"

CONTENT_BG: Final[str] = "#faf6f3"
CONTENT_CARD_BG: Final[str] = "#ffffff"

ACCENT_PRIMARY: Final[str] = "#b3261e"
ACCENT_HOVER: Final[str] = "#8f1d17"
TEXT_PRIMARY: Final[str] = "#2b1d1a"
TEXT_SECONDARY: Final[str] = "#7a6a64"
TEXT_LIGHT: Final[str] = "#ffffff"

# Order / stock badges
BADGE_PENDING: Final[str] = "#f39c12"
BADGE_IN_TRANSIT: Final[str] = "#2d7dd2"
BADGE_DELIVERED: Final[str] = "#27ae60"
BADGE_CANCELLED: Final[str] = "#7f8c8d"
OFFER_TEXT: Final[str] = "#27ae60"

# Input / form
INPUT_BG: Final[str] = "#ffffff"
INPUT_BORDER: Final[str] = "#d9ccc6"
ERROR_TEXT: Final[str] = "#dc3545"
SUCCESS_TEXT: Final[str] = "#27ae60"

SIGN_OUT_TEXT: Final[str] = "#e74c3c"
SIGN_OUT_HOVER: Final[str] = "#4a2420"

# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------

FONT_FAMILY: Final[str] = "Segoe UI"
FONT_BRAND: Final[tuple[str, int, str]] = (FONT_FAMILY, 22, "bold")
FONT_HEADING: Final[tuple[str, int, str]] = (FONT_FAMILY, 20, "bold")
FONT_CARD_TITLE: Final[tuple[str, int, str]] = (FONT_FAMILY, 15, "bold")
FONT_BODY: Final[tuple[str, int]] = (FONT_FAMILY, 13)
FONT_SIDEBAR: Final[tuple[str, int]] = (FONT_FAMILY, 14)
FONT_SIDEBAR_ACTIVE: Final[tuple[str, int, str]] = (FONT_FAMILY, 14, "bold")
FONT_LABEL: Final[tuple[str, int, str]] = (FONT_FAMILY, 11, "bold")
FONT_SMALL: Final[tuple[str, int]] = (FONT_FAMILY, 11)
FONT_PRICE: Final[tuple[str, int, str]] = (FONT_FAMILY, 16, "bold")
FONT_BUTTON: Final[tuple[str, int, str]] = (FONT_FAMILY, 13, "bold")

# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

SIDEBAR_WIDTH: Final[int] = 240
MAIN_WINDOW_WIDTH: Final[int] = 1200
MAIN_WINDOW_HEIGHT: Final[int] = 780
MIN_WINDOW_WIDTH: Final[int] = 900
MIN_WINDOW_HEIGHT: Final[int] = 560
CORNER_RADIUS: Final[int] = 8
INPUT_HEIGHT: Final[int] = 38
PADDING_SM: Final[int] = 8
PADDING_MD: Final[int] = 16
PADDING_LG: Final[int] = 24
