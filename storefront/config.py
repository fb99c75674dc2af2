"""
Application Configuration.

Pydantic Settings model for the FreshCut storefront.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import ClassVar, Optional

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Supabase ---
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")

    # --- Store branding ---
    STORE_NAME: str = "FreshCut Meats"
    STORE_TAGLINE: str = "Farm fresh meat, delivered"
    CURRENCY_SYMBOL: str = "₹"

    # --- Storage ---
    PRODUCT_IMAGE_BUCKET: str = "product-images"
    MAX_IMAGE_SIZE_MB: int = 2
    MAX_IMAGES_PER_PRODUCT: int = 5

    # --- Notifications ---
    ADMIN_NOTIFICATION_EMAIL: str = ""

    # --- Accounts ---
    MIN_RESET_PASSWORD_LENGTH: int = 6

    # Columns accepted by the bulk product import, in template order.
    # ClassVar so pydantic-settings does not read it from the environment.
    PRODUCT_IMPORT_COLUMNS: ClassVar[tuple[str, ...]] = (
        "name",
        "description",
        "price",
        "offer_price",
        "category",
        "stock_quantity",
        "is_active",
        "featured",
        "features",
        "ingredients",
        "offers",
    )

    # --- Logging ---
    LOG_FILE: str = "storefront.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when critical configuration is empty."""
        _log = logging.getLogger("storefront.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found; configuration loaded from "
                "environment variables or defaults."
            )

        if not self.SUPABASE_URL:
            _log.warning(
                "SUPABASE_URL is empty. The storefront cannot reach its "
                "backend and will show empty catalogues."
            )

        if not self.ADMIN_NOTIFICATION_EMAIL:
            _log.info(
                "ADMIN_NOTIFICATION_EMAIL is empty; admin alert emails are disabled."
            )

        return self

    @property
    def max_image_size_bytes(self) -> int:
        return self.MAX_IMAGE_SIZE_MB * 1024 * 1024


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    Uses a check-lock-check pattern so the fast path takes no lock while
    first initialisation stays thread-safe.  Prefer constructor injection
    of ``AppConfig``; this factory serves modules such as the logger that
    are created before the composition root runs.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
