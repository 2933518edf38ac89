"""
Purpose: Central runtime configuration (single source of truth).
What it does:

Reads tunables from the environment (optionally a .env file):

TOOKAN_BASE_URL=https://api.tookanapp.com
TOOKAN_API_KEY=...
TOOKAN_TIMEOUT_SECONDS=5
TOOKAN_MAX_RETRIES=3
TOOKAN_BACKOFF_SECONDS=0.25
TOOKAN_INBOUND_API_KEY=...
TRACKING_BASE_URL=https://track.example.com
ALERT_WORKERS=2

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class FleetSettings:
    """
    Tunables for the outbound Tookan client, tracking links and alert delivery.
    """

    # --- Outbound Tookan calls ---
    tookan_base_url: Optional[str] = None
    tookan_api_key: Optional[str] = None
    tookan_timeout_seconds: float = 5.0
    # Total attempts, including the first one.
    tookan_max_retries: int = 3
    # Sleep before retry N is backoff * 2**N.
    tookan_backoff_seconds: float = 0.25

    # --- Inbound Tookan calls ---
    # When set, inbound calls must present this api_key.
    tookan_inbound_api_key: Optional[str] = None
    tracking_base_url: str = "https://track.example.com"

    # --- Alerts ---
    alert_workers: int = 2

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.tookan_timeout_seconds <= 0:
            raise ValueError("tookan_timeout_seconds must be > 0")

        if self.tookan_max_retries < 1:
            raise ValueError("tookan_max_retries must be >= 1")

        if self.tookan_backoff_seconds < 0:
            raise ValueError("tookan_backoff_seconds must be >= 0")

        if self.alert_workers < 1:
            raise ValueError("alert_workers must be >= 1")


def load_settings() -> FleetSettings:
    """
    Build settings from the process environment (after loading .env).
    """
    load_dotenv()
    settings = FleetSettings(
        tookan_base_url=os.getenv("TOOKAN_BASE_URL"),
        tookan_api_key=os.getenv("TOOKAN_API_KEY"),
        tookan_timeout_seconds=float(os.getenv("TOOKAN_TIMEOUT_SECONDS", "5")),
        tookan_max_retries=int(os.getenv("TOOKAN_MAX_RETRIES", "3")),
        tookan_backoff_seconds=float(os.getenv("TOOKAN_BACKOFF_SECONDS", "0.25")),
        tookan_inbound_api_key=os.getenv("TOOKAN_INBOUND_API_KEY"),
        tracking_base_url=os.getenv("TRACKING_BASE_URL", "https://track.example.com"),
        alert_workers=int(os.getenv("ALERT_WORKERS", "2")),
    )
    settings.validate()
    return settings
