"""
Utility functions for TripSplit application
"""
from __future__ import annotations
import math
import os
from datetime import date, datetime
from typing import Optional

APP_NAME = "TripSplit"
HOME_ENV = "TRIPSPLIT_HOME"


def today_str() -> str:
    """Get today's date as ISO string"""
    return date.today().isoformat()


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string"""
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def safe_float(x: str, default: Optional[float] = 0.0) -> Optional[float]:
    """Convert string to float safely, returning default on error"""
    try:
        return float(x)
    except (TypeError, ValueError):
        return default


def format_amount(amount: float, currency: str = "") -> str:
    """Format amount for display, rounded half up to whole units"""
    return f"{math.floor(amount + 0.5):,}{currency}"


def app_dir() -> str:
    """
    Get application data directory.
    $TRIPSPLIT_HOME when set, otherwise ~/Library/Application Support/TripSplit.
    Creates directory if it doesn't exist.
    """
    path = os.environ.get(HOME_ENV)
    if not path:
        base = os.path.expanduser("~/Library/Application Support")
        path = os.path.join(base, APP_NAME)
    os.makedirs(path, exist_ok=True)
    return path
