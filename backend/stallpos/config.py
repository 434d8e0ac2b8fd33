# backend/stallpos/config.py
from __future__ import annotations
import os


class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///stallpos.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Calendar day used for token numbering, dashboards and report ranges
    STALL_TIMEZONE = os.environ.get("STALL_TIMEZONE", "UTC")

    # Stored quantity for items with stock_type="unlimited"
    UNLIMITED_STOCK_QTY = int(os.environ.get("UNLIMITED_STOCK_QTY", "9999"))

    LOW_STOCK_THRESHOLD = int(os.environ.get("LOW_STOCK_THRESHOLD", "10"))
    COMPLETED_ORDERS_LIMIT = int(os.environ.get("COMPLETED_ORDERS_LIMIT", "10"))

    STORAGE_RETRY_ATTEMPTS = int(os.environ.get("STORAGE_RETRY_ATTEMPTS", "3"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
