# backend/tindahan/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/tindahan.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///tindahan.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Business day boundaries (wallet open/close, day-closed sale gate)
    STORE_TIMEZONE = os.environ.get("STORE_TIMEZONE", "Asia/Manila")

    # Counter document used for human-facing receipt numbers
    RECEIPT_COUNTER_NAME = os.environ.get("RECEIPT_COUNTER_NAME", "saleReceipt")

    # Stock seeded on items created implicitly by a sale or credit
    NEW_ITEM_DEFAULT_STOCK = int(os.environ.get("NEW_ITEM_DEFAULT_STOCK", "100"))

    TRANSACTION_RETRY_ATTEMPTS = int(os.environ.get("TRANSACTION_RETRY_ATTEMPTS", "3"))

    # Frontend origins allowed to call the API from a browser
    CORS_ALLOWED_ORIGINS = tuple(
        o.strip()
        for o in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,http://localhost:9002,http://127.0.0.1:9002",
        ).split(",")
        if o.strip()
    )
