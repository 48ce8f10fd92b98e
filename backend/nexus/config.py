# Overview: Environment-driven application configuration.
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///nexus.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Retailer assigned to orders that reach storage without one
    DEFAULT_RETAILER_ID = os.environ.get(
        "DEFAULT_RETAILER_ID", "550e8400-e29b-41d4-a716-446655440000"
    )

    SESSION_ABSOLUTE_TIMEOUT_HOURS = int(os.environ.get("SESSION_ABSOLUTE_TIMEOUT_HOURS", "24"))
    SESSION_IDLE_TIMEOUT_MINUTES = int(os.environ.get("SESSION_IDLE_TIMEOUT_MINUTES", "120"))

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Recent-orders feed kept in memory by the order store
    RECENT_ORDERS_LIMIT = int(os.environ.get("RECENT_ORDERS_LIMIT", "50"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
