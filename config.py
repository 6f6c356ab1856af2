# config.py
"""
Environment configuration for the RentEase backend.

Values are read once from the process environment (and a local .env file)
and exposed as module-level constants.
"""
import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

# Database
DB_SERVER = os.getenv("DB_SERVER")
DB_PORT = os.getenv("DB_PORT", "1433")
DB_USER = os.getenv("DB_USER")
DB_PASS = os.getenv("DB_PASS")
DB_NAME = os.getenv("DB_NAME")
DATABASE_URL = os.getenv("DATABASE_URL")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# HTTP
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
PORT = int(os.getenv("PORT", "10000"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Email (Brevo)
BREVO_API_KEY = os.getenv("BREVO_API_KEY")
EMAIL_SENDER_NAME = os.getenv("EMAIL_SENDER_NAME", "RentEase")
EMAIL_SENDER_ADDRESS = os.getenv("EMAIL_SENDER_ADDRESS", "noreply@rentease.app")
APP_URL = os.getenv("APP_URL", "http://localhost:3000")

# Azure Blob Storage
AZURE_STORAGE_ACCOUNT = os.getenv("AZURE_STORAGE_ACCOUNT")
AZURE_STORAGE_KEY = os.getenv("AZURE_STORAGE_KEY")
LEASE_DOCUMENT_CONTAINER = os.getenv("LEASE_DOCUMENT_CONTAINER", "lease-documents")
MAINTENANCE_IMAGE_CONTAINER = os.getenv("MAINTENANCE_IMAGE_CONTAINER", "maintenance-images")

# Exchange rates
EXCHANGE_RATE_URL = os.getenv("EXCHANGE_RATE_URL", "https://api.exchangerate-api.com/v4/latest/{base}")
EXCHANGE_RATE_TTL_SECONDS = int(os.getenv("EXCHANGE_RATE_TTL_SECONDS", "3600"))

# Business
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "ZMW")
COMPANY_NAME = os.getenv("COMPANY_NAME", "RentEase")
DASHBOARD_CACHE_TTL_SECONDS = int(os.getenv("DASHBOARD_CACHE_TTL_SECONDS", "300"))


def setup_logging() -> None:
     """Configure the root logger for the API process and the jobs CLI."""
     logging.basicConfig(
          level=getattr(logging, LOG_LEVEL, logging.INFO),
          format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
          datefmt="%Y-%m-%dT%H:%M:%S",
          handlers=[logging.StreamHandler(sys.stdout)],
          force=True,
     )
     logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
     logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
