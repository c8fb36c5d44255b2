"""
Application configuration read from the environment.

A local .env file is loaded first so development settings can live next to
the code; real environment variables always take precedence.
"""

import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./demopass.db")
if DATABASE_URL.startswith("postgres://"):
    # Hosted Postgres often hands out postgres://, SQLAlchemy wants postgresql://
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

# Demo pass QR rendering
QR_BOX_SIZE = int(os.getenv("QR_BOX_SIZE", "10"))
QR_BORDER = int(os.getenv("QR_BORDER", "4"))
