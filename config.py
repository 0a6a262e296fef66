"""
Runtime configuration for the Travel Journal API.

Values come from the environment (optionally a local .env file) and are read
once at import time.
"""
import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "travel_journal")

AUTH_SECRET = os.getenv("AUTH_SECRET", "change-me")
TOKEN_TTL_MINUTES = int(os.getenv("TOKEN_TTL_MINUTES", str(60 * 24 * 7)))  # 7 days

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "8000"))

# Result caps for the search endpoints
SEARCH_LIMIT = 50
USER_SEARCH_LIMIT = 20
