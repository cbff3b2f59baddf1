# barbershop/config.py

import os

from dotenv import load_dotenv

load_dotenv()

SECRET_KEY = os.getenv("SECRET_KEY", "change-me-later")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 30))

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./barbershop.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

SLOT_MINUTES = int(os.getenv("SLOT_MINUTES", 30))

# occupancy fetch: attempts after the first one, and the first backoff delay
OCCUPANCY_RETRY_LIMIT = int(os.getenv("OCCUPANCY_RETRY_LIMIT", 3))
OCCUPANCY_RETRY_BASE_DELAY = float(os.getenv("OCCUPANCY_RETRY_BASE_DELAY", 0.2))

# first admin account, created at startup when both are set
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
