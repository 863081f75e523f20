# cartsync/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

API_URL = os.getenv("API_URL", "http://localhost:3001/api")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", 10))
# 1 = single attempt, no retry
REMOTE_RETRY_ATTEMPTS = int(os.getenv("REMOTE_RETRY_ATTEMPTS", 1))

CART_STORAGE_URL = os.getenv("CART_STORAGE_URL", "sqlite:///./cartsync.db")
CART_STORAGE_NAME = os.getenv("CART_STORAGE_NAME", "ecommerce-cart")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
