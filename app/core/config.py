# app/core/config.py

import os
from dotenv import load_dotenv

load_dotenv()

APP_ENV = os.getenv("APP_ENV", "development")
IS_PRODUCTION = APP_ENV == "production"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_HOST = os.getenv("DB_HOST")
DB_PORT = os.getenv("DB_PORT")
DB_NAME = os.getenv("DB_NAME")
if DB_HOST and DB_NAME:
    DATABASE_URL = f"postgresql+psycopg2://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}?sslmode=require"
else:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./app_settings.db")

# "sql" talks to the database directly, "rest" goes through the hosted REST interface
SETTINGS_BACKEND = os.getenv("SETTINGS_BACKEND", "sql")
SETTINGS_API_URL = os.getenv("SETTINGS_API_URL", "")
SETTINGS_API_KEY = os.getenv("SETTINGS_API_KEY", "")
SETTINGS_API_TIMEOUT = float(os.getenv("SETTINGS_API_TIMEOUT", "10"))

JWT_SECRET = os.getenv("JWT_SECRET")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
AUTH_DISABLED = os.getenv("AUTH_DISABLED", "false").lower() in ("1", "true", "yes")

DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "EUR")
CURRENCY_SETTING_KEY = os.getenv("CURRENCY_SETTING_KEY", "currency")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:8080").split(",")
    if origin.strip()
]
