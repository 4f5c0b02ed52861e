import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.environ.get("POS_AUTH_CONFIG", os.path.join(ROOT_PATH, "env.yaml"))

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./pos_auth.db")
    API_PREFIX = data.get("API_PREFIX", "/api/v1")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_BACKGROUND_JOBS = bool(data.get("ENABLE_BACKGROUND_JOBS", True))

    # Token signing (access and refresh secrets must differ)
    JWT_SECRET = data.get("JWT_SECRET", "dev-access-secret-change-in-production")
    JWT_REFRESH_SECRET = data.get(
        "JWT_REFRESH_SECRET", "dev-refresh-secret-change-in-production"
    )
    JWT_ISSUER = data.get("JWT_ISSUER", "grocery-pos")
    JWT_AUDIENCE = data.get("JWT_AUDIENCE", "grocery-pos-client")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(data.get("ACCESS_TOKEN_EXPIRE_MINUTES", 120))
    REFRESH_TOKEN_EXPIRE_DAYS = int(data.get("REFRESH_TOKEN_EXPIRE_DAYS", 7))

    # Sessions and identity cache
    SESSION_EXPIRE_DAYS = int(data.get("SESSION_EXPIRE_DAYS", 7))
    SESSION_CLEANUP_INTERVAL_SECONDS = int(data.get("SESSION_CLEANUP_INTERVAL_SECONDS", 300))
    USER_CACHE_TTL_SECONDS = int(data.get("USER_CACHE_TTL_SECONDS", 300))
    USER_CACHE_MAX_ENTRIES = int(data.get("USER_CACHE_MAX_ENTRIES", 1000))

    # Passwords and reset flow
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))
    PASSWORD_MIN_LENGTH = int(data.get("PASSWORD_MIN_LENGTH", 6))
    PASSWORD_RESET_TOKEN_EXPIRE_MINUTES = int(data.get("PASSWORD_RESET_TOKEN_EXPIRE_MINUTES", 15))
    PASSWORD_RESET_RATE_LIMIT_MINUTES = int(data.get("PASSWORD_RESET_RATE_LIMIT_MINUTES", 5))
    PASSWORD_RESET_CLEANUP_INTERVAL_SECONDS = int(
        data.get("PASSWORD_RESET_CLEANUP_INTERVAL_SECONDS", 3600)
    )
    CLIENT_URL = data.get("CLIENT_URL", "http://localhost:5173")

    # Outbound email (dev mode logs instead of sending when SMTP_HOST is empty)
    SMTP_HOST = data.get("SMTP_HOST", "")
    SMTP_PORT = int(data.get("SMTP_PORT", 587))
    SMTP_USER = data.get("SMTP_USER", "")
    SMTP_PASSWORD = data.get("SMTP_PASSWORD", "")
    SMTP_USE_TLS = bool(data.get("SMTP_USE_TLS", True))
    EMAIL_FROM = data.get("EMAIL_FROM", "")
    STORE_NAME = data.get("STORE_NAME", "SmartGrocery")
