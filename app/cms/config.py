import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    jwt_secret: str
    jwt_expires_days: int
    env: str
    database_url: str
    log_level: str

    storage_backend: str
    upload_root: str
    s3_endpoint: str
    s3_region: str
    s3_bucket: str
    s3_access_key_id: str
    s3_secret_access_key: str

    admin_email: str
    admin_password: str

    api_rate_limit: str
    ratelimit_enabled: bool
    csrf_enabled: bool
    site_url: str


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getflag(name: str, default: bool) -> bool:
    raw = _getenv(name, "")
    if not raw:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    secret_key = _getenv("SECRET_KEY", "change-me")
    return Settings(
        secret_key=secret_key,
        jwt_secret=_getenv("JWT_SECRET", secret_key),
        jwt_expires_days=int(_getenv("JWT_EXPIRES_DAYS", "7")),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///cms.db"),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
        storage_backend=_getenv("STORAGE_BACKEND", "local"),
        upload_root=_getenv("UPLOAD_ROOT", os.path.join(os.getcwd(), "uploads")),
        s3_endpoint=_getenv("S3_ENDPOINT", ""),
        s3_region=_getenv("S3_REGION", "nyc3"),
        s3_bucket=_getenv("S3_BUCKET", ""),
        s3_access_key_id=_getenv("S3_ACCESS_KEY_ID", ""),
        s3_secret_access_key=_getenv("S3_SECRET_ACCESS_KEY", ""),
        admin_email=_getenv("ADMIN_EMAIL", "admin@example.com").lower(),
        admin_password=os.environ.get("ADMIN_PASSWORD") or "change-me",
        api_rate_limit=_getenv("API_RATE_LIMIT", "100 per 15 minutes"),
        ratelimit_enabled=_getflag("RATELIMIT_ENABLED", True),
        csrf_enabled=_getflag("CSRF_ENABLED", True),
        site_url=_getenv("SITE_URL", "").rstrip("/"),
    )


def load_config() -> dict:
    s = load_settings()
    is_production = s.env in ("prod", "production")
    return {
        "SECRET_KEY": s.secret_key,
        "JWT_SECRET": s.jwt_secret,
        "JWT_EXPIRES_DAYS": s.jwt_expires_days,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "LOG_LEVEL": s.log_level,
        "STORAGE_BACKEND": s.storage_backend,
        "UPLOAD_ROOT": s.upload_root,
        "S3_ENDPOINT": s.s3_endpoint,
        "S3_REGION": s.s3_region,
        "S3_BUCKET": s.s3_bucket,
        "S3_ACCESS_KEY_ID": s.s3_access_key_id,
        "S3_SECRET_ACCESS_KEY": s.s3_secret_access_key,
        "ADMIN_EMAIL": s.admin_email,
        "ADMIN_PASSWORD": s.admin_password,
        "API_RATE_LIMIT": s.api_rate_limit,
        "RATELIMIT_ENABLED": s.ratelimit_enabled,
        "CSRF_ENABLED": s.csrf_enabled,
        "SITE_URL": s.site_url,
        # security defaults
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": is_production,  # Require HTTPS in production
        "AUTH_COOKIE_SECURE": is_production,
        # uploads are capped per route (10MB media, 20MB documents)
        "MAX_CONTENT_LENGTH": 25 * 1024 * 1024,
    }
