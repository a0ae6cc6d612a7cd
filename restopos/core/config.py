"""Application configuration."""

from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "restopos API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    log_level: str = getenv("LOG_LEVEL", "INFO")
    database_url: str = getenv("DATABASE_URL", "sqlite:///./restopos.db")
    jwt_secret_key: str = getenv("JWT_SECRET_KEY", "dev-only-change-me-to-a-long-random-secret")
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_minutes: int = int(getenv("JWT_EXPIRE_MINUTES", str(60 * 24)))
    cloudinary_cloud_name: str = getenv("CLOUDINARY_CLOUD_NAME", "")
    cloudinary_api_key: str = getenv("CLOUDINARY_API_KEY", "")
    cloudinary_api_secret: str = getenv("CLOUDINARY_API_SECRET", "")
    image_store_base_url: str = getenv("IMAGE_STORE_BASE_URL", "https://api.cloudinary.com/v1_1")
    image_store_timeout_seconds: float = float(getenv("IMAGE_STORE_TIMEOUT_SECONDS", "10"))
    bill_link_ttl_hours: int = int(getenv("BILL_LINK_TTL_HOURS", "24"))
    bill_reaper_enabled: bool = getenv("BILL_REAPER_ENABLED", "1") == "1"
    bill_reaper_minute: int = int(getenv("BILL_REAPER_MINUTE", "0"))
    order_number_prefix: str = getenv("ORDER_NUMBER_PREFIX", "ORD")
    order_number_width: int = int(getenv("ORDER_NUMBER_WIDTH", "5"))
    loyalty_points_per_amount: int = int(getenv("LOYALTY_POINTS_PER_AMOUNT", "100"))
    business_utc_offset_minutes: int = int(getenv("BUSINESS_UTC_OFFSET_MINUTES", "330"))


settings: Settings = Settings()
