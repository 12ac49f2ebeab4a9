import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    APP_NAME: str = "StayBite"
    # Core settings
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key-change-me")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development").lower()
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")

    # Auth & Session
    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "staybite_session")
    SESSION_MAX_AGE_DAYS: int = int(os.getenv("SESSION_MAX_AGE_DAYS", "30"))

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./staybite.db")

    # Object storage: Cloudinary when configured, local bucket directory otherwise
    CLOUDINARY_URL: str = os.getenv("CLOUDINARY_URL", "")
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "./media")
    STORAGE_PUBLIC_URL: str = os.getenv("STORAGE_PUBLIC_URL", f"{BASE_URL}/media").rstrip("/")

    # Upload constraints
    UPLOAD_IMAGE_MAX_MB: int = int(os.getenv("UPLOAD_IMAGE_MAX_MB", "5"))
    UPLOAD_IMAGE_MAX_BYTES: int = UPLOAD_IMAGE_MAX_MB * 1024 * 1024

    # Availability
    AVAILABILITY_HORIZON_DAYS: int = int(os.getenv("AVAILABILITY_HORIZON_DAYS", "30"))
    WEEKEND_PREMIUM: float = float(os.getenv("WEEKEND_PREMIUM", "1.25"))
    FLEXIBLE_MIN_DAYS: int = int(os.getenv("FLEXIBLE_MIN_DAYS", "5"))

    # Featured listings / category counts cache
    FEATURED_CACHE_TTL_SECONDS: int = int(os.getenv("FEATURED_CACHE_TTL_SECONDS", "600"))

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")
    RATE_LIMIT_AUTH: str = os.getenv("RATE_LIMIT_AUTH", "10/minute")

settings = Settings()
