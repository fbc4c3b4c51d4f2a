import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    SUPABASE_ENABLED: bool = os.getenv("SUPABASE_ENABLED", "true").lower() in ("1", "true", "yes")
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "https://YOUR_PROJECT_REF.supabase.co")
    # public key for customers (anon / publishable)
    SUPABASE_PUBLISHABLE_KEY: str = os.getenv("SUPABASE_PUBLISHABLE_KEY", "YOUR_PUBLISHABLE_KEY")
    # service role key, full access to the database, admin only
    SUPABASE_SECRET_KEY: str = os.getenv("SUPABASE_SECRET_KEY", "YOUR_SECRET_KEY")
    REMOTE_TIMEOUT: float = float(os.getenv("REMOTE_TIMEOUT", "5.0"))
    MIRROR_DATABASE_URL: str = os.getenv("MIRROR_DATABASE_URL", "sqlite+aiosqlite:///./logitrack.db")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "123")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR: str = os.getenv("LOG_DIR", "")

    class Config:
        env_file = ".env"

settings = Settings()
