# services/api/settings.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field
from typing import List
from pathlib import Path

class Settings(BaseSettings):
    # Google Sheets settings
    # All three must be set for the Sheets backend to be tried; otherwise we
    # go straight to local JSON files under data_dir.
    google_spreadsheet_id: str = ""
    google_service_account_email: str = ""
    # Env stores usually keep the PEM on one line with literal "\n" escapes
    google_private_key: str = ""

    # Local JSON storage
    data_dir: str = "data"

    # Guestbook reads are capped at this many entries
    guestbook_limit: int = Field(default=10, ge=1)

    # Stored timestamps are rendered in this fixed UTC offset (GMT+7 by default)
    timezone_offset_hours: int = Field(default=7, ge=-12, le=14)

    # CORS settings
    allowed_origins: str = "*"

    # Optional static site (index.html, assets) served after the API routes
    static_dir: str = ""

    log_level: str = "INFO"
    port: int = 8000

    model_config = ConfigDict(
        # Always load .env from the same folder as this settings.py
        env_file=str(Path(__file__).resolve().parent / ".env"),
        extra="ignore",
    )

    def has_sheets_config(self) -> bool:
        """True when spreadsheet id, account email and private key are all non-empty."""
        return bool(
            self.google_spreadsheet_id.strip()
            and self.google_service_account_email.strip()
            and self.resolved_private_key().strip()
        )

    def resolved_private_key(self) -> str:
        """Return the private key with escaped newlines turned into real ones."""
        return self.google_private_key.replace("\\n", "\n")

    def get_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


_settings_instance = None

def get_settings() -> Settings:
    """Singleton pattern for settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
