from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="QR_", env_file=".env", extra="ignore")

    storage_path: str = Field(default="scan_log.json", description="JSON persistence file for decoded scans")
    default_level: str = Field(default="L", description="Error correction level when a request gives none")
    default_scale: int = Field(default=10, ge=1, le=64, description="Pixels per QR module")
    max_scan_history: int = Field(default=500, ge=1, description="Oldest scans are dropped past this")
    log_level: str = Field(default="INFO")

settings = Settings()
