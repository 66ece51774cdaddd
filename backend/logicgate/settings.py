from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
	# External automation webhooks; when unset the local fallback logic is used
	analyze_url: str | None = Field(default=None, validation_alias="N8N_ANALYZE_URL")
	evaluate_url: str | None = Field(default=None, validation_alias="N8N_WEBHOOK_URL")
	# Seconds; 0 waits indefinitely
	gateway_timeout_seconds: float = Field(default=30, validation_alias="GATEWAY_TIMEOUT_SECONDS")

	# Passage catalog
	passages_csv: Path = Field(default=PACKAGE_DIR / "data" / "passages.csv", validation_alias="PASSAGES_CSV")

	# Database
	database_url: str = Field(default="sqlite:///./logicgate.db", validation_alias="DATABASE_URL")
	session_retention_days: int = Field(default=7, validation_alias="SESSION_RETENTION_DAYS")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	@property
	def gateway_timeout(self) -> float | None:
		return self.gateway_timeout_seconds if self.gateway_timeout_seconds > 0 else None


settings = Settings()
