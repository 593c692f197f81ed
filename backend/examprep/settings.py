from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field

class Settings(BaseSettings):
	# Upstream generation service (any OpenAI-compatible chat completions endpoint)
	llm_api_key: str | None = Field(default=None, validation_alias=AliasChoices("LLM_API_KEY", "DEEPSEEK_API_KEY"))
	llm_base_url: str = Field(default="https://api.deepseek.com/v1/chat/completions", validation_alias="LLM_BASE_URL")
	llm_model: str = Field(default="deepseek-chat", validation_alias="LLM_MODEL")
	llm_timeout_seconds: float = Field(default=30.0, gt=0, validation_alias="LLM_TIMEOUT_SECONDS")
	llm_probe_timeout_seconds: float = Field(default=10.0, gt=0, validation_alias="LLM_PROBE_TIMEOUT_SECONDS")
	probe_on_startup: bool = Field(default=True, validation_alias="PROBE_ON_STARTUP")

	# Admission gate (fixed window per client address)
	rate_limit_quota: int = Field(default=100, ge=1, validation_alias="RATE_LIMIT_QUOTA")
	rate_limit_window_seconds: float = Field(default=60.0, gt=0, validation_alias="RATE_LIMIT_WINDOW_SECONDS")
	# Only enable behind a proxy that overwrites X-Forwarded-For
	trust_forwarded_for: bool = Field(default=False, validation_alias="TRUST_FORWARDED_FOR")

	# Database (optional; unset means memory-only mode)
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# Server
	host: str = Field(default="0.0.0.0", validation_alias="HOST")
	port: int = Field(default=5000, validation_alias="PORT")
	cors_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

	@property
	def cors_origin_list(self) -> list[str]:
		return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

settings = Settings()
