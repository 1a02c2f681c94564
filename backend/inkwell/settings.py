from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Inference server (Ollama) launched and supervised by the API process
	ollama_command: str = Field(default="ollama serve", validation_alias="OLLAMA_COMMAND")
	ollama_base_url: str = Field(default="http://localhost:11434", validation_alias="OLLAMA_BASE_URL")
	# Model preloaded at boot and used for question generation
	ollama_model: str = Field(default="mistral", validation_alias="OLLAMA_MODEL")
	ollama_timeout_seconds: float = Field(default=120.0, validation_alias="OLLAMA_TIMEOUT_SECONDS")

	# Boot-time readiness polling
	readiness_attempts: int = Field(default=10, validation_alias="READINESS_ATTEMPTS")
	readiness_interval_seconds: float = Field(default=2.0, validation_alias="READINESS_INTERVAL_SECONDS")

	questions_per_assessment: int = Field(default=5, validation_alias="QUESTIONS_PER_ASSESSMENT")

	# Auth configuration
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=120, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# Where the API listens
	host: str = Field(default="0.0.0.0", validation_alias="HOST")
	port: int = Field(default=8080, validation_alias="PORT")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	@property
	def ollama_generate_url(self) -> str:
		return self.ollama_base_url.rstrip("/") + "/api/generate"

settings = Settings()
