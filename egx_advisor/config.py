from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "EGX_", "env_file": ".env", "env_file_encoding": "utf-8"}

    environment: str = Field(default="development", pattern=r"^(development|production)$")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    cors_origins: str = Field(default="http://localhost:8081,http://localhost:3000")

    llm_provider: str = Field(default="openai", pattern=r"^(openai|anthropic)$")
    llm_model: str = Field(default="gpt-4o-mini")
    llm_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    llm_max_tokens: int = Field(default=4096, gt=0)
    # Checked first; the provider-specific key is the second accepted name.
    llm_api_key: str = Field(default="")
    openai_api_key: str = Field(default="")
    anthropic_api_key: str = Field(default="")

    eodhd_api_token: str = Field(default="")
    eodhd_base_url: str = Field(default="https://eodhd.com/api")
    eodhd_fundamentals_enabled: bool = Field(default=False)
    http_timeout: float = Field(default=10.0, gt=0)

    cache_dir: str = Field(default=".cache/egx")
    cache_ttl_hours: float = Field(default=24.0, gt=0)
    history_path: str = Field(default=".data/recommendation_history.json")

    risk_free_rate: float = Field(default=0.10)
    batch_limit: int = Field(default=20, gt=0)

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def api_key_for(self, provider: str) -> str:
        """Return the first non-empty LLM key accepted for ``provider``."""
        provider_keys = {
            "openai": self.openai_api_key,
            "anthropic": self.anthropic_api_key,
        }
        return self.llm_api_key or provider_keys.get(provider, "")


settings = Settings()
