from typing import Optional, List, Literal

from pydantic import Field, AliasChoices, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_DEFAULT_DEV_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


class Settings(BaseSettings):
    # Allow comma-separated env vars for list fields like ALLOWED_ORIGINS
    model_config = SettingsConfigDict(env_file=".env", env_parse_delimiter=",", extra="ignore")
    PROJECT_NAME: str = "Wizy Products API"
    VERSION: str = "0.0.1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # CORS
    # NOTE: Pydantic Settings treats list fields as "complex" env values (expects JSON).
    # We accept either a JSON array or a comma-separated string by allowing `str` here
    # and normalizing via the field validator below.
    ALLOWED_ORIGINS: List[str] | str = Field(default_factory=lambda: list(_DEFAULT_DEV_ORIGINS))

    # OpenAI-compatible chat completions provider
    OPENAI_API_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "OPENAI_KEY"),
    )
    OPENAI_MODEL: str = "gpt-3.5-turbo"
    OPENAI_BASE_URL: Optional[str] = None
    LLM_REQUEST_TIMEOUT: int = 60  # seconds

    # Function calling
    TOOL_CALL_MAX_ROUNDS: int = Field(default=5, description="Maximum tool-execution rounds per request")
    TOOL_SCHEMA_MODE: Literal["per_tool", "shared"] = "per_tool"
    TOOL_VALIDATION_FAILURE_POLICY: Literal["propagate", "return_empty"] = "propagate"

    # Open Exchange Rates
    EXCHANGE_RATES_API: str = Field(
        default="https://openexchangerates.org/api",
        validation_alias=AliasChoices("EXCHANGE_RATES_API", "EXCHANGES_RATE_API"),
    )
    EXCHANGE_RATES_APP_ID: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("EXCHANGE_RATES_APP_ID", "EXCHANGES_RATE_ID"),
    )
    EXCHANGE_RATES_TIMEOUT: float = 10.0

    # Product catalog
    PRODUCTS_PATH: str = "data/products_list.csv"
    PRODUCT_SEARCH_CONSTRAINTS: str = "Must select 2 items."

    def model_post_init(self, __context):
        """
        Validate configuration on startup. In production, fail hard when the
        provider credentials are missing or debug mode is left on.
        """
        is_prod = self.ENVIRONMENT.lower() == "production"
        errors = []

        if self.TOOL_CALL_MAX_ROUNDS < 1:
            errors.append("TOOL_CALL_MAX_ROUNDS must be at least 1.")

        if is_prod and not self.OPENAI_API_KEY:
            errors.append("OPENAI_API_KEY (or OPENAI_KEY) is required in production.")

        if is_prod and not self.EXCHANGE_RATES_APP_ID:
            errors.append("EXCHANGE_RATES_APP_ID (or EXCHANGES_RATE_ID) is required in production.")

        if is_prod and self.DEBUG:
            errors.append("DEBUG must be False in production.")

        # Fail hard with all errors at once for easier debugging
        if errors:
            error_msg = "Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            raise ValueError(error_msg)

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value

settings = Settings()
