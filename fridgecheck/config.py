from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    anthropic_api_key: str = ""
    database_url: str = "sqlite:///fridgecheck.db"

    model: str = "claude-sonnet-4-5-20250929"
    anthropic_base_url: str = "https://api.anthropic.com"

    # Anthropic API timeout settings (seconds)
    anthropic_timeout: int = 180
    anthropic_connect_timeout: int = 10

    # Token budgets per request
    analysis_max_tokens: int = 2048
    recipe_max_tokens: int = 4096

    # Image preprocessing
    max_image_dimension: int = 1536
    jpeg_quality: float = 0.6  # 0.0-1.0

    default_serving_size: int = 2

    log_level: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
