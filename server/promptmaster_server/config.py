"""Application configuration"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Data files; bundled defaults are used when unset
    optimizer_config_path: str | None = None
    templates_path: str | None = None
    models_path: str | None = None

    # Optional result persistence, e.g. "sqlite:///./promptmaster.db"
    database_url: str | None = None

    # AI-assisted techniques
    technique_timeout_seconds: float = 30.0
    rewrite_model: str | None = None  # defaults to the backend's deployment

    # Azure OpenAI settings
    azure_openai_endpoint: str = ""  # e.g., "https://your-resource.openai.azure.com/"
    azure_openai_api_key: str = ""
    azure_openai_deployment_name: str = "gpt-4o-mini"

    class Config:
        env_file = ".env"
        env_prefix = "PROMPTMASTER_"
        extra = "ignore"


settings = Settings()


def get_settings() -> Settings:
    """Get the Settings instance"""
    return settings
