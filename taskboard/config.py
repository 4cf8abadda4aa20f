from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./taskboard.sqlite"
    app_env: str = "dev"
    timezone: str = "UTC"  # IANA name used to resolve "today"/"tomorrow" on quick add
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", case_sensitive=False)


settings = Settings()
