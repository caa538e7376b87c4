from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "LittleLemon"
    environment: str = "local"
    log_level: str = "INFO"
    db_path: str = "storage/little_lemon.sqlite3"
    db_auto_create: bool = True
    search_debounce_seconds: float = 0.5
    sentry_dsn: str | None = None
    sentry_environment: str | None = None

    # Remote menu settings
    menu_url: str = (
        "https://raw.githubusercontent.com/Meta-Mobile-Developer-PC/"
        "Working-With-Data-API/main/menu.json"
    )
    menu_image_base_url: str = (
        "https://github.com/Meta-Mobile-Developer-PC/"
        "Working-With-Data-API/blob/main/images/"
    )
    menu_fetch_timeout: float = 10.0


settings = Settings()
