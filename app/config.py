from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite+pysqlite:///./invoices.db"
    invoices_path: str = "/dashboard/invoices"
    items_per_page: int = 6
    log_level: str = "INFO"
    debug: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_prefix="")


settings = Settings()
