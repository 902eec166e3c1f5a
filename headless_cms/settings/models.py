from pydantic import BaseModel, ConfigDict, Field, field_validator

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class DatabaseSettings(BaseModel):
    path: str = "./data/cms.db"
    migrations_dir: str = "migrations"


class PluginSettings(BaseModel):
    directories: list[str] = Field(default_factory=list)


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    @field_validator("level")
    @classmethod
    def known_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _LOG_LEVELS:
            raise ValueError(f"unknown log level '{value}'")
        return upper


class ApiSettings(BaseModel):
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    default_page_size: int = Field(default=20, ge=1, le=200)


class Settings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    plugins: PluginSettings = Field(default_factory=PluginSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
