"""Runtime configuration for the command interpreter."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="MC_INTERPRETER_", env_file=".env", extra="ignore")

    app_name: str = "mc-interpreter"
    log_level: str = "WARNING"
    datapack_path: str | None = Field(
        default=None,
        description="Zip archive or directory loaded when no --datapack option is given.",
    )
    entry_function: str = Field(
        default="main:main",
        description="Function called by the datapack command when --function is omitted.",
    )
    max_function_depth: int = Field(default=64, ge=1)
    colored_output: bool = True
    prompt: str = "> "


settings = Settings()
