# ridr/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RIDR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_env: Literal["dev", "staging", "prod"] = "dev"
    log_level: str = "INFO"
    log_json: bool | None = None  # None = JSON in prod, console elsewhere

    # Plugins configured with skip_tests=True are not registered when set.
    # Resolved by the harness (e.g. RIDR_TEST_MODE=1 in CI), never sniffed.
    test_mode: bool = False

    # HTTP transport
    webhook_path: str = "/webhook"
    enable_request_logging: bool = True

    @property
    def is_production(self) -> bool:
        return self.app_env == "prod"

    @property
    def use_json_logs(self) -> bool:
        if self.log_json is None:
            return self.is_production
        return self.log_json


def warn_on_risky_config(s: "Settings") -> list[str]:
    warnings: list[str] = []

    if s.is_production and s.test_mode:
        warnings.append("prod: test_mode=True (plugins with skip_tests will not be registered).")

    if s.is_production and s.log_level.upper() == "DEBUG":
        warnings.append("prod: log_level=DEBUG (request/response payloads may be logged).")

    if not s.webhook_path.startswith("/"):
        warnings.append(f"webhook_path={s.webhook_path!r} does not start with '/'.")

    return warnings


settings = Settings()
