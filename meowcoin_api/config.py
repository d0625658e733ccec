from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("error", "warn", "info", "debug")


class Settings(BaseSettings):
    # Meowcoin Core RPC
    rpc_host: str = "127.0.0.1"
    rpc_port: int = 8332
    rpc_user: str = ""  # Empty means unset; every RPC call fails with ConfigError
    rpc_pass: str = ""
    rpc_timeout_seconds: float = 30.0

    # Cache
    cache_ttl_ms: int = 60000

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: str = "*"  # Comma-separated

    # Logging
    log_level: str = "info"  # error, warn, info, debug
    log_dir: str = "logs"  # Empty disables log files

    # Mining statistics
    mining_window_minutes: int = 60
    mining_scan_depth: int = 180  # ~3h of blocks at the 1 minute target spacing

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        v = v.strip().lower()
        if v == "warning":
            v = "warn"
        if v not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {LOG_LEVELS}")
        return v

    @field_validator("mining_window_minutes", "mining_scan_depth")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be greater than 0")
        return v

    @property
    def rpc_url(self) -> str:
        return f"http://{self.rpc_host}:{self.rpc_port}"

    def get_cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)


settings = Settings()
