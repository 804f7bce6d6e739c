import os
from dataclasses import dataclass


def _number(name: str, default: str, convert):
    raw = os.environ.get(name, default)
    try:
        return convert(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a {convert.__name__}, got {raw!r}") from exc


@dataclass(frozen=True)
class Config:
    database_url: str | None = None
    log_format: str = "json"
    log_level: str = "INFO"
    default_seed: int = 0
    sync_url: str | None = None
    sync_api_key: str | None = None
    sync_timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls) -> "Config":
        log_format = os.environ.get("MESOPLAN_LOG_FORMAT", "json")
        if log_format not in ("json", "text"):
            raise RuntimeError(f"MESOPLAN_LOG_FORMAT must be 'json' or 'text', got {log_format!r}")

        return cls(
            database_url=os.environ.get("MESOPLAN_DATABASE_URL") or os.environ.get("DATABASE_URL"),
            log_format=log_format,
            log_level=os.environ.get("MESOPLAN_LOG_LEVEL", "INFO").upper(),
            default_seed=_number("MESOPLAN_DEFAULT_SEED", "0", int),
            sync_url=os.environ.get("MESOPLAN_SYNC_URL") or None,
            sync_api_key=os.environ.get("MESOPLAN_SYNC_API_KEY") or None,
            sync_timeout_seconds=_number("MESOPLAN_SYNC_TIMEOUT", "30.0", float),
        )

    @property
    def sync_enabled(self) -> bool:
        return bool(self.sync_url and self.sync_api_key)
