import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def require_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not str(value).strip():
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _as_int(value: str | None, default: int, *, minimum: int = 1) -> int:
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return max(minimum, parsed)


@dataclass(frozen=True)
class AppSettings:
    log_file: str
    log_level: str
    log_to_stdout: bool
    max_repair_attempts: int
    max_nesting_depth: int


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings(
        log_file=os.getenv("LOG_FILE", "logs/log.txt"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_to_stdout=_as_bool(os.getenv("LOG_TO_STDOUT"), True),
        max_repair_attempts=_as_int(os.getenv("MAX_REPAIR_ATTEMPTS"), 5),
        max_nesting_depth=_as_int(os.getenv("MAX_NESTING_DEPTH"), 64),
    )
