import os
from functools import lru_cache

from dotenv import load_dotenv
from openai import OpenAI

from config import _as_int, require_env

load_dotenv()

BASE_URL = os.getenv("OPENAI_BASE_URL") or None
DEFAULT_MODEL = os.getenv("DEFAULT_MODEL", "gpt-4-turbo")
MAX_TOKENS = _as_int(os.getenv("GENERATION_MAX_TOKENS"), 4000)


def _as_float(value: str | None, default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        return float(value.strip())
    except ValueError:
        return default


TEMPERATURE = _as_float(os.getenv("GENERATION_TEMPERATURE"), 0.7)


@lru_cache(maxsize=1)
def get_client() -> OpenAI:
    return OpenAI(base_url=BASE_URL, api_key=require_env("OPENAI_API_KEY"))
