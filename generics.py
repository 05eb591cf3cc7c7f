import enum
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

from fastapi.responses import JSONResponse

import logger


def valid_http(statusCode):
    if not isinstance(statusCode, int):
        return False
    return 100 <= statusCode <= 599


def response_builder(
    *,
    success: bool,
    message: str,
    count: int | None = None,
    errors: int | None = None,
    statusCode: int = 200,
    data: dict | None = None
):
    status = statusCode
    if not (valid_http(statusCode)):
        status = 500

    return JSONResponse(
        {"success": success, "message": message, "amount": count, "errors": errors, "data": data},
        status_code=status,
    )


class TimedLabel(enum.Enum):
    CHAT_COMPLETION = "chat_completion"
    PARSE_REQUEST = "parse_api"
    GENERATE_REQUEST = "generate_api"


@contextmanager
def timer(label: TimedLabel):
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.saveToLog(f"[timer] {label.value} took {elapsed:.3f}s", "DEBUG")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_record_id() -> str:
    return uuid.uuid4().hex[:12]
