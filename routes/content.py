from fastapi import APIRouter
from pydantic import BaseModel

from generics import TimedLabel, response_builder, timer
from lessons import GenerationRequest, generate_content, parse_domain_response
import logger


class ParseBody(BaseModel):
    raw: str = ""
    request: GenerationRequest


class GenerateBody(GenerationRequest):
    model: str | None = None


content_router = APIRouter(prefix="/content", tags=["content"])


def _record_payload(record) -> dict:
    return {
        "record": record.model_dump(mode="json", by_alias=True),
        "trace": record.trace.model_dump(mode="json") if record.trace else None,
    }


@content_router.post("/parse")
def parse_content(body: ParseBody):
    with timer(TimedLabel.PARSE_REQUEST):
        record = parse_domain_response(body.raw, body.request)
    return response_builder(
        success=True,
        message=f"Parsed {record.content_type} via {record.trace.path.value}",
        count=len(record.units()),
        errors=len(record.trace.defaulted_fields),
        statusCode=200,
        data=_record_payload(record),
    )


@content_router.post("/generate")
async def generate(body: GenerateBody):
    request = GenerationRequest.model_validate(body.model_dump(exclude={"model"}))
    try:
        with timer(TimedLabel.GENERATE_REQUEST):
            record = await generate_content(request, model=body.model)
    except RuntimeError as e:
        logger.saveToLog(f"[generate] Upstream generation failed: {e}", "ERROR")
        return response_builder(
            success=False,
            message=str(e),
            statusCode=502,
        )
    except FileNotFoundError as e:
        logger.saveToLog(f"[generate] {e}", "ERROR")
        return response_builder(
            success=False,
            message="Generation prompt is not configured on this server.",
            statusCode=500,
        )
    return response_builder(
        success=True,
        message=f"Generated {record.content_type}",
        count=len(record.units()),
        errors=len(record.trace.defaulted_fields),
        statusCode=201,
        data=_record_payload(record),
    )
