import logger
from generics import utcnow

from .llm import run_agent_async
from .models import GenerationRequest
from .parsing import parse_domain_response
from .prompts import build_prompt, load_prompt, prompt_name
from .settings import DEFAULT_MODEL


async def generate_content(request: GenerationRequest, model: str | None = None):
    """Ask the model for one piece of content and parse whatever comes back.

    Upstream API failures surface as RuntimeError; malformed output never
    raises and resolves to a best-effort record instead.
    """
    model = model or DEFAULT_MODEL
    system = load_prompt(prompt_name(request.content_type))
    prompt = build_prompt(request)
    started = utcnow()
    raw = await run_agent_async(
        system_prompt=system,
        user_prompt=prompt,
        model=model,
        stage=f"generate_{request.content_type.name}",
    )
    record = parse_domain_response(raw, request)
    logger.saveToLog(
        f"[generate_content] {request.content_type.value} for subject={request.subject!r} "
        f"model={model} path={record.trace.path.value} partial={record.partial} "
        f"elapsed={(utcnow() - started).total_seconds():.2f}s",
        "INFO",
    )
    return record
