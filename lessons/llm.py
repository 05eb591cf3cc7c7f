import asyncio

from generics import TimedLabel, timer

import logger

from .settings import DEFAULT_MODEL, MAX_TOKENS, TEMPERATURE, get_client


def _summarize_for_log(text: str, max_chars: int = 600) -> str:
    cleaned = " ".join((text or "").split())
    if len(cleaned) <= max_chars:
        return cleaned
    return f"{cleaned[:max_chars]}... [truncated {len(cleaned) - max_chars} chars]"


async def run_agent_async(
    *,
    system_prompt: str,
    user_prompt: str,
    model: str = DEFAULT_MODEL,
    stage: str = "unknown",
) -> str:
    model = model or DEFAULT_MODEL
    client = get_client()
    with timer(TimedLabel.CHAT_COMPLETION):
        try:
            response = await asyncio.to_thread(
                client.chat.completions.create,
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=TEMPERATURE,
                max_tokens=MAX_TOKENS,
            )
        except Exception as e:
            logger.saveToLog(f"[run_agent_async] completion call failed: {e}", "ERROR")
            raise RuntimeError("Model completion call failed") from e

    choice = response.choices[0]
    content = choice.message.content or ""
    usage = response.usage
    logger.saveToLog(
        (
            "Completion call succeeded. "
            f"stage={stage} "
            f"model={model} "
            f"tokens={usage.total_tokens if usage else 'n/a'} "
            f"finish_reason={choice.finish_reason} "
            f"prompt_chars={len(system_prompt or '') + len(user_prompt or '')} "
            f"response_chars={len(content)} "
            f"response_preview={_summarize_for_log(content, 180)}"
        ),
        "INFO",
    )
    if choice.finish_reason == "length":
        logger.saveToLog(
            f"[run_agent_async] Response hit max_tokens={MAX_TOKENS} and is likely truncated (stage={stage})",
            "WARNING",
        )
    return content
