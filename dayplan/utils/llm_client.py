from typing import Optional

from openai import OpenAI

from dayplan.core.config import OPENAI_API_KEY

# --- Sync Client (created on first use so stub-only deployments need no key) ---
_sync_client: Optional[OpenAI] = None


def get_sync_client() -> OpenAI:
    global _sync_client
    if _sync_client is None:
        if not OPENAI_API_KEY:
            raise RuntimeError("❌ OPENAI_API_KEY environment variable is not set.")
        _sync_client = OpenAI(api_key=OPENAI_API_KEY)
    return _sync_client


# --- JSON-mode Task Runner with Token Tracking ---
def run_json_task(
    prompt: str,
    system: str,
    model: str,
    temperature: float,
    max_tokens: int,
    client: Optional[OpenAI] = None,
) -> tuple[str, int, int]:
    """
    Runs one chat completion constrained to a single JSON object.

    Returns ``(content, prompt_tokens, completion_tokens)``; token counts are 0
    when the API does not report usage.
    """
    client = client or get_sync_client()
    response = client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": system},
            {"role": "user", "content": prompt}
        ],
        temperature=temperature,
        max_tokens=max_tokens,
        response_format={"type": "json_object"},
    )
    content = ""
    if response.choices:
        content = (response.choices[0].message.content or "").strip()
    usage = getattr(response, "usage", None)
    prompt_tokens = getattr(usage, "prompt_tokens", None) or 0
    completion_tokens = getattr(usage, "completion_tokens", None) or 0
    return content, prompt_tokens, completion_tokens
