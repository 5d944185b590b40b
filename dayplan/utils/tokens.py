import math

# Rough estimation: 1 token ≈ 4 characters of English text
CHARS_PER_TOKEN = 4

MAX_INPUT_TOKENS = 2000     # system prompt + user prompt
MAX_OUTPUT_TOKENS = 2500


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text or "") / CHARS_PER_TOKEN)
