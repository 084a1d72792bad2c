import json
import logging
import re

logger = logging.getLogger(__name__)

_ARRAY_RE = re.compile(r"\[.*\]", re.S)


def clean_json_response(raw: str) -> str:
    """Strip markdown code fences and whitespace from an LLM JSON response."""
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        if text.endswith("```"):
            text = text[:-3]
        text = text.rsplit("```", 1)[0]
    return text.strip()


def extract_json_array(raw: str) -> list | None:
    """Return the outermost JSON array embedded in an LLM reply, or None."""
    match = _ARRAY_RE.search(clean_json_response(raw))
    if not match:
        return None
    try:
        value = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.warning("Could not parse JSON array from LLM reply: %.200s", raw)
        return None
    return value if isinstance(value, list) else None
