import re
import json

from core.errors import UpstreamGenerationError

_FENCED = re.compile(r'```(?:json)?\s*({[\s\S]*?})\s*```')


def extract_clean_json(raw: str | dict, stage: str = "parse") -> dict:
    """Pull the first JSON object out of an LLM reply.

    Accepts a bare object, a ```json fenced block, or an object wrapped in
    chatter.  Anything else raises UpstreamGenerationError.
    """
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        raise UpstreamGenerationError(stage, "empty response", str(raw or ""))

    candidates = []
    match = _FENCED.search(raw)
    if match:
        candidates.append(match.group(1))
    candidates.append(raw.strip())
    start, end = raw.find("{"), raw.rfind("}")
    if 0 <= start < end:
        candidates.append(raw[start:end + 1])

    for text in candidates:
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            continue
        # some models double-encode the object as a JSON string
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError:
                continue
        if isinstance(data, dict):
            return data

    raise UpstreamGenerationError(stage, "no JSON object found in response", raw)
