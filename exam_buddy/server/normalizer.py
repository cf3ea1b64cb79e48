# server/normalizer.py
"""
Turn the model's reply text into JSON we can trust.

Models often wrap JSON in ```json fences or add a sentence of prose
around it. Candidate extraction tries, in order:

  1. the first fenced block (``` or ```json ... ```), wherever it sits;
  2. a leading ``` / ```json marker and trailing ``` trimmed off
     (covers replies whose closing fence got cut);
  3. the trimmed reply as-is.

If the candidate does not parse, the first {...} span of the reply is
tried before giving up with ParseFailure.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from .errors import EmptyResponse, ParseFailure, SchemaViolation

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$")
_OBJECT_SPAN = re.compile(r"\{.*\}", re.S)


def extract_json_text(content: Optional[str]) -> str:
    if content is None or not content.strip():
        raise EmptyResponse("No response from AI")

    m = _FENCED_BLOCK.search(content)
    if m:
        return m.group(1).strip()

    s = content.strip()
    if s.startswith("```"):
        s = _LEADING_FENCE.sub("", s)
        s = _TRAILING_FENCE.sub("", s)
        return s.strip()

    return s


def parse_model_json(content: Optional[str]) -> Any:
    """Parse the model's reply; raises EmptyResponse or ParseFailure."""
    candidate = extract_json_text(content)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as exc:
        first_error = exc

    # Last resort: grab the first {...} span, e.g. "Here you go: {...}",
    # first inside the candidate, then across the whole reply in case the
    # first fence held something other than the JSON.
    if not candidate.lstrip().startswith("{"):
        for text in (candidate, content):
            m = _OBJECT_SPAN.search(text)
            if not m:
                continue
            try:
                return json.loads(m.group(0))
            except json.JSONDecodeError:
                pass

    logger.error("Failed to parse AI response (%s): %s", first_error, content)
    raise ParseFailure("Failed to parse AI response", raw=content, detail=str(first_error))


def _describe(err: ValidationError) -> List[str]:
    problems = []
    for e in err.errors():
        loc = ".".join(str(p) for p in e.get("loc", ()))
        problems.append(f"{loc or '<root>'}: {e.get('msg')}")
    return problems


def normalize_response(content: Optional[str], model_cls: Type[BaseModel]) -> Dict[str, Any]:
    """
    Parse the reply and check it against `model_cls`.

    Returns the parsed object itself (not a re-serialized model) so the
    caller passes through exactly what the model produced.
    """
    data = parse_model_json(content)

    if not isinstance(data, dict):
        logger.error("AI response is not a JSON object: %s", content)
        raise SchemaViolation(
            "AI response did not match the expected format",
            raw=content,
            problems=[f"<root>: expected an object, got {type(data).__name__}"],
        )

    try:
        model_cls.model_validate(data)
    except ValidationError as exc:
        problems = _describe(exc)
        logger.error(
            "AI response failed %s validation: %s\nRaw: %s",
            model_cls.__name__,
            "; ".join(problems),
            content,
        )
        raise SchemaViolation(
            "AI response did not match the expected format",
            raw=content,
            problems=problems,
        )

    return data
