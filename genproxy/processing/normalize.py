"""Extract uniform results from the varied response shapes providers return.

URL extraction is an ordered list of rules; the first rule that yields at
least one element wins. Nothing found is an error, never an empty success.
"""

import base64
import binascii
from typing import Any, Callable, List, Optional

from genproxy.errors import NoTranscriptionFound, UnrecognizedResponse

ELEMENT_FIELDS = ("url", "image", "output")
COLLECTION_FIELDS = ("outputs", "images", "videos", "imageUrls", "videoUrls", "urls", "output")
SINGLE_FIELDS = ("imageUrl", "image", "output")
URL_PREFIXES = ("http", "data:image")


def _element_value(element: Any) -> Optional[str]:
    if isinstance(element, str):
        return element or None
    if isinstance(element, dict):
        for field in ELEMENT_FIELDS:
            value = element.get(field)
            if isinstance(value, str) and value:
                return value
    return None


def _from_elements(items: List[Any]) -> List[str]:
    values = (_element_value(item) for item in items)
    return [v for v in values if v]


def _rule_sequence(payload: Any) -> List[str]:
    if isinstance(payload, list):
        return _from_elements(payload)
    return []


def _rule_collection_field(payload: Any) -> List[str]:
    if not isinstance(payload, dict):
        return []
    for field in COLLECTION_FIELDS:
        value = payload.get(field)
        if isinstance(value, list):
            found = _from_elements(value)
            if found:
                return found
    for field, value in payload.items():
        if field in COLLECTION_FIELDS or not isinstance(value, list):
            continue
        found = _from_elements(value)
        if found:
            return found
    return []


def _rule_single_field(payload: Any) -> List[str]:
    if not isinstance(payload, dict):
        return []
    for field in SINGLE_FIELDS:
        value = payload.get(field)
        if isinstance(value, str) and value:
            return [value]
    return []


def _rule_scan_values(payload: Any) -> List[str]:
    if not isinstance(payload, dict):
        return []
    return [
        value
        for value in payload.values()
        if isinstance(value, str) and value.startswith(URL_PREFIXES)
    ]


URL_RULES: List[Callable[[Any], List[str]]] = [
    _rule_sequence,
    _rule_collection_field,
    _rule_single_field,
    _rule_scan_values,
]


def extract_urls(payload: Any) -> List[str]:
    """Return the output URLs in ``payload``, in provider order."""
    for rule in URL_RULES:
        found = rule(payload)
        if found:
            return found
    raise UnrecognizedResponse(f"No output found in provider response: {_preview(payload)}")


def _transcript_candidates(payload: Any):
    if not isinstance(payload, dict):
        return
    outputs = payload.get("outputs")
    if isinstance(outputs, list) and outputs:
        first = outputs[0]
        if isinstance(first, str):
            yield first
        elif isinstance(first, dict):
            yield first.get("text")
            yield first.get("transcription")
    yield payload.get("text")
    yield payload.get("transcription")


def extract_transcript(payload: Any) -> str:
    """Return the transcribed text held in ``payload``."""
    for candidate in _transcript_candidates(payload):
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    raise NoTranscriptionFound("No transcription returned by the provider")


def as_image_url(value: str, output_format: str = "png") -> str:
    """Pass URLs through; wrap bare base64 image data as a data URL."""
    if value.startswith(URL_PREFIXES) or value.startswith("data:"):
        return value
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return value
    fmt = "jpeg" if output_format.lower() == "jpg" else output_format.lower()
    return f"data:image/{fmt};base64,{value}"


def _preview(payload: Any, limit: int = 200) -> str:
    text = repr(payload)
    return text if len(text) <= limit else text[:limit] + "..."
