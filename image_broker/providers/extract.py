# FILE: image_broker/providers/extract.py
"""
Image reference extraction from loosely specified provider responses

Each matcher is a total function: response -> list of candidate values.
Matchers run in priority order; candidates become image references
(http URL, data URI, or base64 wrapped as a PNG data URI), and results
are concatenated and deduplicated by URL.
"""
import re
from typing import Any, Callable, Iterable, List, Optional, Sequence

Matcher = Callable[[Any], List[Any]]

_BASE64_HEAD = re.compile(r"^[A-Za-z0-9+/]+=*$")


def png_data_uri(b64: str) -> str:
    return f"data:image/png;base64,{b64}"


def looks_like_base64(value: str) -> bool:
    """Cheap check on the first 24 characters"""
    return bool(_BASE64_HEAD.match(value[:24]))


def as_image_ref(value: Any) -> Optional[str]:
    """URL, data URI, or base64 payload -> reference; anything else -> None"""
    if not isinstance(value, str) or not value:
        return None
    if value.startswith("http://") or value.startswith("https://") or value.startswith("data:"):
        return value
    if looks_like_base64(value):
        return png_data_uri(value)
    return None


def as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def field(data: Any, *path: str) -> Any:
    """Nested dict lookup returning None on any miss"""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def first_present(data: Any, paths: Sequence[Sequence[str]]) -> Any:
    """Value at the first path that holds a non-empty string"""
    for path in paths:
        value = field(data, *path)
        if isinstance(value, str) and value:
            return value
    return None


def any_string_ref(value: Any) -> Optional[str]:
    """Any non-empty string, unfiltered (providers that hand back their own CDN paths)"""
    return value if isinstance(value, str) and value else None


def dedupe(urls: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for url in urls:
        if url not in seen:
            seen.add(url)
            out.append(url)
    return out


def collect_image_refs(
    data: Any,
    matchers: Sequence[Matcher],
    fallbacks: Sequence[Matcher] = (),
    to_ref: Callable[[Any], Optional[str]] = as_image_ref
) -> List[str]:
    """
    Run matchers in order and gather image references.

    Fallback matchers only run when the main matchers found nothing.
    `to_ref` turns a candidate into a reference or None.
    """
    refs = [ref for matcher in matchers for ref in map(to_ref, matcher(data)) if ref]
    if not refs:
        refs = [ref for matcher in fallbacks for ref in map(to_ref, matcher(data)) if ref]
    return dedupe(refs)
