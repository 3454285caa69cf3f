"""Request sections and their extraction from Starlette requests."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Any

from starlette.requests import Request

FORM_CONTENT_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})


class Section(str, Enum):
    BODY = "body"
    COOKIES = "cookies"
    HEADERS = "headers"
    PARAMS = "params"
    QUERY = "query"


@dataclass(frozen=True)
class RequestSections:
    """Read-only snapshot of the request views that validators inspect."""

    body: Any = None
    cookies: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)
    query: Mapping[str, Any] = field(default_factory=dict)

    def get(self, section: Section | str) -> Any:
        return getattr(self, Section(section).value)


def parse_section(name: Section | str) -> Section:
    """Resolve a section name, rejecting anything outside the five known views."""
    try:
        return Section(name)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in Section)
        raise ValueError(f"Unknown request section `{name}`; expected one of: {allowed}") from exc


async def extract_sections(request: Request, sections: Iterable[Section]) -> RequestSections:
    """Snapshot only the requested views so the body is read when needed.

    Malformed JSON and non UTF-8 text bodies raise; they are not validation verdicts.
    """
    wanted = set(sections)
    views: dict[str, Any] = {}
    if Section.BODY in wanted:
        views["body"] = await _read_body(request)
    if Section.COOKIES in wanted:
        views["cookies"] = dict(request.cookies)
    if Section.HEADERS in wanted:
        views["headers"] = dict(request.headers)
    if Section.PARAMS in wanted:
        views["params"] = dict(request.path_params)
    if Section.QUERY in wanted:
        views["query"] = _collapse_multi_items(request.query_params.multi_items())
    return RequestSections(**views)


async def _read_body(request: Request) -> Any:
    content_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        return _collapse_multi_items(form.multi_items())

    raw = await request.body()
    if not raw:
        return None
    if not content_type or content_type == "application/json" or content_type.endswith("+json"):
        return await request.json()
    return raw.decode("utf-8")


def _collapse_multi_items(items: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    collapsed: dict[str, Any] = {}
    for key, value in items:
        if key not in collapsed:
            collapsed[key] = value
        elif isinstance(collapsed[key], list):
            collapsed[key].append(value)
        else:
            collapsed[key] = [collapsed[key], value]
    return collapsed
