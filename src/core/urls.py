"""URL building for the registry endpoints.

Single encoding rule: every variable path or query segment is percent-encoded
exactly once, with only RFC 3986 unreserved characters left as-is. Commas
that separate several identifiers in one path segment stay literal.
"""

from __future__ import annotations

import string
from typing import Iterable, Mapping, Sequence, Union
from urllib.parse import quote, urlencode

_Segment = Union[str, Sequence[str]]


def normalize_identifiers(raw: str | Iterable[str]) -> list[str]:
    """Split, trim and deduplicate identifiers.

    Accepts either free text (`"alice, bob,,carol "`) or an iterable whose
    items may themselves contain commas. Blanks inside an identifier are
    removed, empty items dropped, first-seen order kept.
    """

    items = [raw] if isinstance(raw, str) else list(raw)

    out: list[str] = []
    seen: set[str] = set()
    for item in items:
        for part in str(item).split(","):
            ident = "".join(part.split())
            if not ident or ident in seen:
                continue
            seen.add(ident)
            out.append(ident)
    return out


def encode_segment(value: str) -> str:
    return quote(value, safe="")


def join_identifiers(identifiers: Iterable[str]) -> str:
    return ",".join(encode_segment(i) for i in identifiers)


def build_url(
    base: str,
    template: str = "",
    *,
    query: Mapping[str, str] | None = None,
    **segments: _Segment,
) -> str:
    """Fill `{name}` placeholders of `template` and append it to `base`.

    String values are encoded with `encode_segment`; sequences go through
    `join_identifiers`. A placeholder without a value raises `KeyError`.
    """

    encoded: dict[str, str] = {}
    for name, value in segments.items():
        if isinstance(value, str):
            encoded[name] = encode_segment(value)
        else:
            encoded[name] = join_identifiers(value)

    for _, field_name, _, _ in string.Formatter().parse(template):
        if field_name is not None and field_name not in encoded:
            raise KeyError(f"missing URL segment: {field_name}")

    url = base.rstrip("/") + template.format(**encoded)
    if query:
        url += "?" + urlencode(dict(query), quote_via=quote, safe="")
    return url
