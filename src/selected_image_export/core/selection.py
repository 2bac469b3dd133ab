"""Selection encoding decoder.

The encoding is the literal ``{"name1":1,"name2":2}`` recorded by the image
selection view: brace delimited, comma separated ``"name":order`` pairs,
without any escaping.
"""

from __future__ import annotations

from typing import Mapping, Optional

from ..models.error_record import ExportError


class DecodeError(ExportError):
    """The selection encoding is malformed."""


def _strip_quotes(token: str) -> str:
    quoted_start = token.startswith('"')
    quoted_end = len(token) >= 2 and token.endswith('"')
    if quoted_start != quoted_end:
        raise DecodeError(f"unbalanced quotes around image name {token!r}")
    return token[1:-1] if quoted_start else token


def decode_selection(value: Optional[str]) -> dict[str, int]:
    """Decode a selection encoding into an insertion-ordered name → order map.

    An empty or absent value means nothing was selected. Duplicate names and
    orders below 1 are rejected.
    """
    if value is None or not value.strip():
        return {}

    text = value.strip()
    if not (text.startswith("{") and text.endswith("}")):
        raise DecodeError(f"selection must be enclosed in braces: {value!r}")
    body = text[1:-1]
    if "{" in body or "}" in body:
        raise DecodeError(f"unbalanced braces in selection: {value!r}")
    if not body.strip():
        return {}

    selection: dict[str, int] = {}
    for item in body.split(","):
        name_token, separator, order_token = item.partition(":")
        if not separator:
            raise DecodeError(f"missing ':' in selection item {item!r}")

        name = _strip_quotes(name_token.strip())
        if not name:
            raise DecodeError(f"empty image name in selection item {item!r}")
        order_text = order_token.strip()
        if not (order_text.isascii() and order_text.isdigit()):
            raise DecodeError(f"order is not an integer in selection item {item!r}")
        order = int(order_text)
        if order < 1:
            raise DecodeError(f"order must be at least 1 in selection item {item!r}")
        if name in selection:
            raise DecodeError(f"image {name!r} is selected more than once")
        selection[name] = order

    return selection


def encode_selection(selection: Mapping[str, int]) -> str:
    items = ",".join(f'"{name}":{order}' for name, order in selection.items())
    return "{" + items + "}"
