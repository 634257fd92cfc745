"""JSON encoding used by the structured log formatter."""

from typing import Any, Literal, overload

import msgspec

__all__ = ("encode_json",)

_encoder = msgspec.json.Encoder(enc_hook=str)


@overload
def encode_json(data: Any, *, as_bytes: Literal[False] = ...) -> str: ...


@overload
def encode_json(data: Any, *, as_bytes: Literal[True]) -> bytes: ...


def encode_json(data: Any, *, as_bytes: bool = False) -> "str | bytes":
    """Encode data to JSON.

    Values msgspec does not know how to encode fall back to ``str()``.

    Args:
        data: Data to encode.
        as_bytes: Return bytes instead of a string.

    Returns:
        The JSON document.
    """
    encoded = _encoder.encode(data)
    if as_bytes:
        return encoded
    return encoded.decode("utf-8")
