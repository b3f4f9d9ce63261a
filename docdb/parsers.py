"""JSON response body parsers."""

import json
from typing import Any, Union

from .exceptions import KeyNotFoundError, ResponseFormatError

JSONBody = Union[bytes, bytearray, str]


def parse_object_response(body: JSONBody) -> dict[str, Any]:
    """
    Parse the body into a JSON object.

    Example input::

        {"key1": [1, 2, "3", true], "key2": "foo", "key3": {"bar": "baz"}}
    """
    try:
        obj = json.loads(body)
    except ValueError as e:
        raise ResponseFormatError(f"could not decode json into object: {e}") from e
    if not isinstance(obj, dict):
        raise ResponseFormatError(
            f"could not decode json into object: got {type(obj).__name__}"
        )
    return obj


def parse_array_response(body: JSONBody) -> list[Any]:
    """Parse the body into a JSON array, e.g. ``[1, 2, "3", true]``."""
    try:
        arr = json.loads(body)
    except ValueError as e:
        raise ResponseFormatError(f"could not decode json into array: {e}") from e
    if not isinstance(arr, list):
        raise ResponseFormatError(
            f"could not decode json into array: got {type(arr).__name__}"
        )
    return arr


def parse_array_from_response(body: JSONBody, key: str) -> list[Any]:
    """
    Extract the array stored under ``key`` in a JSON object body.

    A missing key raises KeyNotFoundError; it is never treated as an empty page.
    """
    obj = parse_object_response(body)
    if key not in obj:
        raise KeyNotFoundError(key)
    items = obj[key]
    if not isinstance(items, list):
        raise ResponseFormatError(
            f"value of '{key}' is not an array: got {type(items).__name__}"
        )
    return items
