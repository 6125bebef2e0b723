"""Lazily decoded, self-describing GraphQL objects."""

import json
from json import decoder, scanner
from typing import Any, Union

from pydantic_core import core_schema

from ..sources.base import MalformedInput

TYPE_FIELD = "__typename"


class SourcedObject(dict):
    """Parsed JSON object that remembers the exact text it was parsed from."""

    __slots__ = ("source",)

    def __init__(self, value: dict, source: str):
        super().__init__(value)
        self.source = source


class _SourceTrackingDecoder(json.JSONDecoder):
    # The C scanner doesn't call parse_object, so the pure-Python one is used.

    def __init__(self):
        super().__init__()
        self.parse_object = self._parse_object
        self.scan_once = scanner.py_make_scanner(self)

    @staticmethod
    def _parse_object(s_and_end, strict, scan_once, object_hook, object_pairs_hook, memo=None):
        s, end = s_and_end
        value, new_end = decoder.JSONObject(
            s_and_end, strict, scan_once, object_hook, object_pairs_hook, memo
        )
        # ``end`` points just past the opening brace.
        return SourcedObject(value, s[end - 1 : new_end]), new_end


def loads(raw: Union[bytes, str]) -> Any:
    """Parse JSON so that every object keeps its source text.

    Args:
        raw: UTF-8 JSON bytes or text

    Returns:
        Parsed value; objects are SourcedObject instances

    Raises:
        MalformedInput: If the input is not valid JSON
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        return _SourceTrackingDecoder().decode(text)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedInput(f"invalid JSON: {e}") from e


def _type_name_of(value: Any, strict: bool = True) -> str:
    if not isinstance(value, dict):
        raise MalformedInput(f"expected a JSON object, got {type(value).__name__}")
    type_name = value.get(TYPE_FIELD)
    if not isinstance(type_name, str) or not type_name:
        if not strict:
            return ""
        raise MalformedInput(f"object doesn't have a {TYPE_FIELD} annotation")
    return type_name


class TaggedObject:
    """Raw JSON object plus its ``__typename``.

    The concrete shape is only decoded when a registry resolves it, which
    may happen never or several times. ``raw`` is never modified.

    Objects found nested in a parent shape keep an empty ``type_name`` when
    they carry no tag; resolving them fails, the parent does not.
    """

    __slots__ = ("type_name", "raw")

    def __init__(self, type_name: str, raw: bytes):
        self.type_name = type_name
        self.raw = raw

    @classmethod
    def decode(cls, raw: Union[bytes, str]) -> "TaggedObject":
        """Read the type tag of a serialized JSON object.

        Args:
            raw: JSON bytes (or text) of a single object

        Returns:
            TaggedObject holding the original bytes

        Raises:
            MalformedInput: If the input is not a tagged JSON object
        """
        if isinstance(raw, str):
            raw = raw.encode("utf-8")
        try:
            value = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as e:
            raise MalformedInput(f"invalid JSON: {e}") from e
        return cls(_type_name_of(value), bytes(raw))

    @classmethod
    def from_value(cls, value: Any, strict: bool = True) -> "TaggedObject":
        """Build from an already parsed JSON object.

        A SourcedObject keeps its source bytes; a plain dict is serialized
        compactly.
        """
        type_name = _type_name_of(value, strict)
        if isinstance(value, SourcedObject):
            raw = value.source.encode("utf-8")
        else:
            raw = json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        return cls(type_name, raw)

    def value(self) -> Any:
        """Parse the raw bytes into plain Python values."""
        return json.loads(self.raw)

    def to_json(self) -> bytes:
        return self.raw

    def __bytes__(self) -> bytes:
        return self.raw

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaggedObject):
            return NotImplemented
        return self.type_name == other.type_name and self.raw == other.raw

    def __hash__(self) -> int:
        return hash((self.type_name, self.raw))

    def __repr__(self) -> str:
        return f"TaggedObject(type_name={self.type_name!r}, raw={len(self.raw)} bytes)"

    @classmethod
    def _validate(cls, value: Any) -> "TaggedObject":
        if isinstance(value, cls):
            return value
        try:
            return cls.from_value(value, strict=False)
        except MalformedInput as e:
            raise ValueError(str(e)) from e

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        # Nested objects stay undecoded inside their parent shape.
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda obj: obj.value()
            ),
        )
