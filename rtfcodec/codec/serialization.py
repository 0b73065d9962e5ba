"""
JSON serialization of the document model.

Every model dataclass becomes a dict carrying its fields plus a ``_type``
key naming the class, so a payload restores to the same type without
extra context:

    {"_type": "RtfDocument", "blocks": [{"_type": "Block", "runs": [...],
     "bullet": false, "indent_level": 0}], "font_table": [...], ...}

Enums are stored by value (``ReadStatus.PARSED`` -> ``"parsed"``), colors
as nested ``RgbColor`` dicts and a missing color as ``null``. The raw
``font_index``/``color_index`` references and the document tables are
kept, so a restored document also keeps the fields excluded from ``==``.
Only classes defined in ``data_types`` are accepted as ``_type`` values.
"""

import types
import typing
from dataclasses import fields, is_dataclass
from enum import Enum

from rtfcodec.exceptions import DeserializationError

# Type marker key used for serialization/deserialization
_TYPE_KEY = "_type"

# Registry mapping type names to classes (populated lazily)
_TYPE_REGISTRY: dict[str, type] = {}


def _serialize_for_json(value: typing.Any) -> typing.Any:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        result = {
            _TYPE_KEY: type(value).__name__,
        }
        for item in fields(value):
            result[item.name] = _serialize_for_json(getattr(value, item.name))
        return result
    if isinstance(value, dict):
        return {str(key): _serialize_for_json(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_serialize_for_json(item) for item in value]
    return value


def serialize_document(value: typing.Any) -> dict:
    """Convert a document (or any model dataclass) into a JSON-safe dict."""
    serialized = _serialize_for_json(value)
    if isinstance(serialized, dict):
        return serialized
    return {"value": serialized}


def _get_type_registry() -> dict[str, type]:
    """Lazily populate and return the type registry."""
    if _TYPE_REGISTRY:
        return _TYPE_REGISTRY

    from rtfcodec.codec import data_types

    for name in dir(data_types):
        obj = getattr(data_types, name)
        if isinstance(obj, type) and is_dataclass(obj):
            _TYPE_REGISTRY[name] = obj

    return _TYPE_REGISTRY


def _unwrap_optional(tp: typing.Any) -> tuple[typing.Any, bool]:
    """Unwrap Optional[X] to (X, True) or return (tp, False) if not Optional."""
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        args = typing.get_args(tp)
        non_none_args = [a for a in args if a is not type(None)]
        if len(non_none_args) == 1 and len(args) == 2:
            return non_none_args[0], True
    return tp, False


def _deserialize_value(value: typing.Any, expected_type: typing.Any) -> typing.Any:
    """Deserialize a value according to its expected type."""
    if value is None:
        return None

    inner_type, is_optional = _unwrap_optional(expected_type)
    if is_optional:
        expected_type = inner_type

    if isinstance(value, dict) and _TYPE_KEY in value:
        return _deserialize_dataclass(value)

    origin = typing.get_origin(expected_type)

    if origin is list:
        item_type = typing.get_args(expected_type)
        item_type = item_type[0] if item_type else typing.Any
        if isinstance(value, list):
            return [_deserialize_value(item, item_type) for item in value]
        return value

    if origin is dict:
        args = typing.get_args(expected_type)
        value_type = args[1] if len(args) > 1 else typing.Any
        if isinstance(value, dict):
            return {k: _deserialize_value(v, value_type) for k, v in value.items()}
        return value

    if isinstance(expected_type, type) and issubclass(expected_type, Enum):
        try:
            return expected_type(value)
        except ValueError as exc:
            raise DeserializationError(
                f"Invalid {expected_type.__name__} value: {value!r}", cause=exc
            ) from exc

    registry = _get_type_registry()
    if isinstance(expected_type, type) and expected_type.__name__ in registry:
        if isinstance(value, dict):
            return _deserialize_dataclass(value, expected_type)
        return value

    return value


def _deserialize_dataclass(
    data: dict, expected_class: typing.Optional[type] = None
) -> typing.Any:
    """Deserialize a dictionary to a dataclass instance."""
    registry = _get_type_registry()

    type_name = data.get(_TYPE_KEY)
    if type_name and type_name in registry:
        cls = registry[type_name]
    elif expected_class is not None:
        cls = expected_class
    else:
        raise DeserializationError(f"Unknown type in payload: {type_name!r}")

    field_types = typing.get_type_hints(cls)
    field_names = {f.name for f in fields(cls) if f.init}

    kwargs = {}
    for field_name in field_names:
        if field_name in data:
            field_type = field_types.get(field_name, typing.Any)
            kwargs[field_name] = _deserialize_value(data[field_name], field_type)

    try:
        return cls(**kwargs)
    except (TypeError, ValueError) as exc:
        raise DeserializationError(
            f"Could not rebuild {cls.__name__} from payload", cause=exc
        ) from exc


def deserialize_document(data: dict) -> typing.Any:
    """
    Rebuild a document from the dictionary produced by serialize_document().

    Args:
        data: A dictionary produced by serialize_document() or
            RtfDocument.to_json()

    Returns:
        The restored dataclass, an RtfDocument for document payloads

    Raises:
        DeserializationError: If the payload is not a dictionary, carries no
            type marker or names an unknown type

    Example:
        >>> document, _ = read_rtf(data)
        >>> restored = deserialize_document(document.to_json())
        >>> assert restored == document
    """
    if not isinstance(data, dict):
        raise DeserializationError("Input must be a dictionary")

    if _TYPE_KEY not in data:
        raise DeserializationError(
            f"Input dictionary must contain '{_TYPE_KEY}' key for deserialization"
        )

    return _deserialize_dataclass(data)
