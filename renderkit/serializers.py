"""JSON and XML serialization for response bodies."""

import copy
import dataclasses
import json
import xml.etree.ElementTree as ET
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from renderkit.exceptions import SerializationError

_SCALARS = (str, int, float, Decimal, datetime, date, time, Enum)

# Self-referencing values recurse until the interpreter gives up
_CYCLE = "{}: unsupported value: encountered a cycle"


def marshal_json(value: Any, indent: bool = False) -> bytes:
    """Serialize value to UTF-8 JSON.

    Pydantic models, dataclasses, datetimes and the other types FastAPI
    understands are converted first. NaN and infinities are rejected.

    Raises:
        SerializationError: If value cannot be represented as JSON
    """
    try:
        encoded = jsonable_encoder(value)
        if indent:
            text = json.dumps(encoded, indent=2, ensure_ascii=False, allow_nan=False)
        else:
            text = json.dumps(encoded, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except RecursionError as e:
        raise SerializationError(_CYCLE.format("json"), details={"type": type(value).__name__}) from e
    except Exception as e:
        raise SerializationError(f"json: {e}", details={"type": type(value).__name__}) from e
    return text.encode("utf-8")


def marshal_xml(value: Any, indent: bool = False) -> bytes:
    """Serialize value to UTF-8 XML without a declaration.

    Supported values:
      - ElementTree elements, emitted as given
      - objects with an ``__xml__()`` method returning an element
      - pydantic models and dataclasses: one element named ``__xml_tag__``
        (default: the class name) with a child per field; fields listed in
        ``__xml_attrs__`` become attributes
      - scalars: ``<str>hello</str>``, ``<int>1</int>``, ...
      - lists and tuples: each item in turn, with no wrapping element
      - None: empty output

    Mappings are not supported since their keys need not be valid tag names.

    Raises:
        SerializationError: If value contains an unsupported type or a cycle,
            or converting it raises
    """
    if value is None:
        return b""

    items = value if isinstance(value, list | tuple) else [value]
    parts = []
    try:
        for item in items:
            if item is None:
                continue
            element = _to_element(item)
            if indent:
                element = copy.deepcopy(element)
                ET.indent(element, space="  ")
            parts.append(ET.tostring(element, encoding="unicode", short_empty_elements=False))
    except RecursionError as e:
        raise SerializationError(_CYCLE.format("xml"), details={"type": type(value).__name__}) from e
    except Exception as e:
        raise SerializationError(f"xml: {e}", details={"type": type(value).__name__}) from e

    return ("\n" if indent else "").join(parts).encode("utf-8")


def _to_element(value: Any, tag: str | None = None) -> ET.Element:
    if ET.iselement(value):
        return value

    xml_method = getattr(value, "__xml__", None)
    if callable(xml_method):
        element = xml_method()
        if not ET.iselement(element):
            raise TypeError(f"{type(value).__name__}.__xml__ must return an Element")
        if tag is not None:
            element = copy.copy(element)
            element.tag = tag
        return element

    if isinstance(value, BaseModel):
        fields = [(name, getattr(value, name)) for name in type(value).model_fields]
        return _struct_element(value, tag, fields)

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = [(f.name, getattr(value, f.name)) for f in dataclasses.fields(value)]
        return _struct_element(value, tag, fields)

    if isinstance(value, _SCALARS):
        element = ET.Element(tag or type(value).__name__)
        element.text = _scalar_text(value)
        return element

    raise TypeError(f"unsupported type: {type(value).__name__}")


def _struct_element(value: Any, tag: str | None, fields: list[tuple[str, Any]]) -> ET.Element:
    element = ET.Element(tag or getattr(value, "__xml_tag__", None) or type(value).__name__)
    attrs = set(getattr(value, "__xml_attrs__", ()))

    for name, field_value in fields:
        if field_value is None:
            continue
        if name in attrs:
            if not isinstance(field_value, _SCALARS):
                raise TypeError(f"attribute {name} must be a scalar, got {type(field_value).__name__}")
            element.set(name, _scalar_text(field_value))
        elif isinstance(field_value, list | tuple):
            for item in field_value:
                if item is not None:
                    element.append(_to_element(item, name))
        else:
            element.append(_to_element(field_value, name))

    return element


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime | date | time):
        return value.isoformat()
    return str(value)
