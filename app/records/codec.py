"""Codec for list/object attributes stored as JSON text."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .entities import DecodeFallback, EntityType, schema_for

logger = logging.getLogger(__name__)

_EMPTY_LIST_TEXT = "[]"


@dataclass(slots=True)
class DecodeResult:
    """Outcome of decoding one stored value.

    ``ok`` is ``False`` when stored text looked structured but failed to parse
    and ``value`` holds the fallback instead.
    """

    value: Any
    ok: bool = True


def _is_container(value: Any) -> bool:
    return isinstance(value, (list, dict))


def decode_value(value: Any, fallback: DecodeFallback = DecodeFallback.RAW) -> DecodeResult:
    if fallback is DecodeFallback.EMPTY_LIST:
        if isinstance(value, list):
            return DecodeResult(value)
        if isinstance(value, str) and value.strip().startswith("["):
            try:
                return DecodeResult(json.loads(value))
            except (ValueError, RecursionError):
                logger.debug("Malformed list text replaced by an empty list: %.80r", value)
                return DecodeResult([], ok=False)
        return DecodeResult([])

    if isinstance(value, str) and value.startswith(("[", "{")):
        try:
            return DecodeResult(json.loads(value))
        except (ValueError, RecursionError):
            logger.debug("Malformed structured text kept verbatim: %.80r", value)
            return DecodeResult(value, ok=False)
    return DecodeResult(value)


def encode_value(value: Any) -> Any:
    """Serialise containers to JSON text; everything else passes through."""

    if _is_container(value):
        return json.dumps(value)
    return value


class StructuredFieldCodec:
    """Apply per-entity structured-field rules to records entering or leaving the store."""

    def decode_record(self, entity_type: EntityType | str, record: Mapping[str, Any] | None) -> dict[str, Any] | None:
        if record is None:
            return None
        schema = schema_for(entity_type)
        decoded = dict(record)
        for name in schema.structured_fields:
            if schema.decode_fallback is DecodeFallback.EMPTY_LIST or name in decoded:
                decoded[name] = decode_value(decoded.get(name), schema.decode_fallback).value
        return decoded

    def decode_records(
        self, entity_type: EntityType | str, records: Iterable[Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        return [self.decode_record(entity_type, record) for record in records if record is not None]

    def encode_for_create(self, entity_type: EntityType | str, data: Mapping[str, Any]) -> dict[str, Any]:
        schema = schema_for(entity_type)
        encoded = dict(data)
        for name in schema.structured_fields + schema.create_serialized_fields:
            if schema.decode_fallback is DecodeFallback.EMPTY_LIST:
                # List-typed entities always persist every structured field.
                value = encode_value(encoded.get(name))
                encoded[name] = value if isinstance(value, str) else _EMPTY_LIST_TEXT
            elif name in encoded:
                encoded[name] = encode_value(encoded[name])
        return encoded

    def encode_for_update(self, entity_type: EntityType | str, changes: Mapping[str, Any]) -> dict[str, Any]:
        schema = schema_for(entity_type)
        encoded = dict(changes)
        for name in schema.structured_fields:
            if name in encoded and _is_container(encoded[name]):
                encoded[name] = json.dumps(encoded[name])
        return encoded
