"""Record storage, entity schemas and the structured-field codec."""

from .codec import DecodeResult, StructuredFieldCodec, decode_value, encode_value
from .entities import DecodeFallback, EntitySchema, EntityType, schema_for
from .service import RecordService
from .store import FieldFilter, InMemoryRecordStore, PostgresRecordStore, RecordStore

__all__ = [
    "DecodeFallback",
    "DecodeResult",
    "EntitySchema",
    "EntityType",
    "FieldFilter",
    "InMemoryRecordStore",
    "PostgresRecordStore",
    "RecordService",
    "RecordStore",
    "StructuredFieldCodec",
    "decode_value",
    "encode_value",
    "schema_for",
]
