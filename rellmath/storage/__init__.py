from .schema import (
    DEFAULT_DIGIT,
    DEFAULT_OPERATION,
    DEFAULT_SCORE,
    DTYPES,
    KEY_DIGIT,
    KEY_HISTORY,
    KEY_OPERATION,
    KEY_SCORE,
    AttemptRecord,
    decode_history,
    encode_history,
)
from .store import JsonFileStore, MemoryStore, PersistenceAdapter, make_store

__all__ = [
    "DEFAULT_DIGIT",
    "DEFAULT_OPERATION",
    "DEFAULT_SCORE",
    "DTYPES",
    "KEY_DIGIT",
    "KEY_HISTORY",
    "KEY_OPERATION",
    "KEY_SCORE",
    "AttemptRecord",
    "decode_history",
    "encode_history",
    "JsonFileStore",
    "MemoryStore",
    "PersistenceAdapter",
    "make_store",
]
