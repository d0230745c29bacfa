"""Services for futureself module."""
from .compressor import ImageCompressor
from .kv_store import InMemoryKeyValueStore, JSONFileKeyValueStore
from .object_store import SignedURLObjectStore
from .result_poller import HTTPResultPoller
from .url_issuer import SignedURLIssuer

__all__ = [
    "ImageCompressor",
    "InMemoryKeyValueStore",
    "JSONFileKeyValueStore",
    "SignedURLObjectStore",
    "HTTPResultPoller",
    "SignedURLIssuer",
]
