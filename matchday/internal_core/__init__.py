from .config import EngineConfig, load_config
from .record_store import InMemoryRecordStore, RecordStore
from .store_client import RecordStoreClient

__all__ = [
    "EngineConfig",
    "load_config",
    "InMemoryRecordStore",
    "RecordStore",
    "RecordStoreClient",
]
