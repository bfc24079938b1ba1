from .domain import DomainStore, get_domain_store
from .snapshot import JsonFileSnapshotStore, MemorySnapshotStore, Snapshot

__all__ = [
    "DomainStore",
    "JsonFileSnapshotStore",
    "MemorySnapshotStore",
    "Snapshot",
    "get_domain_store",
]
