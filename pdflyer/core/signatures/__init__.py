"""
Saved signatures and their durable storage.
"""
from .storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from .store import SignatureRecord, SignatureStore

__all__ = [
    'JsonFileStorage',
    'KeyValueStorage',
    'MemoryStorage',
    'SignatureRecord',
    'SignatureStore',
]
