from deliveryapp.store.blob_store import BlobStore
from deliveryapp.store.change_feed import ChangeEvent, ChangeFeed, Channel
from deliveryapp.store.errors import RecordNotFound, StorageUploadError, StoreError
from deliveryapp.store.record_store import RecordStore

__all__ = [
    "BlobStore",
    "ChangeEvent",
    "ChangeFeed",
    "Channel",
    "RecordNotFound",
    "RecordStore",
    "StorageUploadError",
    "StoreError",
]
