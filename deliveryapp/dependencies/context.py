"""
Explicit application context. Built once per app in ``create_app`` and handed to
routes through ``Depends``; nothing else holds store or feed singletons.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request

from deliveryapp.services.auth_service import AuthService
from deliveryapp.store import BlobStore, ChangeFeed, RecordStore


@dataclass
class AppContext:
    store: RecordStore
    feed: ChangeFeed
    auth: AuthService
    blobs: Optional[BlobStore] = None


def build_context(engine, blobs: Optional[BlobStore] = None) -> AppContext:
    feed = ChangeFeed()
    store = RecordStore(engine, feed)
    return AppContext(store=store, feed=feed, auth=AuthService(store), blobs=blobs)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_store(context: AppContext = Depends(get_context)) -> RecordStore:
    return context.store


def get_blob_store(context: AppContext = Depends(get_context)) -> BlobStore:
    if context.blobs is None:
        raise HTTPException(status_code=503, detail="Armazenamento de imagens não configurado")
    return context.blobs
