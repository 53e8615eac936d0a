from datetime import datetime

from fastapi import APIRouter, Depends

from deliveryapp.dependencies.context import AppContext, get_context
from deliveryapp.store.errors import StoreError

router = APIRouter()


@router.get("/check")
def health_check(context: AppContext = Depends(get_context)):
    db_status = "ok"

    try:
        context.store.select("settings", limit=1)
    except StoreError:
        db_status = "failed"

    return {
        "status": "ok",
        "database": db_status,
        "realtime_channels": context.feed.channel_count(),
        "timestamp": datetime.utcnow().isoformat()
    }
