from fastapi import Depends, HTTPException

from deliveryapp.dependencies.auth import get_current_session
from deliveryapp.dependencies.context import AppContext, get_context
from deliveryapp.services.auth_service import AuthSession


def require_admin(
    session: AuthSession = Depends(get_current_session),
    context: AppContext = Depends(get_context),
) -> AuthSession:
    if not context.auth.is_admin(session):
        raise HTTPException(status_code=403, detail="Admin access required")
    return session
