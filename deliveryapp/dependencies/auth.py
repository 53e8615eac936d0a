from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from deliveryapp.dependencies.context import AppContext, get_context
from deliveryapp.services.auth_service import AuthSession

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_current_session(
    token: str = Depends(oauth2_scheme),
    context: AppContext = Depends(get_context),
) -> AuthSession:
    session = context.auth.session_from_token(token)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


def get_optional_session(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    context: AppContext = Depends(get_context),
) -> Optional[AuthSession]:
    return context.auth.session_from_token(token)
