from fastapi import APIRouter, Depends, HTTPException

from deliveryapp.dependencies.auth import get_current_session
from deliveryapp.dependencies.context import AppContext, get_context
from deliveryapp.notifications.popup import popup
from deliveryapp.schemas.user_schemas import PasswordUpdate, UserCreate, UserLogin
from deliveryapp.services.auth_service import (
    AdminAccessDenied,
    AdminAuthContext,
    AuthClient,
    AuthError,
    AuthSession,
)
from deliveryapp.store.errors import StoreError

router = APIRouter()


def session_payload(session: AuthSession, role=None):
    return {
        "access_token": session.access_token,
        "token_type": "bearer",
        "user": {
            "id": session.user_id,
            "email": session.email,
            "name": session.name,
            "phone": session.phone,
            "role": role,
        },
    }


@router.post("/register")
def register(payload: UserCreate, context: AppContext = Depends(get_context)):
    try:
        session = context.auth.sign_up(payload.email, payload.password, payload.name, payload.phone)
    except AuthError as e:
        raise HTTPException(400, str(e))
    except StoreError:
        raise HTTPException(500, "Não foi possível criar sua conta. Tente novamente.")

    return {
        **session_payload(session, role="customer"),
        **popup("Conta criada com sucesso!", title="Bem-vindo!"),
    }


@router.post("/login")
def login(payload: UserLogin, context: AppContext = Depends(get_context)):
    client = AuthClient(context.auth)
    try:
        session = client.sign_in(payload.email, payload.password)
    except AuthError as e:
        raise HTTPException(401, str(e))

    return session_payload(session, role=context.auth.get_role(session.user_id))


@router.post("/admin/login")
def admin_login(payload: UserLogin, context: AppContext = Depends(get_context)):
    admin_auth = AdminAuthContext(AuthClient(context.auth))
    try:
        session = admin_auth.login(payload.email, payload.password)
    except AdminAccessDenied as e:
        raise HTTPException(403, str(e))
    except AuthError as e:
        raise HTTPException(401, str(e))
    finally:
        admin_auth.close()

    return session_payload(session, role="admin")


@router.post("/logout")
def logout(session: AuthSession = Depends(get_current_session),
           context: AppContext = Depends(get_context)):
    # tokens are stateless; the client drops its copy
    AuthClient(context.auth, session).sign_out()
    return popup("Você saiu da sua conta")


@router.get("/session")
def current_session(session: AuthSession = Depends(get_current_session),
                    context: AppContext = Depends(get_context)):
    return session_payload(session, role=context.auth.get_role(session.user_id))


@router.put("/password")
def update_password(payload: PasswordUpdate,
                    session: AuthSession = Depends(get_current_session),
                    context: AppContext = Depends(get_context)):
    try:
        AuthClient(context.auth, session).update_password(payload.new_password)
    except AuthError as e:
        raise HTTPException(400, str(e))

    return popup("Senha atualizada com sucesso!", title="Senha alterada")
