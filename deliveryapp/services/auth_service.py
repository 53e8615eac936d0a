"""
Accounts, sessions and the admin role check.

``AuthService`` is the stateless backend side (users, roles, tokens).
``AuthClient`` holds one consumer's current session and notifies listeners
when it changes; ``AdminAuthContext`` builds the admin gate on top of it.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from deliveryapp.config import settings
from deliveryapp.store.errors import StoreError
from deliveryapp.utils.hash import hash_password, verify_password
from deliveryapp.utils.token import create_access_token, decode_access_token

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
PASSWORD_UPDATED = "PASSWORD_UPDATED"

MIN_PASSWORD_LENGTH = 6


class AuthError(Exception):
    pass


class AdminAccessDenied(AuthError):
    pass


@dataclass
class AuthSession:
    user_id: str
    email: str
    name: str
    access_token: str
    phone: Optional[str] = None


class AuthService:
    def __init__(self, store):
        self.store = store

    def _session_for(self, user) -> AuthSession:
        return AuthSession(
            user_id=user.id,
            email=user.email,
            name=user.name,
            phone=user.phone,
            access_token=create_access_token({"sub": user.id}),
        )

    def sign_up(self, email: str, password: str, name: str, phone: Optional[str] = None) -> AuthSession:
        email = email.strip().lower()
        if not name.strip():
            raise AuthError("Nome é obrigatório")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError("A senha deve ter pelo menos 6 caracteres")
        if self.store.maybe_single("users", email=email):
            raise AuthError("Este e-mail já está cadastrado")

        with self.store.transaction():
            user = self.store.insert("users", {
                "email": email,
                "password": hash_password(password),
                "name": name.strip(),
                "phone": (phone or "").strip() or None,
            })[0]
            self.store.insert("user_roles", {"user_id": user.id, "role": "customer"})

        logger.info(f"Registered user {user.id}")
        return self._session_for(user)

    def authenticate(self, email: str, password: str) -> AuthSession:
        user = self.store.maybe_single("users", email=email.strip().lower())
        if not user or not verify_password(password, user.password):
            raise AuthError("E-mail ou senha incorretos")
        return self._session_for(user)

    def session_from_token(self, token: Optional[str]) -> Optional[AuthSession]:
        if not token:
            return None
        payload = decode_access_token(token)
        if not payload or not payload.get("sub"):
            return None

        user = self.store.get("users", payload["sub"])
        if user is None:
            return None

        return AuthSession(
            user_id=user.id,
            email=user.email,
            name=user.name,
            phone=user.phone,
            access_token=token,
        )

    def update_password(self, session: AuthSession, new_password: str):
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise AuthError("A senha deve ter pelo menos 6 caracteres")
        self.store.update("users", session.user_id, {"password": hash_password(new_password)})

    def get_role(self, user_id: str) -> Optional[str]:
        try:
            row = self.store.maybe_single("user_roles", user_id=user_id)
        except StoreError as e:
            logger.error(f"Role lookup failed for {user_id}: {e}")
            return None
        return row.role if row else None

    def is_admin(self, session: Optional[AuthSession]) -> bool:
        if session is None:
            return False
        return self.get_role(session.user_id) == settings.ADMIN_ROLE


class AuthSubscription:
    def __init__(self, client: "AuthClient", callback):
        self._client = client
        self.callback = callback

    def unsubscribe(self):
        self._client._remove(self)


class AuthClient:
    """One consumer's view of authentication (a browser tab, a request)."""

    def __init__(self, auth: AuthService, session: Optional[AuthSession] = None):
        self.auth = auth
        self._session = session
        self._listeners: List[AuthSubscription] = []
        self._lock = threading.Lock()

    def on_auth_state_change(self, callback: Callable[[str, Optional[AuthSession]], None]) -> AuthSubscription:
        subscription = AuthSubscription(self, callback)
        with self._lock:
            self._listeners.append(subscription)
        return subscription

    def _remove(self, subscription: AuthSubscription):
        with self._lock:
            if subscription in self._listeners:
                self._listeners.remove(subscription)

    def _emit(self, event: str, session: Optional[AuthSession]):
        with self._lock:
            listeners = list(self._listeners)
        for subscription in listeners:
            subscription.callback(event, session)

    def get_current_session(self) -> Optional[AuthSession]:
        return self._session

    def sign_in(self, email: str, password: str) -> AuthSession:
        self._session = self.auth.authenticate(email, password)
        self._emit(SIGNED_IN, self._session)
        return self._session

    def sign_out(self):
        if self._session is None:
            return
        self._session = None
        self._emit(SIGNED_OUT, None)

    def update_password(self, new_password: str):
        if self._session is None:
            raise AuthError("Sessão expirada")
        self.auth.update_password(self._session, new_password)
        self._emit(PASSWORD_UPDATED, self._session)


class AdminAuthContext:
    """
    Admin gate for one client. Any session that appears without the admin
    role is signed straight back out.
    """

    def __init__(self, client: AuthClient):
        self.client = client
        self.user: Optional[AuthSession] = None
        self.is_admin = False
        self._subscription = client.on_auth_state_change(self._check)
        self._check(SIGNED_IN, client.get_current_session())

    def _check(self, event: str, session: Optional[AuthSession]):
        if session is None or event == SIGNED_OUT:
            self.user = None
            self.is_admin = False
            return

        if self.client.auth.is_admin(session):
            self.user = session
            self.is_admin = True
        else:
            self.user = None
            self.is_admin = False
            self.client.sign_out()

    def login(self, email: str, password: str) -> AuthSession:
        self.client.sign_in(email, password)
        if not self.is_admin:
            raise AdminAccessDenied("Acesso restrito a administradores")
        return self.user

    def logout(self):
        self.client.sign_out()

    def close(self):
        self._subscription.unsubscribe()
