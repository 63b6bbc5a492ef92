"""
Client for the hosted backend's auth service.

Handles password sign-in, sign-up, sign-out, session retrieval (with token
refresh) and auth state notifications. The current session is kept in a
session store so that a restarted app can pick it up again.
"""
import time
import logging
import threading
from dataclasses import dataclass, field, asdict
from enum import Enum

from .errors import AuthError, BackendError
from .persistence import load_last_session, save_last_session, clear_last_session, LAST_SESSION_FILE

logger = logging.getLogger(__name__)

AUTH_PATH = "/auth/v1"

# Refresh a little before the backend would reject the token
EXPIRY_MARGIN = 30


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    USER_UPDATED = "USER_UPDATED"
    USER_DELETED = "USER_DELETED"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


@dataclass
class AuthSession:
    access_token: str
    refresh_token: str
    expires_at: float
    user: dict = field(default_factory=dict)

    @property
    def user_id(self):
        return self.user.get('id')

    def is_expired(self, now=None):
        now = time.time() if now is None else now
        return self.expires_at - EXPIRY_MARGIN <= now

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(
            access_token=data['access_token'],
            refresh_token=data['refresh_token'],
            expires_at=float(data['expires_at']),
            user=dict(data.get('user') or {}),
        )

    @classmethod
    def from_token_response(cls, payload, now=None):
        """Build a session from a /token response body"""
        now = time.time() if now is None else now
        expires_at = payload.get('expires_at')
        if expires_at is None:
            expires_at = now + float(payload.get('expires_in', 3600))
        return cls(
            access_token=payload['access_token'],
            refresh_token=payload.get('refresh_token', ''),
            expires_at=float(expires_at),
            user=dict(payload.get('user') or {}),
        )


class MemorySessionStore:
    """Keeps the session for the lifetime of the process only"""

    def __init__(self):
        self._data = None

    def load(self):
        return self._data

    def save(self, data):
        self._data = dict(data)

    def clear(self):
        self._data = None


class FileSessionStore:
    """
    Keeps the session in the last-session file under a key of its own.

    Each browser session passes its own id, so sessions sharing one server
    process never see or clear each other's login.
    """

    def __init__(self, session_id, path=LAST_SESSION_FILE):
        if not session_id:
            raise ValueError("FileSessionStore needs a browser session id")
        self.key = f"auth:{session_id}"
        self.path = path

    def load(self):
        return load_last_session(self.path).get(self.key)

    def save(self, data):
        save_last_session({self.key: data}, self.path)

    def clear(self):
        clear_last_session(self.key, self.path)


class Subscription:
    """Handle returned by on_auth_state_change"""

    def __init__(self, client, listener):
        self._client = client
        self.listener = listener
        self.active = True

    def unsubscribe(self):
        if self.active:
            self.active = False
            self._client._remove_listener(self)


class AuthClient:
    """
    Usage:
        auth = AuthClient(backend)
        sub = auth.on_auth_state_change(lambda event, session: ...)
        auth.sign_in_with_password('a@b.c', 'secret')
        sub.unsubscribe()
    """

    def __init__(self, backend, store=None):
        self.backend = backend
        self.store = store or MemorySessionStore()
        self._subscriptions = []
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def on_auth_state_change(self, listener):
        """Register listener(event, session); returns a Subscription"""
        subscription = Subscription(self, listener)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def _remove_listener(self, subscription):
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def _emit(self, event, session):
        logger.info(f"Auth state changed: {event.value} ({'session' if session else 'no session'})")
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            if not subscription.active:
                continue
            try:
                subscription.listener(event, session)
            except Exception:
                logger.exception(f"Auth listener failed on {event.value}")

    # ------------------------------------------------------------------
    # Session storage
    # ------------------------------------------------------------------

    def _set_session(self, session):
        self.store.save(session.to_dict())
        self.backend.set_access_token(session.access_token)

    def _clear_session(self):
        self.store.clear()
        self.backend.set_access_token(None)

    def _post(self, path, payload, **kwargs):
        try:
            return self.backend.request('POST', f"{AUTH_PATH}{path}", json=payload, **kwargs).json()
        except BackendError as e:
            raise AuthError(str(e), status=e.status)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def get_session(self):
        """
        Return the current session, refreshing it when the access token expired.

        Returns:
            AuthSession or None when nobody is signed in

        Raises:
            AuthError: the stored session could not be refreshed (it is cleared)
        """
        data = self.store.load()
        if not data:
            return None

        try:
            session = AuthSession.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding malformed stored session: {e}")
            self._clear_session()
            return None

        if not session.is_expired():
            self.backend.set_access_token(session.access_token)
            return session

        logger.info("Access token expired, refreshing")
        try:
            payload = self._post("/token", {'refresh_token': session.refresh_token},
                                 params={'grant_type': 'refresh_token'})
        except AuthError:
            self._clear_session()
            raise

        refreshed = AuthSession.from_token_response(payload)
        if not refreshed.user:
            refreshed.user = session.user
        self._set_session(refreshed)
        self._emit(AuthEvent.TOKEN_REFRESHED, refreshed)
        return refreshed

    def sign_in_with_password(self, email, password):
        payload = self._post("/token", {'email': email, 'password': password},
                             params={'grant_type': 'password'})
        session = AuthSession.from_token_response(payload)
        self._set_session(session)
        logger.info(f"Signed in as {email}")
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    def sign_up(self, email, password):
        """Create an identity; returns the new user record"""
        payload = self._post("/signup", {'email': email, 'password': password})
        # Depending on email confirmation settings the body is a user or a session
        user = payload.get('user') if isinstance(payload.get('user'), dict) else payload
        if not user.get('id'):
            raise AuthError("Sign up did not return a user id")
        return user

    def sign_out(self):
        data = self.store.load()
        if data and data.get('access_token'):
            try:
                self.backend.request(
                    'POST', f"{AUTH_PATH}/logout",
                    headers={'Authorization': f"Bearer {data['access_token']}"}
                )
            except BackendError as e:
                # The token is already gone on the server side
                if e.status not in (401, 403, 404):
                    raise AuthError(str(e), status=e.status)
                logger.info(f"Remote session already invalid (status={e.status})")
        self._clear_session()
        self._emit(AuthEvent.SIGNED_OUT, None)

    def update_user(self, attrs):
        """Update email and/or password of the signed in identity"""
        data = self.store.load()
        if not data:
            raise AuthError("No user is logged in")
        try:
            user = self.backend.request('PUT', f"{AUTH_PATH}/user", json=attrs).json()
        except BackendError as e:
            raise AuthError(str(e), status=e.status)

        session = AuthSession.from_dict(data)
        session.user = dict(user or session.user)
        self.store.save(session.to_dict())
        self._emit(AuthEvent.USER_UPDATED, session)
        return session.user

    def admin_update_user(self, user_id, attrs):
        try:
            return self.backend.request(
                'PUT', f"{AUTH_PATH}/admin/users/{user_id}", admin=True, json=attrs
            ).json()
        except BackendError as e:
            raise AuthError(str(e), status=e.status)

    def admin_delete_user(self, user_id):
        try:
            self.backend.request('DELETE', f"{AUTH_PATH}/admin/users/{user_id}", admin=True)
        except BackendError as e:
            raise AuthError(str(e), status=e.status)
