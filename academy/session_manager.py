"""
Session management for the signed in user.

SessionManager is the single owner of "who is logged in": it hydrates the
session from the auth service at startup, keeps it in sync with auth state
notifications and exposes login, logout and profile updates. Views only read
its state snapshot.
"""
import logging
import threading
from dataclasses import dataclass, replace
from typing import Optional

from .cancellation import CancellationToken
from .errors import AcademyError, AuthError, BackendError, NoActiveSessionError, ProfileNotFoundError
from .auth import AuthEvent

logger = logging.getLogger(__name__)

USERS_TABLE = 'users'
ADMIN_ROLE = 'admin'


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of the session"""
    identity: Optional[dict] = None
    profile: Optional[dict] = None
    is_loading: bool = True
    is_initialized: bool = False

    @property
    def is_authenticated(self):
        return self.profile is not None

    @property
    def user(self):
        """Auth identity fields overlaid with profile fields, or None"""
        if self.profile is None:
            return None
        return {**(self.identity or {}), **self.profile}

    @property
    def user_id(self):
        if self.profile is not None:
            return self.profile.get('id')
        return None

    @property
    def role(self):
        return self.profile.get('role') if self.profile else None

    @property
    def is_admin(self):
        return self.role == ADMIN_ROLE


class SessionManager:
    """
    Owns the session state and its lifecycle.

    Usage:
        manager = SessionManager(auth, backend)
        manager.initialize()
        error = manager.login(email, password)
        ...
        manager.close()
    """

    def __init__(self, auth, backend, token=None):
        self.auth = auth
        self.backend = backend
        self.token = token or CancellationToken()
        self._state = SessionState()
        self._lock = threading.RLock()
        self._generation = 0
        self._started = False
        self._subscription = None
        self._listeners = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self):
        with self._lock:
            return self._state

    def add_listener(self, callback):
        """Call callback(state) after every state change; returns a remover"""
        self._listeners.append(callback)

        def remove():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return remove

    def _write(self, generation=None, **changes):
        """
        Apply changes unless the manager was closed or, when a generation is
        given, a newer auth transition happened since it was taken.
        """
        with self._lock:
            if self.token.revoked:
                logger.debug("Session manager closed, dropping state update")
                return False
            if generation is not None and generation != self._generation:
                logger.debug(f"Dropping stale session update (generation {generation} != {self._generation})")
                return False
            self._state = replace(self._state, **changes)
            state = self._state

        for callback in list(self._listeners):
            callback(state)
        return True

    def _begin_transition(self):
        with self._lock:
            self._generation += 1
            return self._generation

    def _clear(self):
        generation = self._begin_transition()
        return self._write(generation, identity=None, profile=None)

    # ------------------------------------------------------------------
    # Profile resolution
    # ------------------------------------------------------------------

    def fetch_profile(self, user_id):
        """Return the users row for user_id, or None unless exactly one exists"""
        try:
            rows = self.backend.table(USERS_TABLE).select({'id': user_id})
        except BackendError as e:
            logger.error(f"Error fetching user profile: {e}")
            return None
        if len(rows) != 1:
            logger.warning(f"Expected one profile for {user_id}, found {len(rows)}")
            return None
        return rows[0]

    def _sign_out_quietly(self):
        try:
            self.auth.sign_out()
        except AuthError as e:
            logger.error(f"Sign out after missing profile failed: {e}")

    def _resolve(self, identity, sign_out_if_missing):
        """
        Fetch the profile of identity and merge it into the session.

        Returns True when a profile was applied.
        """
        generation = self._begin_transition()
        profile = self.fetch_profile(identity.get('id'))
        if self.token.revoked:
            return False
        if profile is None:
            if sign_out_if_missing:
                logger.warning("Authenticated identity has no profile, signing out")
                self._sign_out_quietly()
                self._clear()
            return False
        return self._write(generation, identity=dict(identity), profile=dict(profile))

    def _already_applied(self, identity):
        state = self.state
        return state.is_authenticated and state.user_id == identity.get('id')

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self):
        """Subscribe to auth notifications and run the initial session check (once)"""
        with self._lock:
            if self._started:
                return
            self._started = True

        self._subscription = self.auth.on_auth_state_change(self._on_auth_event)
        self.token.on_revoke(self._subscription.unsubscribe)

        generation = self._generation
        try:
            try:
                session = self.auth.get_session()
            except AuthError as e:
                logger.error(f"Error getting session: {e}")
                self._write(generation, identity=None, profile=None)
                return

            if session is None or not session.user_id:
                self._write(generation, identity=None, profile=None)
            elif not self._already_applied(session.user):
                self._resolve(session.user, sign_out_if_missing=True)
        except AcademyError as e:
            logger.error(f"Auth initialization error: {e}")
            self._clear()
        finally:
            self._write(is_loading=False, is_initialized=True)

    def _on_auth_event(self, event, session):
        if self.token.revoked:
            return
        if event == AuthEvent.SIGNED_IN and session is not None:
            if not self._already_applied(session.user):
                self._resolve(session.user, sign_out_if_missing=False)
        elif event in (AuthEvent.SIGNED_OUT, AuthEvent.USER_DELETED):
            self._clear()
        elif event in (AuthEvent.USER_UPDATED, AuthEvent.TOKEN_REFRESHED) and session is not None:
            if self._already_applied(session.user):
                self._write(identity=dict(session.user))
        self._write(is_loading=False)

    def close(self):
        """Tear down: unsubscribe and suppress every later state write"""
        self.token.revoke()
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def login(self, email, password):
        """
        Sign in with email and password and load the profile.

        Returns:
            None on success, otherwise the error (nothing is raised)
        """
        self._write(is_loading=True)
        try:
            session = self.auth.sign_in_with_password(email, password)
            if self._already_applied(session.user):
                return None

            generation = self._begin_transition()
            profile = self.fetch_profile(session.user_id)
            if profile is None:
                self._sign_out_quietly()
                self._clear()
                raise ProfileNotFoundError()

            self._write(generation, identity=dict(session.user), profile=dict(profile))
            return None
        except AcademyError as e:
            logger.error(f"Login error: {e}")
            return e
        finally:
            self._write(is_loading=False)

    def logout(self):
        """Sign out remotely, then clear the local session right away"""
        self._write(is_loading=True)
        try:
            self.auth.sign_out()
            self._clear()
            return None
        except AcademyError as e:
            logger.error(f"Logout error: {e}")
            return e
        finally:
            self._write(is_loading=False)

    def update_profile(self, updates):
        """Persist a partial profile update and merge it into the session"""
        state = self.state
        if not state.is_authenticated:
            return NoActiveSessionError()

        self._write(is_loading=True)
        try:
            self.backend.table(USERS_TABLE).update({'id': state.user_id}, updates)
            with self._lock:
                generation = self._generation
                current = self._state
            if current.profile is not None and current.user_id == state.user_id:
                self._write(generation, profile={**current.profile, **updates})
            return None
        except BackendError as e:
            logger.error(f"Update profile error: {e}")
            return e
        finally:
            self._write(is_loading=False)
