"""
Cancellation tokens for continuations of remote calls.

A token is handed to whatever owns some state (the session manager, a page
controller). When the owner is torn down it revokes the token, and every
continuation checks the token before writing results back.
"""
import threading


class CancellationToken:

    def __init__(self):
        self._revoked = threading.Event()
        self._callbacks = []
        self._lock = threading.Lock()

    @property
    def revoked(self):
        return self._revoked.is_set()

    @property
    def alive(self):
        return not self._revoked.is_set()

    def revoke(self):
        """Revoke the token and run the registered callbacks once"""
        with self._lock:
            if self._revoked.is_set():
                return
            self._revoked.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def on_revoke(self, callback):
        """Run callback when the token is revoked (immediately if it already is)"""
        with self._lock:
            if not self._revoked.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def child(self):
        """A token revoked together with this one, but revocable on its own"""
        token = CancellationToken()
        self.on_revoke(token.revoke)
        return token
