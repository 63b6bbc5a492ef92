"""
Shared plumbing for page controllers.

A controller holds the local state of one page (rows, loading flag, error
and feedback message) and performs its remote calls. It is created when the
page is shown and closed when the user navigates away; results arriving
after close are dropped.
"""
import logging
from dataclasses import dataclass

from .cancellation import CancellationToken
from .errors import AcademyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Message:
    text: str = ""
    kind: str = ""  # 'success' | 'error'

    def __bool__(self):
        return bool(self.text)

    @classmethod
    def success(cls, text):
        return cls(text, 'success')

    @classmethod
    def failure(cls, text):
        return cls(text, 'error')


class ViewController:

    def __init__(self, backend, token=None):
        self.backend = backend
        self.token = token or CancellationToken()
        self.loading = False
        self.error = None
        self.message = Message()

    @property
    def closed(self):
        return self.token.revoked

    def close(self):
        self.token.revoke()

    def clear_message(self):
        self.message = Message()

    def run(self, action, what, failure=None, on_error='message'):
        """
        Run a remote action and convert failures into page state.

        Args:
            action: Callable doing the remote work
            what: Short description for the log ('fetching modules')
            failure: Fallback text when the error carries no message
            on_error: 'message' to set self.message, 'error' to set self.error,
                None to leave both alone

        Returns:
            (ok, result); result is None when the action failed or the
            controller was closed in the meantime
        """
        self.loading = True
        try:
            result = action()
        except AcademyError as e:
            logger.error(f"Error {what}: {e}")
            if not self.closed:
                text = failure if on_error == 'error' and failure else (str(e) or failure)
                if on_error == 'error':
                    self.error = text
                elif on_error == 'message':
                    self.message = Message.failure(text)
            return False, None
        finally:
            if not self.closed:
                self.loading = False

        if self.closed:
            logger.debug(f"Page closed, dropping result of {what}")
            return False, None
        return True, result
