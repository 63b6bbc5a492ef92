"""
In-memory stand-ins for the hosted backend and its auth service.
"""
import time

import pytest

from academy.auth import AuthEvent, AuthSession, Subscription
from academy.errors import AuthError, BackendError


def _matches(row, filters):
    return all(str(row.get(k)) == str(v) for k, v in (filters or {}).items())


class FakeTable:

    def __init__(self, backend, name):
        self.backend = backend
        self.name = name

    @property
    def rows(self):
        return self.backend.tables.setdefault(self.name, [])

    def _record(self, op, *args):
        self.backend.calls.append((self.name, op) + args)
        failure = self.backend.failures.get((self.name, op))
        if failure is not None:
            raise failure

    def select(self, filters=None, order=None):
        self._record('select', filters)
        hook = self.backend.before_select.get(self.name)
        if hook is not None:
            hook(filters)
        rows = [dict(r) for r in self.rows if _matches(r, filters)]
        if order:
            rows.sort(key=lambda r: r.get(order))
        return rows

    def insert(self, row):
        self._record('insert', row)
        row = dict(row)
        row.setdefault('id', self.backend.next_id())
        self.rows.append(row)
        return dict(row)

    def update(self, filters, partial):
        self._record('update', filters, partial)
        for row in self.rows:
            if _matches(row, filters):
                row.update(partial)

    def delete(self, filters):
        self._record('delete', filters)
        self.backend.tables[self.name] = [r for r in self.rows if not _matches(r, filters)]


class FakeBackend:

    def __init__(self):
        self.tables = {}
        self.calls = []
        self.failures = {}
        self.before_select = {}
        self._id = 100

    def next_id(self):
        self._id += 1
        return self._id

    def set_access_token(self, token):
        pass

    def table(self, name):
        return FakeTable(self, name)

    def mutations(self):
        return [c for c in self.calls if c[1] in ('insert', 'update', 'delete')]


def make_session(user_id, email):
    return AuthSession(
        access_token=f"token-{user_id}",
        refresh_token=f"refresh-{user_id}",
        expires_at=time.time() + 3600,
        user={'id': user_id, 'email': email, 'aud': 'authenticated'},
    )


class FakeAuth:
    """Implements the AuthClient interface used by SessionManager and views"""

    def __init__(self):
        self.accounts = {}  # email -> (password, user_id)
        self.session = None
        self.session_error = None
        self.sign_out_calls = 0
        self.sign_out_error = None
        self.updates = []
        self.admin_updates = []
        self.admin_deletes = []
        self.signups = []
        self.subscriptions = []

    def add_account(self, user_id, email, password="secret"):
        self.accounts[email] = (password, user_id)

    def on_auth_state_change(self, listener):
        subscription = Subscription(self, listener)
        self.subscriptions.append(subscription)
        return subscription

    def _remove_listener(self, subscription):
        if subscription in self.subscriptions:
            self.subscriptions.remove(subscription)

    def emit(self, event, session):
        for subscription in list(self.subscriptions):
            subscription.listener(event, session)

    def get_session(self):
        if self.session_error is not None:
            raise self.session_error
        return self.session

    def sign_in_with_password(self, email, password):
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise AuthError("Invalid login credentials", status=400)
        self.session = make_session(account[1], email)
        self.emit(AuthEvent.SIGNED_IN, self.session)
        return self.session

    def sign_out(self):
        self.sign_out_calls += 1
        if self.sign_out_error is not None:
            raise self.sign_out_error
        self.session = None
        self.emit(AuthEvent.SIGNED_OUT, None)

    def sign_up(self, email, password):
        user_id = f"new-{len(self.signups) + 1}"
        self.signups.append((email, password))
        self.add_account(user_id, email, password)
        return {'id': user_id, 'email': email}

    def update_user(self, attrs):
        if self.session is None:
            raise AuthError("No user is logged in")
        self.updates.append(attrs)
        return self.session.user

    def admin_update_user(self, user_id, attrs):
        self.admin_updates.append((user_id, attrs))
        return {'id': user_id}

    def admin_delete_user(self, user_id):
        self.admin_deletes.append(user_id)


@pytest.fixture
def backend():
    fake = FakeBackend()
    fake.tables['users'] = [
        {'id': 'u-admin', 'name': 'Ada Admin', 'email': 'ada@example.com', 'role': 'admin'},
        {'id': 'u-learner', 'name': 'Lee Learner', 'email': 'lee@example.com', 'role': 'user'},
    ]
    fake.tables['modules'] = [
        {'id': 1, 'title': 'Breathing'},
        {'id': 2, 'title': 'Awareness'},
    ]
    fake.tables['chapters'] = [
        {'id': 10, 'title': 'Intro', 'youtube_link': 'https://youtu.be/dQw4w9WgXcQ', 'status': 'live', 'module_id': 1},
        {'id': 11, 'title': 'Box breathing', 'youtube_link': 'https://www.youtube.com/watch?v=aaaaaaaaaaa', 'status': 'draft', 'module_id': 1},
        {'id': 12, 'title': 'Body scan', 'youtube_link': 'https://www.youtube.com/watch?v=bbbbbbbbbbb', 'status': 'live', 'module_id': 2},
        {'id': 13, 'title': 'Anchors', 'youtube_link': 'https://www.youtube.com/embed/ccccccccccc', 'status': 'live', 'module_id': 2},
    ]
    return fake


@pytest.fixture
def auth():
    fake = FakeAuth()
    fake.add_account('u-admin', 'ada@example.com')
    fake.add_account('u-learner', 'lee@example.com')
    fake.add_account('u-ghost', 'ghost@example.com')
    return fake


@pytest.fixture
def manager(auth, backend):
    from academy.session_manager import SessionManager
    mgr = SessionManager(auth, backend)
    yield mgr
    mgr.close()


@pytest.fixture
def logged_in(manager):
    """An initialized session signed in as the learner"""
    manager.initialize()
    assert manager.login('lee@example.com', 'secret') is None
    return manager
