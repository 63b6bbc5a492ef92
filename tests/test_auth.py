import time
from unittest.mock import MagicMock

import pytest

from academy.auth import AuthClient, AuthEvent, AuthSession, FileSessionStore, MemorySessionStore
from academy.errors import AuthError, BackendError

TOKEN_RESPONSE = {
    'access_token': 'at-1',
    'refresh_token': 'rt-1',
    'expires_in': 3600,
    'user': {'id': 'u1', 'email': 'a@example.com'},
}


def ok(body):
    resp = MagicMock()
    resp.json.return_value = body
    return resp


@pytest.fixture
def backend():
    return MagicMock()


@pytest.fixture
def client(backend):
    return AuthClient(backend, MemorySessionStore())


def recorder(client):
    events = []
    client.on_auth_state_change(lambda event, session: events.append((event, session)))
    return events


def test_sign_in_stores_session_and_notifies(client, backend):
    backend.request.return_value = ok(TOKEN_RESPONSE)
    events = recorder(client)

    session = client.sign_in_with_password('a@example.com', 'pw')

    assert session.user_id == 'u1'
    assert backend.request.call_args.kwargs['params'] == {'grant_type': 'password'}
    assert backend.request.call_args.kwargs['json'] == {'email': 'a@example.com', 'password': 'pw'}
    backend.set_access_token.assert_called_with('at-1')
    assert events == [(AuthEvent.SIGNED_IN, session)]
    assert client.get_session().access_token == 'at-1'


def test_sign_in_failure_raises_auth_error(client, backend):
    backend.request.side_effect = BackendError("Invalid login credentials", status=400)
    events = recorder(client)

    with pytest.raises(AuthError, match="Invalid login credentials"):
        client.sign_in_with_password('a@example.com', 'bad')
    assert events == []
    assert client.get_session() is None


def test_get_session_refreshes_expired_token(client, backend):
    client.store.save(AuthSession('old', 'rt-0', time.time() - 10, {'id': 'u1'}).to_dict())
    backend.request.return_value = ok({'access_token': 'at-2', 'refresh_token': 'rt-2', 'expires_in': 3600})
    events = recorder(client)

    session = client.get_session()

    assert session.access_token == 'at-2'
    assert session.user == {'id': 'u1'}
    assert backend.request.call_args.kwargs['params'] == {'grant_type': 'refresh_token'}
    assert backend.request.call_args.kwargs['json'] == {'refresh_token': 'rt-0'}
    assert events[0][0] == AuthEvent.TOKEN_REFRESHED


def test_failed_refresh_clears_session(client, backend):
    client.store.save(AuthSession('old', 'rt-0', time.time() - 10, {'id': 'u1'}).to_dict())
    backend.request.side_effect = BackendError("Invalid Refresh Token", status=400)

    with pytest.raises(AuthError):
        client.get_session()
    assert client.store.load() is None


def test_malformed_stored_session_is_discarded(client):
    client.store.save({'access_token': 'x'})
    assert client.get_session() is None
    assert client.store.load() is None


def test_sign_out_clears_and_notifies(client, backend):
    backend.request.return_value = ok(TOKEN_RESPONSE)
    client.sign_in_with_password('a@example.com', 'pw')
    events = recorder(client)

    client.sign_out()

    method, path = backend.request.call_args.args
    assert (method, path) == ('POST', '/auth/v1/logout')
    assert backend.request.call_args.kwargs['headers'] == {'Authorization': 'Bearer at-1'}
    assert client.get_session() is None
    assert events == [(AuthEvent.SIGNED_OUT, None)]


def test_sign_out_with_revoked_token_still_clears(client, backend):
    backend.request.return_value = ok(TOKEN_RESPONSE)
    client.sign_in_with_password('a@example.com', 'pw')
    backend.request.side_effect = BackendError("Session not found", status=404)

    client.sign_out()
    assert client.get_session() is None


def test_sign_out_server_error_keeps_session(client, backend):
    backend.request.return_value = ok(TOKEN_RESPONSE)
    client.sign_in_with_password('a@example.com', 'pw')
    backend.request.side_effect = BackendError("Server error (500)", status=500)

    with pytest.raises(AuthError):
        client.sign_out()
    assert client.get_session() is not None


def test_sign_up_accepts_user_or_session_body(client, backend):
    backend.request.return_value = ok({'id': 'u9', 'email': 'n@example.com'})
    assert client.sign_up('n@example.com', 'pw')['id'] == 'u9'

    backend.request.return_value = ok({**TOKEN_RESPONSE, 'user': {'id': 'u10'}})
    assert client.sign_up('m@example.com', 'pw')['id'] == 'u10'


def test_update_user_requires_session(client):
    with pytest.raises(AuthError, match="No user is logged in"):
        client.update_user({'password': 'x'})


def test_update_user_notifies_with_new_identity(client, backend):
    backend.request.return_value = ok(TOKEN_RESPONSE)
    client.sign_in_with_password('a@example.com', 'pw')
    backend.request.return_value = ok({'id': 'u1', 'email': 'b@example.com'})
    events = recorder(client)

    user = client.update_user({'email': 'b@example.com'})

    assert user['email'] == 'b@example.com'
    assert events[0][0] == AuthEvent.USER_UPDATED
    assert client.get_session().user['email'] == 'b@example.com'


def test_unsubscribe_stops_notifications(client, backend):
    events = []
    subscription = client.on_auth_state_change(lambda event, session: events.append(event))
    subscription.unsubscribe()
    subscription.unsubscribe()

    backend.request.return_value = ok(TOKEN_RESPONSE)
    client.sign_in_with_password('a@example.com', 'pw')
    assert events == []


def test_failing_listener_does_not_break_sign_in(client, backend):
    def broken(event, session):
        raise RuntimeError("boom")

    client.on_auth_state_change(broken)
    events = recorder(client)
    backend.request.return_value = ok(TOKEN_RESPONSE)

    client.sign_in_with_password('a@example.com', 'pw')
    assert [e for e, _ in events] == [AuthEvent.SIGNED_IN]


def test_admin_calls_use_service_key(client, backend):
    client.admin_delete_user('u1')
    assert backend.request.call_args.args == ('DELETE', '/auth/v1/admin/users/u1')
    assert backend.request.call_args.kwargs['admin'] is True


def test_file_store_round_trip(tmp_path):
    store = FileSessionStore("browser-1", str(tmp_path / ".last_session"))
    assert store.load() is None

    store.save({'access_token': 'a'})
    assert store.load() == {'access_token': 'a'}
    store.clear()
    assert store.load() is None


def test_file_stores_of_different_browsers_are_separate(tmp_path):
    path = str(tmp_path / ".last_session")
    first = FileSessionStore("browser-1", path)
    second = FileSessionStore("browser-2", path)

    first.save({'access_token': 'a'})
    assert second.load() is None

    second.save({'access_token': 'b'})
    second.clear()
    assert first.load() == {'access_token': 'a'}
