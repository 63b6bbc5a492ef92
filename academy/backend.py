"""
Client for the hosted backend's table API.

Rows are plain dicts. Every failure (connection, timeout, HTTP status)
surfaces as a BackendError whose message can be shown to the user.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from .errors import BackendError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
REST_PATH = "/rest/v1"


@dataclass
class BackendConfig:
    url: str
    anon_key: str
    service_key: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    persist_session: bool = False


def error_message(resp):
    """Pick the most readable error text out of a failed response"""
    try:
        body = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ('message', 'msg', 'error_description', 'error'):
            if body.get(key):
                return str(body[key])

    code = resp.status_code
    if code == 401 or code == 403:
        return "Not authorized"
    elif code == 404:
        return "Not found (404)"
    elif code >= 500:
        return f"Server error ({code})"
    return f"HTTP {code}"


def _filter_value(value):
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{'true' if value else 'false'}"
    return f"eq.{value}"


def build_params(filters=None, order=None):
    """Translate equality filters and an order column into query parameters"""
    params = {}
    for column, value in (filters or {}).items():
        params[column] = _filter_value(value)
    if order:
        desc = order.startswith('-')
        params['order'] = f"{order.lstrip('-')}.{'desc' if desc else 'asc'}"
    return params


class BackendClient:
    """
    Holds the HTTP session and credentials for one user of the backend.

    Usage:
        client = BackendClient(config)
        rows = client.table('modules').select(order='title')
    """

    def __init__(self, config, http=None):
        self.config = config
        self.http = http or requests.Session()
        self.http.headers.update({
            'apikey': config.anon_key,
            'Content-Type': 'application/json',
        })
        self.set_access_token(None)

    def set_access_token(self, token):
        """Authenticate table requests as a user, or as anon when token is None"""
        self.http.headers['Authorization'] = f"Bearer {token or self.config.anon_key}"

    def request(self, method, path, admin=False, **kwargs):
        """
        Send a request relative to the backend URL.

        Args:
            method: HTTP method
            path: Path starting with '/'
            admin: Use the service key instead of the session credentials

        Returns:
            requests.Response with a 2xx status

        Raises:
            BackendError: transport failure or non-2xx status
        """
        url = f"{self.config.url}{path}"
        kwargs.setdefault('timeout', self.config.timeout)
        if admin:
            if not self.config.service_key:
                raise BackendError("This action requires the service key to be configured")
            headers = dict(kwargs.pop('headers', None) or {})
            headers['apikey'] = self.config.service_key
            headers['Authorization'] = f"Bearer {self.config.service_key}"
            kwargs['headers'] = headers

        try:
            resp = self.http.request(method, url, **kwargs)
        except requests.Timeout:
            logger.error(f"{method} {path}: timeout")
            raise BackendError("Request timed out")
        except requests.ConnectionError:
            logger.error(f"{method} {path}: connection failed")
            raise BackendError("Connection failed")
        except requests.RequestException as e:
            logger.error(f"{method} {path}: {e}")
            raise BackendError(str(e))

        if not resp.ok:
            message = error_message(resp)
            logger.error(f"{method} {path}: status={resp.status_code} {message}")
            raise BackendError(message, status=resp.status_code)
        return resp

    def table(self, name):
        return TableQuery(self, name)


class TableQuery:
    """CRUD operations scoped to one table"""

    def __init__(self, client, name):
        self.client = client
        self.name = name
        self.path = f"{REST_PATH}/{name}"

    def select(self, filters=None, order=None):
        params = build_params(filters, order)
        params['select'] = '*'
        resp = self.client.request('GET', self.path, params=params)
        rows = resp.json()
        logger.info(f"select {self.name}: {len(rows)} rows")
        return rows

    def insert(self, row):
        resp = self.client.request(
            'POST', self.path, json=[row],
            headers={'Prefer': 'return=representation'}
        )
        rows = resp.json() or []
        return rows[0] if rows else dict(row)

    def update(self, filters, partial):
        if not filters:
            raise BackendError(f"Refusing to update every row of {self.name}")
        self.client.request(
            'PATCH', self.path, params=build_params(filters), json=partial,
            headers={'Prefer': 'return=minimal'}
        )

    def delete(self, filters):
        if not filters:
            raise BackendError(f"Refusing to delete every row of {self.name}")
        self.client.request('DELETE', self.path, params=build_params(filters))
