import os
import json
import logging

from .backend import BackendConfig, DEFAULT_TIMEOUT
from .errors import ConfigError

logger = logging.getLogger(__name__)

# Constants
CONFIG_FILE = ".config"
LAST_SESSION_FILE = ".last_session"

CONFIG_KEYS = ('backend_url', 'anon_key', 'service_key', 'request_timeout', 'persist_session')

# Environment variables win over the config file
ENV_OVERRIDES = {
    'backend_url': 'ACADEMY_BACKEND_URL',
    'anon_key': 'ACADEMY_ANON_KEY',
    'service_key': 'ACADEMY_SERVICE_KEY',
}


def read_config(config_path=CONFIG_FILE):
    """Read backend settings from the key=value config file"""
    values = {}
    if not os.path.exists(config_path):
        return values

    try:
        with open(config_path, 'r') as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                if '=' in line:
                    key, value = line.split('=', 1)
                    key = key.strip().lower()
                    value = value.strip().strip('"').strip("'")
                    if key in CONFIG_KEYS:
                        values[key] = value
    except OSError as e:
        logger.warning(f"Could not read config file {config_path}: {e}")
    return values


def _as_bool(value, default=False):
    if value is None or value == "":
        return default
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def load_settings(config_path=CONFIG_FILE, environ=None):
    """
    Build the backend configuration from the config file and the environment.

    Raises:
        ConfigError: backend_url or anon_key is missing, or the timeout is not a number
    """
    environ = os.environ if environ is None else environ
    values = read_config(config_path)
    for key, env_name in ENV_OVERRIDES.items():
        if environ.get(env_name):
            values[key] = environ[env_name]

    if not values.get('backend_url') or not values.get('anon_key'):
        raise ConfigError(
            f"backend_url and anon_key must be set in {config_path} "
            f"or via {ENV_OVERRIDES['backend_url']} / {ENV_OVERRIDES['anon_key']}"
        )

    try:
        timeout = float(values.get('request_timeout') or DEFAULT_TIMEOUT)
    except ValueError:
        raise ConfigError(f"request_timeout must be a number, got {values['request_timeout']!r}")

    return BackendConfig(
        url=values['backend_url'].rstrip('/'),
        anon_key=values['anon_key'],
        service_key=values.get('service_key') or None,
        timeout=timeout,
        persist_session=_as_bool(values.get('persist_session')),
    )


def load_last_session(path=LAST_SESSION_FILE):
    """Load last session data"""
    if os.path.exists(path):
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {path}: {e}")
    return {}


def save_last_session(data, path=LAST_SESSION_FILE):
    """Save session data for next run"""
    try:
        existing = load_last_session(path)
        existing.update(data)
        with open(path, 'w') as f:
            json.dump(existing, f, indent=2)
        return True
    except OSError as e:
        logger.error(f"Could not write session file {path}: {e}")
        return False


def clear_last_session(key=None, path=LAST_SESSION_FILE):
    """Remove one key from the session file, or the whole file when key is None"""
    try:
        if key is None:
            if os.path.exists(path):
                os.remove(path)
            return True
        existing = load_last_session(path)
        if key in existing:
            del existing[key]
            with open(path, 'w') as f:
                json.dump(existing, f, indent=2)
        return True
    except OSError as e:
        logger.error(f"Could not clear session file {path}: {e}")
        return False
