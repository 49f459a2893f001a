"""
Credential provider for FloralBot.

The backend reads the five third-party settings from the environment and
hands them to clients as one JSON object from GET /config. Clients build a
Credentials instance from that object once and pass it into the pipeline.
"""

import logging
import os
from dataclasses import dataclass

import requests

from errors import ConfigError

logger = logging.getLogger(__name__)

# Wire name -> attribute name, in the order the backend reports them
CONFIG_KEYS = {
    'STORAGE_ACCOUNT': 'storage_account',
    'STORAGE_CONTAINER': 'storage_container',
    'SAS_TOKEN': 'sas_token',
    'VISION_ENDPOINT': 'vision_endpoint',
    'VISION_API_KEY': 'vision_api_key',
}


def normalize_sas_token(token):
    """Make sure the token can be appended to a URL as-is"""
    token = (token or '').strip()
    if token and not token.startswith('?'):
        token = '?' + token
    return token


@dataclass(frozen=True)
class Credentials:
    storage_account: str
    storage_container: str
    sas_token: str
    vision_endpoint: str
    vision_api_key: str

    def __post_init__(self):
        missing = [
            wire for wire, attr in CONFIG_KEYS.items()
            if not isinstance(getattr(self, attr), str) or not getattr(self, attr).strip()
        ]
        if missing:
            raise ConfigError(missing=missing)

    def __repr__(self):
        # Token and key stay out of logs and tracebacks
        return (f'Credentials(storage_account={self.storage_account!r}, '
                f'storage_container={self.storage_container!r}, '
                f'vision_endpoint={self.vision_endpoint!r}, '
                f'sas_token=***, vision_api_key=***)')

    @classmethod
    def from_mapping(cls, data):
        """Build credentials from the GET /config payload"""
        if not isinstance(data, dict):
            raise ConfigError('Configuration payload is not a JSON object')
        missing = [wire for wire in CONFIG_KEYS if not data.get(wire)]
        if missing:
            raise ConfigError(missing=missing)
        values = {attr: str(data[wire]) for wire, attr in CONFIG_KEYS.items()}
        values['sas_token'] = normalize_sas_token(values['sas_token'])
        return cls(**values)

    def to_mapping(self):
        return {wire: getattr(self, attr) for wire, attr in CONFIG_KEYS.items()}


def presence_report(environ=None):
    """Present/Missing for every setting, without revealing any value"""
    environ = os.environ if environ is None else environ
    return {wire: 'Present' if environ.get(wire) else 'Missing' for wire in CONFIG_KEYS}


def load_from_env(environ=None):
    """Server side: read the settings from the process environment"""
    environ = os.environ if environ is None else environ
    data = {wire: environ.get(wire) for wire in CONFIG_KEYS}
    missing = [wire for wire, value in data.items() if not value]
    if missing:
        logger.error('Missing required values: %s', missing)
        raise ConfigError(missing=missing)
    return Credentials.from_mapping(data)


def fetch_credentials(config_url, session=None, timeout=None):
    """Client side: GET the /config endpoint once at startup"""
    http = session or requests
    try:
        response = http.get(config_url, timeout=timeout)
    except requests.RequestException as e:
        raise ConfigError(f'Could not reach configuration endpoint: {e}') from e

    try:
        payload = response.json()
    except ValueError:
        payload = {}

    if not response.ok:
        message = payload.get('error') if isinstance(payload, dict) else None
        raise ConfigError(message or f'Configuration request failed: {response.status_code}')

    credentials = Credentials.from_mapping(payload)
    logger.info('Config loaded: %r', credentials)
    return credentials

