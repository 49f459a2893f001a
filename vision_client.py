"""
Client for the cloud image-analysis endpoint.

One POST requests objects, dominant colors, a description and tags together.
Any part of the response may be missing; accessors below return empty values
instead of raising.
"""

import base64
import logging

import requests

from errors import ApiError, DecodeError

logger = logging.getLogger(__name__)

ANALYZE_PATH = '/vision/v3.2/analyze'
ANALYZE_PARAMS = {
    'visualFeatures': 'Objects,Color,Description,Tags',
    'language': 'en',
    'model-version': 'latest',
}


def encode_payload(data, as_text=False):
    """Raw bytes, or base64 text when the transport needs text framing"""
    if as_text:
        return base64.b64encode(data).decode('ascii')
    return bytes(data)


class VisionResult:
    """Read-only view over the analyze response"""

    def __init__(self, raw=None):
        self.raw = raw if isinstance(raw, dict) else {}

    def _list(self, value):
        return value if isinstance(value, list) else []

    def _section(self, key):
        value = self.raw.get(key)
        return value if isinstance(value, dict) else {}

    @property
    def tags(self):
        return self._list(self.raw.get('tags'))

    @property
    def objects(self):
        return self._list(self.raw.get('objects'))

    @property
    def dominant_colors(self):
        return self._list(self._section('color').get('dominantColors'))

    @property
    def captions(self):
        return self._list(self._section('description').get('captions'))

    def to_dict(self):
        return dict(self.raw)


class VisionClient:
    def __init__(self, session=None, timeout=None):
        self.session = session or requests.Session()
        self.timeout = timeout

    def analyze_url(self, credentials):
        return credentials.vision_endpoint.rstrip('/') + ANALYZE_PATH

    def analyze(self, asset, credentials):
        url = self.analyze_url(credentials)
        headers = {
            'Ocp-Apim-Subscription-Key': credentials.vision_api_key,
            'Content-Type': 'application/octet-stream',
        }
        body = encode_payload(asset.data)
        logger.info('Sending %s to vision API (%d bytes)', asset.name, len(body))

        try:
            response = self.session.post(url, params=ANALYZE_PARAMS, data=body,
                                         headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise ApiError(None, str(e)) from e

        if not 200 <= response.status_code < 300:
            logger.error('Vision API error: %s %s', response.status_code, response.text)
            raise ApiError(response.status_code, response.text)

        try:
            raw = response.json()
        except ValueError as e:
            raise DecodeError(f'Vision API returned invalid JSON: {e}') from e

        logger.debug('Vision API response: %s', raw)
        return VisionResult(raw)
