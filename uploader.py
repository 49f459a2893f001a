"""
Blob uploader: a single PUT of the raw image bytes to a pre-signed URL.
"""

import logging
from dataclasses import dataclass
from urllib.parse import quote

import requests

from errors import UploadError

logger = logging.getLogger(__name__)

STORAGE_HOST = 'blob.core.windows.net'


@dataclass(frozen=True)
class RemoteImageRef:
    url: str
    blob_name: str


def mask_token(text, token):
    if token and text:
        return text.replace(token, '?<sas-token>')
    return text


class BlobUploader:
    def __init__(self, session=None, scheme='https', storage_host=STORAGE_HOST, timeout=None):
        self.session = session or requests.Session()
        self.scheme = scheme
        self.storage_host = storage_host
        self.timeout = timeout

    def blob_url(self, asset, credentials):
        """Blob URL without the token"""
        return (f'{self.scheme}://{credentials.storage_account}.{self.storage_host}/'
                f'{credentials.storage_container}/{quote(asset.name)}')

    def upload(self, asset, credentials):
        blob_url = self.blob_url(asset, credentials)
        signed_url = blob_url + credentials.sas_token
        headers = {
            'x-ms-blob-type': 'BlockBlob',
            'Content-Type': asset.content_type,
        }
        logger.info('Uploading %s (%d bytes) to %s', asset.name, len(asset.data), blob_url)

        try:
            response = self.session.put(signed_url, data=asset.data, headers=headers,
                                        timeout=self.timeout)
        except requests.RequestException as e:
            raise UploadError(None, mask_token(str(e), credentials.sas_token)) from e

        if not 200 <= response.status_code < 300:
            body = mask_token(response.text, credentials.sas_token)
            logger.error('Upload failed: %s %s', response.status_code, body)
            raise UploadError(response.status_code, body)

        logger.info('Upload successful: %s', blob_url)
        return RemoteImageRef(url=blob_url, blob_name=asset.name)
