import pytest
import requests

from capture import ImageAsset
from errors import UploadError
from fakes import FakeResponse, FakeSession, SAS_TOKEN
from uploader import BlobUploader


@pytest.fixture
def asset(jpeg_bytes):
    return ImageAsset(data=jpeg_bytes, content_type='image/jpeg', name='flower-1700000000000-tulips.jpg')


def test_put_request(asset, credentials):
    session = FakeSession(put=FakeResponse(201))
    BlobUploader(session=session).upload(asset, credentials)

    method, url, kwargs = session.calls[0]
    assert method == 'put'
    assert url == ('https://floralstore.blob.core.windows.net/flowers/'
                   'flower-1700000000000-tulips.jpg' + SAS_TOKEN)
    assert kwargs['data'] == asset.data
    assert kwargs['headers'] == {'x-ms-blob-type': 'BlockBlob', 'Content-Type': 'image/jpeg'}


def test_returned_url_has_no_token(asset, credentials):
    session = FakeSession(put=FakeResponse(201))
    ref = BlobUploader(session=session).upload(asset, credentials)
    assert ref.url == 'https://floralstore.blob.core.windows.net/flowers/flower-1700000000000-tulips.jpg'
    assert SAS_TOKEN not in ref.url
    assert 'sig=' not in ref.url
    assert ref.blob_name == asset.name


def test_custom_host(asset, credentials):
    session = FakeSession(put=FakeResponse(200))
    uploader = BlobUploader(session=session, scheme='http', storage_host='127.0.0.1:10000')
    ref = uploader.upload(asset, credentials)
    assert ref.url.startswith('http://floralstore.127.0.0.1:10000/flowers/')


def test_non_2xx_raises_with_body(asset, credentials):
    session = FakeSession(put=FakeResponse(403, text='AuthenticationFailed'))
    with pytest.raises(UploadError) as excinfo:
        BlobUploader(session=session).upload(asset, credentials)
    assert excinfo.value.status == 403
    assert excinfo.value.body == 'AuthenticationFailed'
    assert len(session.calls) == 1


def test_connection_error_hides_token(asset, credentials):
    error = requests.ConnectionError('cannot reach https://floralstore.blob.core.windows.net/x' + SAS_TOKEN)
    session = FakeSession(put=error)
    with pytest.raises(UploadError) as excinfo:
        BlobUploader(session=session).upload(asset, credentials)
    assert excinfo.value.status is None
    assert SAS_TOKEN not in excinfo.value.body
