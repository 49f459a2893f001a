import base64

import pytest

from capture import ImageAsset
from errors import ApiError, DecodeError
from fakes import FakeResponse, FakeSession
from vision_client import VisionClient, VisionResult, encode_payload


@pytest.fixture
def asset(jpeg_bytes):
    return ImageAsset(data=jpeg_bytes, content_type='image/jpeg', name='flower-1-tulips.jpg')


def test_post_request(asset, credentials, tulip_response):
    session = FakeSession(post=FakeResponse(200, tulip_response))
    result = VisionClient(session=session).analyze(asset, credentials)

    method, url, kwargs = session.calls[0]
    assert method == 'post'
    assert url == 'https://floral.cognitiveservices.azure.com/vision/v3.2/analyze'
    assert kwargs['params'] == {
        'visualFeatures': 'Objects,Color,Description,Tags',
        'language': 'en',
        'model-version': 'latest',
    }
    assert kwargs['headers']['Ocp-Apim-Subscription-Key'] == 'vision-key-123'
    assert kwargs['headers']['Content-Type'] == 'application/octet-stream'
    assert kwargs['data'] == asset.data
    assert result.tags == [{'name': 'tulip', 'confidence': 0.82}]
    assert result.dominant_colors == ['Yellow']


def test_error_status(asset, credentials):
    session = FakeSession(post=FakeResponse(401, text='Access denied due to invalid subscription key'))
    with pytest.raises(ApiError) as excinfo:
        VisionClient(session=session).analyze(asset, credentials)
    assert excinfo.value.status == 401
    assert 'invalid subscription key' in excinfo.value.body


def test_invalid_json(asset, credentials):
    session = FakeSession(post=FakeResponse(200, None, text='<html>'))
    with pytest.raises(DecodeError):
        VisionClient(session=session).analyze(asset, credentials)


def test_missing_sections_are_empty():
    result = VisionResult({'requestId': 'abc'})
    assert result.tags == []
    assert result.objects == []
    assert result.dominant_colors == []
    assert result.captions == []
    assert VisionResult(None).to_dict() == {}


def test_raw_and_base64_payloads_match(jpeg_bytes):
    raw = encode_payload(jpeg_bytes)
    text = encode_payload(jpeg_bytes, as_text=True)
    assert isinstance(raw, bytes)
    assert isinstance(text, str)
    assert raw == base64.b64decode(text) == jpeg_bytes
