import io

import pytest
from PIL import Image

from credentials import Credentials
from fakes import SAS_TOKEN


@pytest.fixture
def credentials():
    return Credentials(
        storage_account='floralstore',
        storage_container='flowers',
        sas_token=SAS_TOKEN,
        vision_endpoint='https://floral.cognitiveservices.azure.com/',
        vision_api_key='vision-key-123',
    )


@pytest.fixture
def jpeg_bytes():
    buffer = io.BytesIO()
    Image.new('RGB', (64, 64), color=(250, 220, 40)).save(buffer, format='JPEG')
    return buffer.getvalue()


@pytest.fixture
def tulip_response():
    return {
        'tags': [{'name': 'tulip', 'confidence': 0.82}],
        'objects': [],
        'color': {'dominantColors': ['Yellow']},
        'description': {'captions': [{'text': 'a field of tulips'}]},
    }
