"""
The FloralBot pipeline: upload -> analyze -> aggregate -> render.

A FloralPipeline is built once with its credentials and collaborators and
then run once per image. Stages run strictly one after another. A failing
stage stops that image, is logged, and leaves an error panel in the
presenter; nothing is retried.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from aggregator import FlowerAnalysis, aggregate
from capture import capture_from_file
from errors import ApiError, DecodeError, DeviceError, FloralBotError, UploadError
from presenter import Presenter
from uploader import BlobUploader, RemoteImageRef
from vision_client import VisionClient

logger = logging.getLogger(__name__)


@dataclass
class PipelineOutcome:
    ok: bool
    html: str
    stage: Optional[str] = None
    message: str = ''
    error: Optional[FloralBotError] = None
    image_ref: Optional[RemoteImageRef] = None
    analysis: Optional[FlowerAnalysis] = None


class FloralPipeline:
    def __init__(self, credentials, uploader=None, vision_client=None, presenter=None,
                 timeout=None):
        self.credentials = credentials
        self.uploader = uploader or BlobUploader(timeout=timeout)
        self.vision_client = vision_client or VisionClient(timeout=timeout)
        self.presenter = presenter or Presenter()

    def _fail(self, stage, error):
        logger.error('%s failed: %s', stage, error.message)
        html = self.presenter.render_error(error.user_message)
        return PipelineOutcome(ok=False, html=html, stage=stage,
                               message=error.user_message, error=error)

    def run(self, asset):
        try:
            image_ref = self.uploader.upload(asset, self.credentials)
        except (UploadError, DecodeError) as e:
            return self._fail('upload', e)

        try:
            vision_result = self.vision_client.analyze(asset, self.credentials)
        except (ApiError, DecodeError) as e:
            return self._fail('analyze', e)

        analysis = aggregate(vision_result)
        logger.info('Found %d flower type(s) in %s', len(analysis.flowers), asset.name)

        upload_info = {
            'url': image_ref.url,
            'blobName': image_ref.blob_name,
            'contentType': asset.content_type,
            'size': asset.size,
        }
        html = self.presenter.render(analysis, image_ref,
                                     raw_vision=vision_result.to_dict(),
                                     upload_info=upload_info)
        return PipelineOutcome(ok=True, html=html, image_ref=image_ref, analysis=analysis)

    def run_file(self, file):
        try:
            asset = capture_from_file(file)
        except DecodeError as e:
            return self._fail('capture', e)
        return self.run(asset)

    def run_camera(self, camera):
        try:
            asset = camera.capture_from_camera()
        except (DeviceError, DecodeError) as e:
            return self._fail('capture', e)
        return self.run(asset)
