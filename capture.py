"""
Image acquisition: a picked file or a one-shot camera snapshot.

Both paths produce an ImageAsset holding the raw bytes, a MIME type and the
generated blob name. The camera is an explicit acquire/release resource; it
is released on every exit path, including errors.
"""

import io
import logging
import mimetypes
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

import cv2
from PIL import Image

from errors import DecodeError, DeviceError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = 'application/octet-stream'
CAMERA_FILENAME = 'camera-capture.jpg'
JPEG_QUALITY = 90


def blob_name_for(original_name, timestamp_ms=None):
    """flower-<timestamp>-<original-name>"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    original_name = os.path.basename(original_name or '') or 'image'
    return f'flower-{timestamp_ms}-{original_name}'


@dataclass(frozen=True)
class ImageAsset:
    data: bytes
    content_type: str
    name: str

    @classmethod
    def create(cls, data, content_type, original_name, timestamp_ms=None):
        return cls(
            data=bytes(data),
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            name=blob_name_for(original_name, timestamp_ms),
        )

    @property
    def size(self):
        return len(self.data)


def capture_from_file(file):
    """
    Wrap whatever the file picker handed us. No type or size checks: a bad
    file fails later at the storage or vision call.

    Accepts a werkzeug FileStorage, any readable object, or a path.
    """
    try:
        if isinstance(file, (str, os.PathLike)):
            filename = os.fspath(file)
            with open(filename, 'rb') as f:
                data = f.read()
            content_type = None
        else:
            filename = getattr(file, 'filename', None) or getattr(file, 'name', None) or ''
            content_type = getattr(file, 'mimetype', None) or getattr(file, 'content_type', None)
            data = file.read()
    except (OSError, ValueError) as e:
        raise DecodeError(f'Could not read file: {e}') from e

    if isinstance(data, str):
        data = data.encode('utf-8')
    if not content_type:
        content_type = mimetypes.guess_type(filename)[0] or DEFAULT_CONTENT_TYPE

    asset = ImageAsset.create(data, content_type, filename)
    logger.info('Captured file %s (%d bytes, %s)', asset.name, asset.size, asset.content_type)
    return asset


def encode_jpeg(frame, quality=JPEG_QUALITY):
    """Draw a BGR frame into an off-screen raster and return JPEG bytes"""
    try:
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        raster = Image.fromarray(rgb)
        buffer = io.BytesIO()
        raster.save(buffer, format='JPEG', quality=quality)
    except (cv2.error, ValueError, TypeError, OSError) as e:
        raise DecodeError(f'Could not encode camera frame: {e}') from e
    return buffer.getvalue()


class CameraState(str, Enum):
    IDLE = 'IDLE'
    STREAMING = 'STREAMING'
    CAPTURED = 'CAPTURED'


class CameraSource:
    """
    Idle -> Streaming -> (capture) -> Captured -> Idle.

    The device handle is owned by this object alone. toggle_camera() opens or
    releases it; capture() is single-shot and releases the device right after
    the frame is encoded.
    """

    def __init__(self, camera_index=0, opener=None):
        self.camera_index = camera_index
        self._opener = opener or cv2.VideoCapture
        self._handle = None
        self.tracks = []
        self.state = CameraState.IDLE

    @property
    def is_streaming(self):
        return self.state == CameraState.STREAMING

    def toggle_camera(self):
        if self.state == CameraState.STREAMING:
            self._release()
        else:
            self._acquire()
        return self.state

    def _acquire(self):
        try:
            handle = self._opener(self.camera_index)
        except cv2.error as e:
            raise DeviceError(f'Error accessing camera: {e}') from e
        if handle is None or not handle.isOpened():
            if handle is not None:
                handle.release()
            raise DeviceError(f'Camera {self.camera_index} is not available')
        self._handle = handle
        self.tracks = [handle]
        self.state = CameraState.STREAMING
        logger.info('Camera %s streaming', self.camera_index)

    def _release(self):
        for track in self.tracks:
            track.release()
        self._handle = None
        self.state = CameraState.IDLE
        logger.info('Camera %s released', self.camera_index)

    def release(self):
        """Stop the stream if one is open. Safe to call in any state."""
        if self._handle is not None or self.state != CameraState.IDLE:
            self._release()

    def capture(self):
        if self.state != CameraState.STREAMING:
            raise DeviceError('Camera is not streaming')
        try:
            ok, frame = self._handle.read()
            if not ok or frame is None:
                raise DeviceError('Could not read a frame from the camera')
            data = encode_jpeg(frame)
            self.state = CameraState.CAPTURED
        finally:
            self._release()

        asset = ImageAsset.create(data, 'image/jpeg', CAMERA_FILENAME)
        logger.info('Captured camera frame %s (%d bytes)', asset.name, asset.size)
        return asset

    @contextmanager
    def streaming(self):
        """Open the camera for the duration of the block, release it always"""
        if not self.is_streaming:
            self.toggle_camera()
        try:
            yield self
        finally:
            self.release()

    def capture_from_camera(self):
        with self.streaming() as camera:
            return camera.capture()
