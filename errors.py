"""
Error types for the FloralBot pipeline.

Every error carries a short message that is safe to show to the user.
"""


class FloralBotError(Exception):
    """Base class for every pipeline failure"""

    user_message = 'Something went wrong while analyzing the image.'

    def __init__(self, message=None):
        super().__init__(message or self.user_message)
        self.message = message or self.user_message


class ConfigError(FloralBotError):
    """Credentials are missing or invalid. Nothing works without them."""

    user_message = 'Configuration is incomplete. Please contact the site administrator.'

    def __init__(self, message=None, missing=()):
        self.missing = tuple(missing)
        if message is None and self.missing:
            message = f'Missing required configuration values: {", ".join(self.missing)}'
        super().__init__(message)


class DeviceError(FloralBotError):
    """Camera could not be opened or read. File upload still works."""

    user_message = 'Unable to access the camera. Please make sure you have granted camera permissions.'


class UploadError(FloralBotError):
    user_message = 'Error uploading image. Please try again.'

    def __init__(self, status, body=''):
        self.status = status
        self.body = body
        super().__init__(f'Upload failed: {status} {body}'.strip())


class ApiError(FloralBotError):
    user_message = 'Error analyzing image. Please try again.'

    def __init__(self, status, body=''):
        self.status = status
        self.body = body
        super().__init__(f'Vision API error: {status} {body}'.strip())


class DecodeError(FloralBotError):
    user_message = 'Could not read the image data. Please try another file.'
