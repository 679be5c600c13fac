"""
Errors raised while handling an image request.
Each one carries the HTTP status it is reported with.
"""


class ImageServiceError(Exception):
    status_code = 500
    default_message = "Failed to process image"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MethodNotAllowed(ImageServiceError):
    status_code = 405
    default_message = "Method Not Allowed"


class Unauthorized(ImageServiceError):
    status_code = 401
    default_message = "Unauthorized"


class UnsupportedContentType(ImageServiceError):
    status_code = 400
    default_message = "Unsupported content type"


class InvalidIndex(ImageServiceError):
    status_code = 400
    default_message = "Invalid segment index"


class InvalidStyle(ImageServiceError):
    status_code = 400
    default_message = "Invalid style"


class FieldTooLong(ImageServiceError):
    status_code = 400
    default_message = "Character or scene description exceeds 100 characters"


class MalformedImagePayload(ImageServiceError):
    status_code = 400
    default_message = "Invalid base64 image format"


class MalformedJSON(ImageServiceError):
    status_code = 400
    default_message = "Invalid JSON format"


class MissingInput(ImageServiceError):
    status_code = 400
    default_message = "Missing prompt or image"


class MissingConfiguration(ImageServiceError):
    status_code = 500
    default_message = "Missing GEMINI_API_KEY or file"


class UpstreamGenerationFailure(ImageServiceError):
    status_code = 500
    default_message = "Failed to generate image"


class FileIOFailure(ImageServiceError):
    status_code = 500
    default_message = "Failed to save image"
