class DetectorError(Exception):
    """Base error for known detection failures."""


class ImageDecodeError(DetectorError):
    """Raised when the input bytes are not a decodable image."""


class EmptyImageError(DetectorError):
    """Raised when a decoded image has zero width or height."""


class InferenceError(DetectorError):
    """Raised when the inference engine fails to produce an output."""
