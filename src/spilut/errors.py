"""Custom exception hierarchy for spilut."""


class SpiLutError(Exception):
    """Base exception for all spilut errors."""


class ImageError(SpiLutError):
    """Errors related to image loading or processing."""


class ImageFormatError(ImageError):
    """Unsupported or corrupted image format."""


class ImageDimensionError(ImageError):
    """Image dimensions exceed limits or are mismatched."""


class LUTFormatError(SpiLutError):
    """Invalid or corrupted LUT file format."""
