"""Image I/O for the CLI, backed by imageio v3.

Images are returned as float32 arrays normalized to [0, 1]. Saving
optionally applies a display gamma before quantization.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import imageio.v3 as iio
import numpy as np

from spilut.config import (
    DEFAULT_BIT_DEPTH,
    IMAGE_EXTENSIONS,
    MAX_IMAGE_DIMENSION,
    MAX_IMAGE_PIXELS,
)
from spilut.errors import ImageDimensionError, ImageFormatError

logger = logging.getLogger(__name__)


def validate_input_path(filepath: str | Path) -> Path:
    """Validate an input image path.

    Raises:
        FileNotFoundError: If file does not exist.
        ImageFormatError: If extension is not allowed.
    """
    path = Path(filepath).resolve()

    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    if not path.is_file():
        raise ImageFormatError(f"Not a regular file: {path}")

    if path.suffix.lower() not in IMAGE_EXTENSIONS:
        raise ImageFormatError(
            f"Unsupported image format: {path.suffix}. "
            f"Supported: {', '.join(sorted(IMAGE_EXTENSIONS))}"
        )

    return path


def validate_output_path(filepath: str | Path) -> Path:
    """Validate an output file path.

    Raises:
        FileNotFoundError: If parent directory does not exist.
        PermissionError: If the parent directory is not writable.
    """
    path = Path(filepath).resolve()

    if not path.parent.exists():
        raise FileNotFoundError(f"Output directory does not exist: {path.parent}")

    if not os.access(path.parent, os.W_OK):
        raise PermissionError(f"Cannot write to directory: {path.parent}")

    return path


def _validate_dimensions(width: int, height: int) -> None:
    """Check image dimensions before converting pixel data."""
    if width <= 0 or height <= 0:
        raise ImageDimensionError(f"Invalid image dimensions: {width}x{height}")
    if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
        raise ImageDimensionError(
            f"Image dimension {max(width, height)} exceeds "
            f"maximum allowed {MAX_IMAGE_DIMENSION}"
        )
    if width * height > MAX_IMAGE_PIXELS:
        raise ImageDimensionError(
            f"Image has {width * height:,} pixels, exceeds "
            f"maximum allowed {MAX_IMAGE_PIXELS:,}"
        )


def load_image(filepath: str | Path) -> tuple[np.ndarray, dict]:
    """Load an image file as a float32 array.

    Returns:
        (array, metadata): (H, W, 3) float32 array in [0, 1] and metadata dict.
    """
    path = validate_input_path(filepath)
    logger.debug("Loading with imageio: %s", path)

    try:
        raw = iio.imread(str(path))
    except (OSError, ValueError) as e:
        raise ImageFormatError(f"Failed to read image {path}: {e}") from e

    if raw.ndim < 2:
        raise ImageFormatError(f"Unsupported image shape: {raw.shape}")
    _validate_dimensions(raw.shape[1], raw.shape[0])

    if raw.dtype == np.uint8:
        data = raw.astype(np.float32) / 255.0
    elif raw.dtype == np.uint16:
        data = raw.astype(np.float32) / 65535.0
    elif np.issubdtype(raw.dtype, np.integer):
        data = raw.astype(np.float32) / np.iinfo(raw.dtype).max
    else:
        data = raw.astype(np.float32)

    # Ensure 3 channels
    if data.ndim == 2:
        data = np.repeat(data[:, :, np.newaxis], 3, axis=2)
    elif data.ndim == 3 and data.shape[2] == 4:
        data = data[:, :, :3]
    elif data.ndim == 3 and data.shape[2] == 1:
        data = np.repeat(data, 3, axis=2)
    elif data.ndim != 3 or data.shape[2] != 3:
        raise ImageFormatError(f"Unsupported image shape: {data.shape}")

    metadata = {
        "width": data.shape[1],
        "height": data.shape[0],
        "channels": data.shape[2],
        "format": str(raw.dtype),
    }

    return np.ascontiguousarray(data), metadata


def encode_display(array: np.ndarray, gamma: Optional[float]) -> np.ndarray:
    """Clamp to [0, 1] and apply ``x ** (1 / gamma)`` when gamma is given."""
    out = np.clip(np.nan_to_num(array, nan=0.0), 0.0, 1.0)
    if gamma:
        out = np.power(out, 1.0 / gamma)
    return out


def save_image(
    array: np.ndarray,
    filepath: str | Path,
    bit_depth: int = DEFAULT_BIT_DEPTH,
    gamma: Optional[float] = None,
) -> Path:
    """Save an image array to file.

    Args:
        array: (H, W, 3) float array, nominally in [0, 1].
        filepath: Output path.
        bit_depth: 8 or 16 bits per channel.
        gamma: Display gamma to encode with, or None to write linear values.

    Returns:
        Resolved output path.
    """
    path = validate_output_path(filepath)
    encoded = encode_display(array, gamma)

    if bit_depth == 16:
        out = (encoded * 65535).astype(np.uint16)
    elif bit_depth == 8:
        out = (encoded * 255).astype(np.uint8)
    else:
        raise ValueError(f"Unsupported bit depth: {bit_depth}")

    iio.imwrite(str(path), out)
    logger.info("Saved image: %s (%d-bit)", path, bit_depth)
    return path
