"""SPI1D / SPI3D ASCII LUT loaders.

The ``load_*`` functions never raise on malformed input. They return
True/False and, when given an ``err`` list, append one human-readable line
per structural failure. Earlier messages in ``err`` are kept.

SPI3D layout::

    SPILUT 1.0          <- must contain "spilut" (any case)
    3 3                 <- ignored
    <x> <y> <z>         <- grid size
    <xi> <yi> <zi> <r> <g> <b>
    ...

Data records carry explicit coordinates, so their order does not matter.
A record line that does not parse is skipped; the header and size lines
are structural and fail the whole load.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional, Union

from spilut.config import MAX_LUT3D_SIZE, SPI1D_MIN_FILE_SIZE, SPI1D_VERSION, SPI3D_MAGIC
from spilut.core.types import LUT1D, LUT3D, FromChars, float_from_chars
from spilut.errors import LUTFormatError
from spilut.io.stream import StreamReader

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# scanf-style field patterns. Each consumes leading whitespace like %d / %f.
_INT_FIELD = re.compile(r"\s*([+-]?\d+)")
_FLOAT_FIELD = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


def _error(err: Optional[list[str]], msg: str) -> bool:
    """Record a structural failure and return False."""
    logger.debug("SPI load failed: %s", msg)
    if err is not None:
        err.append(msg)
    return False


def scan_fields(
    line: str,
    fmt: str,
    from_chars: FromChars = float_from_chars,
) -> list:
    """Parse leading fields of ``line`` the way ``sscanf`` would.

    Args:
        line: Input text.
        fmt: One character per field, ``"d"`` for int or ``"f"`` for float.
        from_chars: Converter for float fields.

    Returns:
        The values parsed before the first field that failed. Callers
        compare ``len(result)`` against ``len(fmt)``.
    """
    values = []
    pos = 0
    for kind in fmt:
        pattern = _INT_FIELD if kind == "d" else _FLOAT_FIELD
        m = pattern.match(line, pos)
        if m is None:
            break
        text = m.group(1)
        if kind == "d":
            value = int(text)
        else:
            value = from_chars(text)
            if value is None:
                break
        values.append(value)
        pos = m.end()
    return values


def _read_bytes(filename: PathLike, err: Optional[list[str]]) -> Optional[bytes]:
    try:
        return Path(filename).read_bytes()
    except OSError as e:
        logger.debug("Cannot read %s: %s", filename, e)
        _error(err, f"Failed to open file : {filename}")
        return None


# ---------------------------------------------------------------------------
# SPI1D
# ---------------------------------------------------------------------------

def load_spi1d_from_string(
    text: Union[str, bytes],
    lut: LUT1D,
    err: Optional[list[str]] = None,
    from_chars: FromChars = float_from_chars,
) -> bool:
    """Load SPI1D data from a string.

    Only the ``Version 1`` header is validated. The domain, length,
    component and value sections are not parsed yet, so ``lut`` is left
    as it was passed in.

    Args:
        text: SPI1D file contents.
        lut: Output 1D LUT.
        err: Optional list that receives error lines.
        from_chars: ASCII -> float converter for body values.

    Returns:
        True if the header is valid.
    """
    sr = StreamReader(text)

    tok = sr.read_token()
    if tok is None:
        return _error(err, "Failed to parse Version line.")
    if tok != "Version":
        return _error(
            err, f"Failed to parse Version line. expected `Version` but got `{tok}`"
        )

    ver = sr.read_token()
    if ver is None:
        return _error(err, "Failed to parse Version line.")
    if ver != str(SPI1D_VERSION):
        return _error(err, f"Version must be {SPI1D_VERSION} but got {ver}")

    lut.version = SPI1D_VERSION
    # TODO: parse From/Length/Components and the value block once a
    # reference .spi1d sample is checked into tests/data.
    logger.warning("SPI1D body parsing is not supported; LUT left empty")
    return True


def load_spi1d_from_file(
    filename: PathLike,
    lut: LUT1D,
    err: Optional[list[str]] = None,
    from_chars: FromChars = float_from_chars,
) -> bool:
    """Load an SPI1D file. See :func:`load_spi1d_from_string`."""
    raw = _read_bytes(filename, err)
    if raw is None:
        return False

    if len(raw) < SPI1D_MIN_FILE_SIZE:
        return _error(err, f"Invalid file size: {filename}(seems not a .spi1d file)")

    return load_spi1d_from_string(raw, lut, err, from_chars)


# ---------------------------------------------------------------------------
# SPI3D
# ---------------------------------------------------------------------------

def load_spi3d_from_string(
    text: Union[str, bytes],
    lut: LUT3D,
    err: Optional[list[str]] = None,
    from_chars: FromChars = float_from_chars,
) -> bool:
    """Load SPI3D data from a string.

    Args:
        text: SPI3D file contents.
        lut: Output 3D LUT. Created with the size declared in the file.
        err: Optional list that receives error lines.
        from_chars: ASCII -> float converter for the RGB values.

    Returns:
        True unless the header or size line is invalid. Malformed data
        lines are skipped and do not cause failure.
    """
    sr = StreamReader(text)

    header = sr.read_line() or ""
    if SPI3D_MAGIC not in header.lower():
        return _error(err, f"Not a SPILUT format. header = {header}")

    # Second line is conventionally "3 3" and carries nothing we need.
    sr.read_line()

    size_line = sr.read_line() or ""
    sizes = scan_fields(size_line, "ddd")
    if len(sizes) != 3 or any(s < 0 for s in sizes):
        return _error(err, "Error while reading lut size")
    x_size, y_size, z_size = sizes
    if max(sizes) > MAX_LUT3D_SIZE:
        return _error(
            err,
            f"LUT size out of range: {x_size} {y_size} {z_size} "
            f"(max {MAX_LUT3D_SIZE} per axis)",
        )

    lut.create(x_size, y_size, z_size)

    # Declared record count bounds the loop; short files are accepted.
    remaining = x_size * y_size * z_size
    skipped = 0
    dropped = 0
    while remaining > 0:
        line = sr.read_line()
        if line is None:
            break
        fields = scan_fields(line, "dddfff", from_chars)
        if len(fields) != 6:
            skipped += 1
            continue
        x, y, z, r, g, b = fields
        if lut.set(x, y, z, r, g, b):
            remaining -= 1
        else:
            dropped += 1

    if remaining > 0:
        logger.debug("SPI3D ended with %d of %d records missing", remaining, lut.size)
    if skipped:
        logger.debug("Skipped %d malformed SPI3D lines", skipped)
    if dropped:
        logger.warning("Dropped %d SPI3D records with out-of-range coordinates", dropped)

    logger.info("Loaded SPI3D LUT %dx%dx%d", x_size, y_size, z_size)
    return True


def load_spi3d_from_file(
    filename: PathLike,
    lut: LUT3D,
    err: Optional[list[str]] = None,
    from_chars: FromChars = float_from_chars,
) -> bool:
    """Load an SPI3D file. See :func:`load_spi3d_from_string`."""
    raw = _read_bytes(filename, err)
    if raw is None:
        return False
    return load_spi3d_from_string(raw, lut, err, from_chars)


# ---------------------------------------------------------------------------
# Raising wrappers
# ---------------------------------------------------------------------------

def read_spi1d(filepath: PathLike, from_chars: FromChars = float_from_chars) -> LUT1D:
    """Read an SPI1D file, raising LUTFormatError on failure."""
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"LUT file not found: {path}")

    lut = LUT1D()
    err: list[str] = []
    if not load_spi1d_from_file(path, lut, err, from_chars):
        raise LUTFormatError("\n".join(err))
    return lut


def read_spi3d(filepath: PathLike, from_chars: FromChars = float_from_chars) -> LUT3D:
    """Read an SPI3D file, raising LUTFormatError on failure.

    Raises:
        FileNotFoundError: If the file does not exist.
        LUTFormatError: If the header or size line is invalid.
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"LUT file not found: {path}")

    lut = LUT3D()
    err: list[str] = []
    if not load_spi3d_from_file(path, lut, err, from_chars):
        raise LUTFormatError("\n".join(err))
    return lut
