"""Trilinear 3D LUT filter.

The filter keeps the grid flat (cell = z*Ny*Nx + y*Nx + x, RGB
interleaved) and interpolates along x, then y, then z. Inputs are clamped
to [0, 1]; upper neighbours are clamped to the last cell, so grids with a
single cell on an axis degenerate to lower-order interpolation.

Both scalar (single color) and vectorized (array) variants are provided
and give the same results.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Union

import numpy as np

from spilut.config import (
    HEATMAP_GRAY,
    HEATMAP_GRAY_EPS,
    HEATMAP_LOG2_MAX,
    HEATMAP_LOG2_MIN,
)
from spilut.core.types import LUT3D, cell_index_array
from spilut.io.spi import load_spi3d_from_file

logger = logging.getLogger(__name__)

_BLUE = (0.0, 0.0, 1.0)
_GREEN = (0.0, 1.0, 0.0)
_RED = (1.0, 0.0, 0.0)


def quantize(x: float, sz: int) -> tuple[int, float]:
    """Split a normalized coordinate into a cell index and fractional offset.

    Args:
        x: Coordinate, clamped to [0, 1].
        sz: Number of grid points along the axis.

    Returns:
        (cell, frac) with cell in [0, sz - 1].
    """
    x = min(max(x, 0.0), 1.0)
    p = (sz - 1) * x
    cell = int(math.floor(p))
    cell = min(max(cell, 0), sz - 1)
    return cell, p - cell


def lerp(t, a, b):
    return a + (b - a) * t


class LutFilter:
    """3D LUT filter applying a loaded grid to colors."""

    def __init__(self):
        self.data = np.zeros(0, dtype=np.float32)
        self.dim = (0, 0, 0)

    @classmethod
    def from_lut(cls, lut: LUT3D) -> "LutFilter":
        """Build a filter from a populated LUT3D (data is copied)."""
        f = cls()
        f.dim = lut.dims
        f.data = lut.data.astype(np.float32, copy=True)
        return f

    def load(self, filename: Union[str, Path]) -> bool:
        """Load an SPI3D file.

        Loader errors are logged. Returns False if the LUT could not be
        loaded; the filter is left unchanged in that case.
        """
        lut = LUT3D()
        err: list[str] = []
        ok = load_spi3d_from_file(filename, lut, err)
        for msg in err:
            logger.error("%s", msg)
        if not ok:
            logger.error("Failed to load SPI 3D lut: %s", filename)
            return False

        self.dim = lut.dims
        self.data = lut.data.astype(np.float32, copy=True)
        return True

    def is_valid(self) -> bool:
        """True once a non-empty LUT has been loaded."""
        return self.data.size > 0

    def apply(self, r: float, g: float, b: float) -> tuple[float, float, float]:
        """Apply the LUT to one color with trilinear interpolation.

        The filter must be valid (see :meth:`is_valid`).
        """
        nx, ny, nz = self.dim
        data = self.data

        ix0, fx = quantize(r, nx)
        iy0, fy = quantize(g, ny)
        iz0, fz = quantize(b, nz)

        ix1 = min(ix0 + 1, nx - 1)
        iy1 = min(iy0 + 1, ny - 1)
        iz1 = min(iz0 + 1, nz - 1)

        plane = ny * nx
        i000 = iz0 * plane + iy0 * nx + ix0
        i001 = iz0 * plane + iy0 * nx + ix1
        i010 = iz0 * plane + iy1 * nx + ix0
        i011 = iz0 * plane + iy1 * nx + ix1
        i100 = iz1 * plane + iy0 * nx + ix0
        i101 = iz1 * plane + iy0 * nx + ix1
        i110 = iz1 * plane + iy1 * nx + ix0
        i111 = iz1 * plane + iy1 * nx + ix1

        out = []
        for ch in range(3):
            d00 = lerp(fx, float(data[3 * i000 + ch]), float(data[3 * i001 + ch]))
            d10 = lerp(fx, float(data[3 * i010 + ch]), float(data[3 * i011 + ch]))
            d01 = lerp(fx, float(data[3 * i100 + ch]), float(data[3 * i101 + ch]))
            d11 = lerp(fx, float(data[3 * i110 + ch]), float(data[3 * i111 + ch]))
            d0 = lerp(fy, d00, d10)
            d1 = lerp(fy, d01, d11)
            out.append(lerp(fz, d0, d1))

        return out[0], out[1], out[2]

    def apply_array(self, colors: np.ndarray) -> np.ndarray:
        """Apply the LUT to an array of colors.

        Args:
            colors: (..., 3) array, e.g. (M, 3) or (H, W, 3).

        Returns:
            float32 array with the same shape as ``colors``.
        """
        colors = np.asarray(colors, dtype=np.float64)
        if colors.shape[-1] != 3:
            raise ValueError(f"Expected (..., 3) colors, got {colors.shape}")

        original_shape = colors.shape
        flat = colors.reshape(-1, 3)
        dims = np.array(self.dim, dtype=np.int64)

        scaled = np.clip(flat, 0.0, 1.0) * (dims - 1)
        cell0 = np.clip(np.floor(scaled).astype(np.int64), 0, dims - 1)
        frac = scaled - cell0
        cell1 = np.minimum(cell0 + 1, dims - 1)

        nx, ny = self.dim[0], self.dim[1]
        lut_flat = self.data.reshape(-1, 3).astype(np.float64)

        def corner(x, y, z):
            return lut_flat[cell_index_array(x, y, z, nx, ny)]

        x0, y0, z0 = cell0[:, 0], cell0[:, 1], cell0[:, 2]
        x1, y1, z1 = cell1[:, 0], cell1[:, 1], cell1[:, 2]
        fx = frac[:, 0:1]
        fy = frac[:, 1:2]
        fz = frac[:, 2:3]

        d00 = lerp(fx, corner(x0, y0, z0), corner(x1, y0, z0))
        d10 = lerp(fx, corner(x0, y1, z0), corner(x1, y1, z0))
        d01 = lerp(fx, corner(x0, y0, z1), corner(x1, y0, z1))
        d11 = lerp(fx, corner(x0, y1, z1), corner(x1, y1, z1))
        d0 = lerp(fy, d00, d10)
        d1 = lerp(fy, d01, d11)
        result = lerp(fz, d0, d1)

        return result.reshape(original_shape).astype(np.float32)

    @staticmethod
    def heatmap(r: float, g: float, b: float) -> tuple[float, float, float]:
        """Map a color to a blue -> green -> red log2 heatmap, for debugging.

        log2 values from -8.5 (blue) through the midpoint (green) to 5
        (red). Inputs near 18% gray (judged on ``r``) map to 0.5 gray.
        """
        if abs(r - HEATMAP_GRAY) < HEATMAP_GRAY_EPS:
            return 0.5, 0.5, 0.5

        out = []
        for i, v in enumerate((r, g, b)):
            if v > 0.0:
                f = (math.log2(v) - HEATMAP_LOG2_MIN) / (HEATMAP_LOG2_MAX - HEATMAP_LOG2_MIN)
                f = min(max(f, 0.0), 1.0)
            else:
                f = 0.0
            if f < 0.5:
                out.append(_BLUE[i] + (_GREEN[i] - _BLUE[i]) * 2.0 * f)
            else:
                out.append(_GREEN[i] + (_RED[i] - _GREEN[i]) * 2.0 * (f - 0.5))
        return out[0], out[1], out[2]

    @staticmethod
    def heatmap_array(colors: np.ndarray) -> np.ndarray:
        """Vectorized :meth:`heatmap` over a (..., 3) array."""
        colors = np.asarray(colors, dtype=np.float64)
        with np.errstate(divide="ignore", invalid="ignore"):
            log_col = np.where(colors > 0.0, np.log2(np.maximum(colors, 1e-30)), -np.inf)
        f = (log_col - HEATMAP_LOG2_MIN) / (HEATMAP_LOG2_MAX - HEATMAP_LOG2_MIN)
        f = np.clip(np.nan_to_num(f, nan=0.0, neginf=0.0, posinf=1.0), 0.0, 1.0)

        blue = np.array(_BLUE)
        green = np.array(_GREEN)
        red = np.array(_RED)
        low = blue + (green - blue) * 2.0 * f
        high = green + (red - green) * 2.0 * (f - 0.5)
        out = np.where(f < 0.5, low, high)

        gray = np.abs(colors[..., 0] - HEATMAP_GRAY) < HEATMAP_GRAY_EPS
        out[gray] = 0.5
        return out.astype(np.float32)
