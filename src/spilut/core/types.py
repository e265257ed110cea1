"""Core LUT containers and indexing helpers for spilut.

CONVENTION:
    3D LUT data is stored flat, RGB interleaved.
    Cell index: cell = z * (y_dim * x_dim) + y * x_dim + x  (X varies fastest).
    Channel offset: 3 * cell + ch.
    All coordinate access is bounds-checked. Out-of-range reads return None
    and out-of-range writes are dropped; nothing here raises on bad indices.
"""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np


# ---------------------------------------------------------------------------
# Indexing helpers
# ---------------------------------------------------------------------------

def cell_index(x: int, y: int, z: int, x_dim: int, y_dim: int) -> int:
    """Convert 3D grid coordinates to a linear cell index. X varies fastest."""
    return z * (y_dim * x_dim) + y * x_dim + x


def cell_index_array(
    x: np.ndarray, y: np.ndarray, z: np.ndarray, x_dim: int, y_dim: int
) -> np.ndarray:
    """Vectorized cell index computation for arrays of coordinates."""
    return z * (y_dim * x_dim) + y * x_dim + x


FromChars = Callable[[str], Optional[float]]
"""ASCII -> number converter. Returns None when the text is not a number."""


def float_from_chars(text: str) -> Optional[float]:
    """Default ASCII -> float converter used by the SPI loaders."""
    try:
        return float(text)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------

class LUT1D:
    """1D transfer curve with a fixed number of components per sample.

    Samples are stored flat: ``data[idx * components + comp]``.
    """

    def __init__(self):
        self.version = 1
        self.domain: tuple[float, float] = (0.0, 1.0)
        self.components = 0
        self.data = np.zeros(0, dtype=np.float32)

    def create(
        self,
        length: int,
        components: int,
        domain: tuple[float, float] = (0.0, 1.0),
    ) -> None:
        """Resize to ``length * components`` zeroed samples."""
        self.components = int(components)
        self.domain = (float(domain[0]), float(domain[1]))
        self.data = np.zeros(int(length) * self.components, dtype=np.float32)

    def _offset(self, idx: int, comp: int) -> Optional[int]:
        offset = idx * self.components + comp
        if idx < 0 or comp < 0 or offset >= self.data.size:
            return None
        return offset

    def set(self, idx: int, comp: int, value: float) -> bool:
        """Write one value. Returns False (and writes nothing) when out of range."""
        offset = self._offset(idx, comp)
        if offset is None:
            return False
        self.data[offset] = value
        return True

    def get(self, idx: int, comp: int) -> Optional[float]:
        """Read one value, or None when out of range."""
        offset = self._offset(idx, comp)
        if offset is None:
            return None
        return float(self.data[offset])

    @property
    def length(self) -> int:
        if self.components == 0:
            return 0
        return self.data.size // self.components

    def __repr__(self) -> str:
        return (
            f"LUT1D(length={self.length}, components={self.components}, "
            f"domain={self.domain}, version={self.version})"
        )


class LUT3D:
    """RGB volumetric LUT stored as a flat float32 array."""

    def __init__(self):
        self.x_dim = 0
        self.y_dim = 0
        self.z_dim = 0
        self.data = np.zeros(0, dtype=np.float32)

    def create(self, x_dim: int, y_dim: int, z_dim: int) -> None:
        """Allocate a zeroed grid and fix its dimensions."""
        self.x_dim = int(x_dim)
        self.y_dim = int(y_dim)
        self.z_dim = int(z_dim)
        self.data = np.zeros(3 * self.x_dim * self.y_dim * self.z_dim, dtype=np.float32)

    @property
    def dims(self) -> tuple[int, int, int]:
        return self.x_dim, self.y_dim, self.z_dim

    @property
    def size(self) -> int:
        """Number of cells."""
        return self.x_dim * self.y_dim * self.z_dim

    def in_bounds(self, x: int, y: int, z: int) -> bool:
        return 0 <= x < self.x_dim and 0 <= y < self.y_dim and 0 <= z < self.z_dim

    def set(self, x: int, y: int, z: int, r: float, g: float, b: float) -> bool:
        """Write one cell. Out-of-range coordinates are dropped (returns False)."""
        if not self.in_bounds(x, y, z):
            return False
        base = 3 * cell_index(x, y, z, self.x_dim, self.y_dim)
        self.data[base] = r
        self.data[base + 1] = g
        self.data[base + 2] = b
        return True

    def set_rgb(self, x: int, y: int, z: int, rgb) -> bool:
        """Write one cell from a 3-sequence."""
        return self.set(x, y, z, rgb[0], rgb[1], rgb[2])

    def get(self, x: int, y: int, z: int) -> Optional[tuple[float, float, float]]:
        """Read one cell, or None when out of range."""
        if not self.in_bounds(x, y, z):
            return None
        base = 3 * cell_index(x, y, z, self.x_dim, self.y_dim)
        return (
            float(self.data[base]),
            float(self.data[base + 1]),
            float(self.data[base + 2]),
        )

    def to_array(self) -> np.ndarray:
        """Return a (x_dim, y_dim, z_dim, 3) copy indexed as [r, g, b, ch]."""
        grid = self.data.reshape(self.z_dim, self.y_dim, self.x_dim, 3)
        return np.transpose(grid, (2, 1, 0, 3)).copy()

    @classmethod
    def from_array(cls, array: np.ndarray) -> "LUT3D":
        """Build a LUT3D from a (X, Y, Z, 3) array indexed as [r, g, b, ch]."""
        array = np.asarray(array, dtype=np.float32)
        if array.ndim != 4 or array.shape[3] != 3:
            raise ValueError(f"Expected (X, Y, Z, 3) array, got {array.shape}")
        lut = cls()
        lut.create(*array.shape[:3])
        lut.data = np.transpose(array, (2, 1, 0, 3)).reshape(-1).copy()
        return lut

    def __repr__(self) -> str:
        return f"LUT3D(x_dim={self.x_dim}, y_dim={self.y_dim}, z_dim={self.z_dim})"
