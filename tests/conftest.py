"""Shared fixtures for spilut tests."""

from __future__ import annotations

import numpy as np
import pytest

from spilut.core.types import LUT3D


def make_spi3d_text(lut: np.ndarray, header: str = "SPILUT 1.0") -> str:
    """Render a (X, Y, Z, 3) array as SPI3D text."""
    nx, ny, nz = lut.shape[:3]
    lines = [header, "3 3", f"{nx} {ny} {nz}"]
    for x in range(nx):
        for y in range(ny):
            for z in range(nz):
                r, g, b = lut[x, y, z]
                lines.append(f"{x} {y} {z} {r:.6f} {g:.6f} {b:.6f}")
    return "\n".join(lines) + "\n"


def identity_array(nx: int, ny: int, nz: int) -> np.ndarray:
    """(nx, ny, nz, 3) identity grid indexed as [r, g, b, ch]."""
    rs = np.linspace(0.0, 1.0, nx) if nx > 1 else np.zeros(1)
    gs = np.linspace(0.0, 1.0, ny) if ny > 1 else np.zeros(1)
    bs = np.linspace(0.0, 1.0, nz) if nz > 1 else np.zeros(1)
    r, g, b = np.meshgrid(rs, gs, bs, indexing="ij")
    return np.stack([r, g, b], axis=-1).astype(np.float32)


@pytest.fixture
def random_lut_2():
    """2x2x2 grid of random colors as (2, 2, 2, 3) array."""
    rng = np.random.default_rng(7)
    return rng.random((2, 2, 2, 3), dtype=np.float32)


@pytest.fixture
def spi3d_2(tmp_path, random_lut_2):
    """Well-formed 2x2x2 SPI3D file. Returns (path, array)."""
    p = tmp_path / "grade.spi3d"
    p.write_text(make_spi3d_text(random_lut_2))
    return p, random_lut_2


@pytest.fixture
def identity_lut_5():
    """5x5x5 identity LUT3D."""
    return LUT3D.from_array(identity_array(5, 5, 5))


@pytest.fixture
def random_colors():
    """Random (M, 3) colors in [0, 1]."""
    rng = np.random.default_rng(42)
    return rng.random((200, 3))


@pytest.fixture
def spi1d_text():
    """Minimal SPI1D document."""
    return (
        "Version 1\n"
        "From 0.0 1.0\n"
        "Length 4\n"
        "Components 1\n"
        "{\n"
        "    0.0\n"
        "    0.25\n"
        "    0.5\n"
        "    1.0\n"
        "}\n"
    )
