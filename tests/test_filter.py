"""Tests for the trilinear LutFilter."""

from __future__ import annotations

import numpy as np
import pytest

from spilut.core.filter import LutFilter, quantize
from spilut.core.types import LUT3D

from conftest import identity_array, make_spi3d_text


class TestQuantize:

    def test_interior(self):
        cell, frac = quantize(0.3, 5)
        assert cell == 1
        assert frac == pytest.approx(0.2)

    def test_clamps_input(self):
        assert quantize(-0.5, 5) == (0, 0.0)
        assert quantize(1.5, 5) == (4, 0.0)

    def test_upper_edge(self):
        assert quantize(1.0, 5) == (4, 0.0)

    def test_single_point_axis(self):
        assert quantize(0.7, 1) == (0, 0.0)


class TestLutFilterState:

    def test_invalid_until_loaded(self):
        assert not LutFilter().is_valid()

    def test_load(self, spi3d_2):
        path, expected = spi3d_2
        f = LutFilter()
        assert f.load(path)
        assert f.is_valid()
        assert f.dim == (2, 2, 2)
        np.testing.assert_allclose(f.apply(0.0, 0.0, 0.0), expected[0, 0, 0], atol=1e-6)

    def test_load_failure_keeps_state(self, tmp_path):
        p = tmp_path / "bad.spi3d"
        p.write_text("not a lut\n")
        f = LutFilter()
        assert not f.load(p)
        assert not f.is_valid()

    def test_empty_grid_is_invalid(self, tmp_path):
        p = tmp_path / "empty.spi3d"
        p.write_text("SPILUT 1.0\n3 3\n0 0 0\n")
        f = LutFilter()
        assert f.load(p)
        assert not f.is_valid()


class TestApply:
    """Tests for scalar trilinear application."""

    def test_single_cell_grid(self):
        """A 1x1x1 grid returns its only color for any input."""
        lut = LUT3D()
        lut.create(1, 1, 1)
        lut.set(0, 0, 0, 0.25, 0.5, 0.75)
        f = LutFilter.from_lut(lut)
        for rgb in [(0.0, 0.0, 0.0), (1.0, 1.0, 1.0), (0.3, 0.9, 0.1), (-2.0, 5.0, 0.5)]:
            assert f.apply(*rgb) == (0.25, 0.5, 0.75)

    def test_corners_exact(self, random_lut_2):
        """Inputs exactly on grid corners return the stored value."""
        f = LutFilter.from_lut(LUT3D.from_array(random_lut_2))
        for x in (0, 1):
            for y in (0, 1):
                for z in (0, 1):
                    out = f.apply(float(x), float(y), float(z))
                    assert out == tuple(float(v) for v in random_lut_2[x, y, z])

    def test_midpoint_is_mean(self):
        """Halfway between adjacent cells gives the arithmetic mean."""
        arr = np.zeros((3, 3, 3, 3), dtype=np.float32)
        arr[1, 2, 0] = [0.2, 0.4, 0.8]
        arr[2, 2, 0] = [0.6, 0.0, 0.4]
        f = LutFilter.from_lut(LUT3D.from_array(arr))
        out = f.apply(0.75, 1.0, 0.0)
        np.testing.assert_allclose(out, [0.4, 0.2, 0.6], atol=1e-6)

    def test_identity(self, identity_lut_5, random_colors):
        f = LutFilter.from_lut(identity_lut_5)
        for color in random_colors[:50]:
            np.testing.assert_allclose(f.apply(*color), color, atol=1e-6)

    def test_non_cubic_grid(self):
        f = LutFilter.from_lut(LUT3D.from_array(identity_array(2, 5, 3)))
        np.testing.assert_allclose(f.apply(0.3, 0.6, 0.9), [0.3, 0.6, 0.9], atol=1e-6)

    def test_flat_axis_degenerates(self):
        """A single-cell axis ignores that channel's input."""
        arr = identity_array(3, 3, 1)
        f = LutFilter.from_lut(LUT3D.from_array(arr))
        a = f.apply(0.5, 0.25, 0.0)
        b = f.apply(0.5, 0.25, 1.0)
        assert a == b

    def test_clamps_input(self, identity_lut_5):
        f = LutFilter.from_lut(identity_lut_5)
        np.testing.assert_allclose(f.apply(-1.0, 2.0, 0.5), [0.0, 1.0, 0.5], atol=1e-6)

    def test_loaded_from_spi3d(self, tmp_path):
        arr = identity_array(3, 3, 3) ** 2
        p = tmp_path / "square.spi3d"
        p.write_text(make_spi3d_text(arr))
        f = LutFilter()
        assert f.load(p)
        # Between nodes 0 and 0.5 on R, the curve is linear in the grid values.
        np.testing.assert_allclose(f.apply(0.25, 0.5, 1.0), [0.125, 0.25, 1.0], atol=1e-5)


class TestApplyArray:
    """Tests for vectorized application."""

    def test_matches_scalar(self, random_colors):
        rng = np.random.default_rng(3)
        f = LutFilter.from_lut(LUT3D.from_array(rng.random((4, 3, 5, 3), dtype=np.float32)))
        batch = f.apply_array(random_colors)
        for color, out in zip(random_colors, batch):
            np.testing.assert_allclose(out, f.apply(*color), atol=1e-6)

    def test_image_shape(self, identity_lut_5):
        f = LutFilter.from_lut(identity_lut_5)
        img = np.random.default_rng(1).random((4, 6, 3))
        out = f.apply_array(img)
        assert out.shape == (4, 6, 3)
        assert out.dtype == np.float32
        np.testing.assert_allclose(out, img, atol=1e-6)

    def test_rejects_bad_shape(self, identity_lut_5):
        f = LutFilter.from_lut(identity_lut_5)
        with pytest.raises(ValueError):
            f.apply_array(np.zeros((4, 2)))


class TestHeatmap:

    def test_gray(self):
        assert LutFilter.heatmap(0.18, 0.9, 0.01) == (0.5, 0.5, 0.5)

    def test_dark_is_blue(self):
        assert LutFilter.heatmap(2 ** -10, 2 ** -10, 2 ** -10) == (0.0, 0.0, 1.0)
        assert LutFilter.heatmap(0.0, 0.0, 0.0) == (0.0, 0.0, 1.0)

    def test_bright_is_red(self):
        assert LutFilter.heatmap(64.0, 64.0, 64.0) == (1.0, 0.0, 0.0)

    def test_midpoint_is_green(self):
        mid = 2 ** ((-8.5 + 5.0) / 2)
        np.testing.assert_allclose(LutFilter.heatmap(mid, mid, mid), [0.0, 1.0, 0.0], atol=1e-9)

    def test_array_matches_scalar(self):
        colors = np.array([
            [0.18, 0.5, 0.5],
            [0.0, 0.01, 0.5],
            [1.0, 4.0, 100.0],
            [0.001, 0.3, 0.05],
        ])
        out = LutFilter.heatmap_array(colors)
        for color, row in zip(colors, out):
            np.testing.assert_allclose(row, LutFilter.heatmap(*color), atol=1e-6)
