"""spilut: SPI1D/SPI3D LUT parsing and trilinear application."""

__version__ = "0.1.0"
