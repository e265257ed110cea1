"""Default configuration, constants, and limits for spilut."""

# --- Security limits ---
MAX_IMAGE_DIMENSION = 16384  # 16K pixels per side
MAX_IMAGE_PIXELS = 100_000_000  # 100 megapixels
MAX_LUT3D_SIZE = 256  # Maximum grid size per axis (256^3 ~ 16.7M cells)

# --- Allowed file extensions ---
IMAGE_EXTENSIONS = frozenset({
    ".png", ".jpg", ".jpeg", ".tiff", ".tif", ".bmp",
})

# --- SPI parsing ---
SPI1D_MIN_FILE_SIZE = 32  # Heuristic: smaller files cannot hold a valid .spi1d
SPI1D_VERSION = 1
SPI3D_MAGIC = "spilut"  # Matched case-insensitively against the first line

# --- Display ---
DEFAULT_DISPLAY_GAMMA = 2.2
DEFAULT_BIT_DEPTH = 8

# --- Heatmap ---
HEATMAP_LOG2_MIN = -8.5  # Maps to blue
HEATMAP_LOG2_MAX = 5.0  # Maps to red
HEATMAP_GRAY = 0.18
HEATMAP_GRAY_EPS = 0.05
