"""
Constants and configuration values for ImageEdit.

This module centralizes all constant values, magic numbers, and
configuration defaults used throughout the library.
"""

# Filter defaults (CSS filter units: percent, degrees, pixels)
DEFAULT_BRIGHTNESS = 100.0
DEFAULT_CONTRAST = 100.0
DEFAULT_SATURATE = 100.0
DEFAULT_GRAYSCALE = 0.0
DEFAULT_SEPIA = 0.0
DEFAULT_HUE_ROTATE = 0.0
DEFAULT_BLUR = 0.0
DEFAULT_ROTATE = 0.0
DEFAULT_SCALE = 1.0
MIN_SCALE = 0.1

# Editor step sizes
ROTATE_STEP_DEGREES = 90.0
ZOOM_STEP = 0.1

# Selection ops
DEFAULT_FILL_COLOR = "#ffffff"
DEFAULT_BORDER_COLOR = "#000000"
DEFAULT_BORDER_WIDTH = 5

# Batch resize defaults
RESIZE_MODE_PERCENTAGE = "percentage"
RESIZE_MODE_FIXED = "fixed"
DEFAULT_RESIZE_WIDTH = 800
DEFAULT_RESIZE_HEIGHT = 600
DEFAULT_RESIZE_PERCENTAGE = 50.0
DEFAULT_RESIZE_QUALITY = 0.9
RESIZED_FILE_PREFIX = "resized_"
RESIZED_FOLDER_NAME = "resized_images"
RESIZED_ARCHIVE_NAME = "resized_images.zip"

# Error policies for sequential batch/merge loops
ERROR_POLICY_ABORT = "abort"
ERROR_POLICY_SKIP = "skip"

# Merge defaults
MERGE_SPACING_PRESETS = (0, 10, 20, 40)
MERGE_BACKGROUND_COLOR = (255, 255, 255, 255)
PDF_RENDER_SCALE = 2.0
PDF_PAGE_QUALITY = 0.95
MERGED_IMAGE_NAME = "merged.png"
MERGED_DOCUMENT_NAME = "merged.pdf"

# Item kinds
KIND_IMAGE = "image"
KIND_DOCUMENT = "document"

# Export
DEFAULT_OUTPUT_FORMAT = "PNG"
DEFAULT_ENCODE_QUALITY = 0.92
LOSSY_FORMATS = {"JPEG", "WEBP"}
SUPPORTED_OUTPUT_FORMATS = {"PNG", "JPEG", "WEBP"}
FORMAT_EXTENSIONS = {"PNG": ".png", "JPEG": ".jpg", "WEBP": ".webp", "PDF": ".pdf"}
DOCUMENT_RESOLUTION = 72.0
EDITED_IMAGE_NAME = "edited-image.png"
EDITED_DOCUMENT_NAME = "edited-image.pdf"

# Supported input formats
SUPPORTED_STANDARD_IMAGES = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".webp"}
SUPPORTED_DOCUMENTS = {".pdf"}
PDF_MIME_TYPE = "application/pdf"
