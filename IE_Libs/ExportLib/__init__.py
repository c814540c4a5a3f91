"""
ExportLib - Decode and encode collaborators

This module turns bytes into ImageSources and Surfaces into image, document
and archive bytes, and writes outputs to disk.
"""

from IE_Libs.ExportLib.image_codec import (
    DocumentPage,
    EncodeOptions,
    decode_image,
    detect_kind,
    encode_document,
    encode_image,
    encode_surface,
    page_orientation,
)
from IE_Libs.ExportLib.output_writer import OutputConfig, OutputWriter, build_archive

__all__ = [
    "DocumentPage",
    "EncodeOptions",
    "decode_image",
    "detect_kind",
    "encode_document",
    "encode_image",
    "encode_surface",
    "page_orientation",
    "OutputConfig",
    "OutputWriter",
    "build_archive",
]
