"""
IE_Libs - ImageEdit Library Modules

This package contains the raster transform and compositing core of ImageEdit,
organized into specialized sub-packages:

- ImageEditingLib: Surface, filter chain, geometry transforms and selection ops
- BatchLib: Batch resizing of many images into an archive
- MergeLib: Stacking images and PDF pages into one image or document
- ExportLib: Decoding and encoding collaborators (PNG/JPEG/PDF/ZIP)
"""

__version__ = "0.1.0"
