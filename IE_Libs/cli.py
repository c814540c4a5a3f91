"""
Command-line front end for ImageEdit.

Subcommands:
    edit   Apply filters/geometry and an optional crop, fill or border to one image
    batch  Resize many images into one ZIP archive
    merge  Stack images and PDF pages into one PNG or PDF

Every subcommand accepts ``--settings file.json``; the JSON object is fed to
the matching configuration's ``from_dict`` and individual flags override it.

Example:
    imageedit edit photo.jpg -o out.png --rotate 90 --brightness 120
    imageedit batch a.jpg b.png -o resized.zip --mode fixed --width 100 --height 100
    imageedit merge page1.png scan.pdf --spacing 20
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from IE_Libs import __version__
from IE_Libs.BatchLib.batch_resizer import BatchItem, ResizeSettings, build_resized_archive
from IE_Libs.constants import (
    DEFAULT_BORDER_WIDTH,
    EDITED_DOCUMENT_NAME,
    EDITED_IMAGE_NAME,
    ERROR_POLICY_ABORT,
    ERROR_POLICY_SKIP,
    MERGE_SPACING_PRESETS,
    RESIZE_MODE_FIXED,
    RESIZE_MODE_PERCENTAGE,
    RESIZED_ARCHIVE_NAME,
)
from IE_Libs.errors import ImageEditError
from IE_Libs.ExportLib.image_codec import EncodeOptions, detect_kind
from IE_Libs.ExportLib.output_writer import OutputConfig, OutputWriter
from IE_Libs.ImageEditingLib.editor_session import EditorSession
from IE_Libs.ImageEditingLib.image_models import ADJUSTMENT_FIELDS, FilterState, SelectionRect
from IE_Libs.MergeLib.merge_engine import (
    MergeItem,
    MergeSettings,
    merge,
    output_filename,
    resolve_output_kind,
)

logger = logging.getLogger(__name__)

SUFFIX_FORMATS = {".png": "PNG", ".jpg": "JPEG", ".jpeg": "JPEG", ".webp": "WEBP"}


def load_settings(path: Optional[str]) -> Dict[str, Any]:
    """Read a JSON settings object, or {} when no file is given."""
    if not path:
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a JSON object: {path}")
    return data


def parse_size(text: str) -> tuple:
    """Parse 'WxH' into a (width, height) float pair."""
    try:
        width, height = (float(part) for part in str(text).lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected WxH, got {text!r}")
    return width, height


def _progress(label: str):
    def report(completed: int, total: int) -> None:
        logger.info(f"{label}: {completed}/{total}")
    return report


def _writer(args: argparse.Namespace) -> OutputWriter:
    return OutputWriter(OutputConfig(overwrite=args.overwrite))


# ============================================================================
# edit
# ============================================================================

def _edit_filters(args: argparse.Namespace, settings: Dict[str, Any]) -> FilterState:
    overrides = {
        name: getattr(args, name)
        for name in ADJUSTMENT_FIELDS + ("rotate", "scale")
        if getattr(args, name) is not None
    }
    if args.flip_h:
        overrides["flip_horizontal"] = True
    if args.flip_v:
        overrides["flip_vertical"] = True
    return FilterState.from_dict({**settings, **overrides})


def run_edit(args: argparse.Namespace) -> int:
    session = EditorSession()
    source = session.load(Path(args.input).read_bytes(), name=Path(args.input).name)
    display = args.display or source.natural_size
    session.set_display_size(*display)
    session.set_filters(_edit_filters(args, load_settings(args.settings)))
    if args.select:
        session.select(SelectionRect.parse(args.select))

    if args.crop:
        session.crop()
    elif args.fill:
        session.fill(args.fill)
    elif args.border:
        session.border(args.border, args.border_width)

    if args.pdf:
        data = session.export_document()
        output = args.output or EDITED_DOCUMENT_NAME
    else:
        output = args.output or EDITED_IMAGE_NAME
        save_format = args.format or SUFFIX_FORMATS.get(Path(output).suffix.lower(), "PNG")
        options = EncodeOptions(format=save_format)
        if args.quality is not None:
            options = EncodeOptions(format=save_format, quality=args.quality)
        data = session.export_image(options)

    _writer(args).write(data, output)
    return 0


# ============================================================================
# batch
# ============================================================================

def _resize_settings(args: argparse.Namespace, settings: Dict[str, Any]) -> ResizeSettings:
    overrides: Dict[str, Any] = {}
    for name in ("mode", "width", "height", "percentage", "quality"):
        if getattr(args, name) is not None:
            overrides[name] = getattr(args, name)
    if args.format is not None:
        overrides["output_format"] = args.format
    if args.no_aspect:
        overrides["maintain_aspect_ratio"] = False
    return ResizeSettings.from_dict({**settings, **overrides})


def run_batch(args: argparse.Namespace) -> int:
    settings = _resize_settings(args, load_settings(args.settings))
    items: List[BatchItem] = [
        BatchItem(source_bytes=Path(path).read_bytes(), display_name=Path(path).name)
        for path in args.inputs
    ]
    policy = ERROR_POLICY_SKIP if args.skip_errors else ERROR_POLICY_ABORT
    archive = build_resized_archive(items, settings, progress=_progress("Resized"), error_policy=policy)
    _writer(args).write(archive, args.output or RESIZED_ARCHIVE_NAME)
    return 0


# ============================================================================
# merge
# ============================================================================

def run_merge(args: argparse.Namespace) -> int:
    settings = load_settings(args.settings)
    if args.spacing is not None:
        settings["spacing"] = args.spacing
    merge_settings = MergeSettings.from_dict(settings)

    items = [
        MergeItem(
            source_bytes=Path(path).read_bytes(),
            mime_kind=detect_kind(path),
            order_index=index,
            name=Path(path).name,
        )
        for index, path in enumerate(args.inputs)
    ]
    kind = resolve_output_kind(items)
    data = merge(
        items,
        spacing=merge_settings.spacing,
        kind=kind,
        progress=_progress("Merged"),
        render_scale=merge_settings.render_scale,
    )
    _writer(args).write(data, args.output or output_filename(kind))
    return 0


# ============================================================================
# Parser
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imageedit",
        description="Edit, batch-resize and merge images.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-o", "--output", default=None, help="Output file path")
    common.add_argument("--settings", default=None, help="JSON settings file")
    common.add_argument("--overwrite", action="store_true", help="Replace an existing output file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    edit = subparsers.add_parser("edit", parents=[common], help="Edit one image")
    edit.add_argument("input", help="Input image")
    for name in ADJUSTMENT_FIELDS:
        edit.add_argument(f"--{name.replace('_', '-')}", dest=name, type=float, default=None)
    edit.add_argument("--rotate", type=float, default=None, help="Rotation in degrees (clockwise)")
    edit.add_argument("--scale", type=float, default=None, help="Uniform scale (>= 0.1)")
    edit.add_argument("--flip-h", action="store_true", help="Mirror horizontally")
    edit.add_argument("--flip-v", action="store_true", help="Mirror vertically")
    edit.add_argument("--select", default=None, help="Selection x,y,w,h in display units")
    edit.add_argument("--display", type=parse_size, default=None,
                      help="Displayed size WxH the selection refers to (default: natural size)")
    operation = edit.add_mutually_exclusive_group()
    operation.add_argument("--crop", action="store_true", help="Crop to the selection")
    operation.add_argument("--fill", default=None, metavar="COLOR", help="Fill the selection or image")
    operation.add_argument("--border", default=None, metavar="COLOR", help="Outline the selection or image")
    edit.add_argument("--border-width", type=float, default=DEFAULT_BORDER_WIDTH)
    edit.add_argument("--pdf", action="store_true", help="Export a single-page PDF")
    edit.add_argument("--format", default=None, help="PNG, JPEG or WEBP (default: from output suffix)")
    edit.add_argument("--quality", type=float, default=None, help="Lossy quality 0-1")
    edit.set_defaults(handler=run_edit)

    batch = subparsers.add_parser("batch", parents=[common], help="Resize images into a ZIP")
    batch.add_argument("inputs", nargs="+", help="Input images")
    batch.add_argument("--mode", choices=[RESIZE_MODE_PERCENTAGE, RESIZE_MODE_FIXED], default=None)
    batch.add_argument("--percentage", type=float, default=None)
    batch.add_argument("--width", type=int, default=None)
    batch.add_argument("--height", type=int, default=None)
    batch.add_argument("--no-aspect", action="store_true", help="Stretch to exactly WxH")
    batch.add_argument("--quality", type=float, default=None, help="Lossy quality 0-1")
    batch.add_argument("--format", default=None, help="Output format (default: JPEG)")
    batch.add_argument("--skip-errors", action="store_true", help="Skip unreadable images")
    batch.set_defaults(handler=run_batch)

    merge_parser = subparsers.add_parser("merge", parents=[common], help="Stack images and PDFs")
    merge_parser.add_argument("inputs", nargs="+", help="Input images and PDFs, in order")
    merge_parser.add_argument("--spacing", type=int, default=None,
                              help=f"Gap between images in pixels (presets: {MERGE_SPACING_PRESETS})")
    merge_parser.set_defaults(handler=run_merge)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.handler(args)
    except (ImageEditError, ValueError, OSError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
