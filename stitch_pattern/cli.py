"""Command-line interface for stitch-pattern."""

import argparse
from pathlib import Path

from PIL import Image

from .core import convert
from .errors import InvalidInput
from .export import pattern_filename, render_preview, write_csv
from .params import (
    ALGORITHMS,
    CropRect,
    GridDimensions,
    ToneParams,
    clamp_grid_size,
    make_algorithm_params,
)
from .presets import preset_for

DEFAULT_WIDTH = 50


def grid_for(image_size: tuple[int, int], crop: CropRect, width: int | None, height: int | None) -> GridDimensions:
    """Grid size clamped to the offered range; a missing side follows the crop's aspect ratio."""
    if width is not None and height is not None:
        return GridDimensions(clamp_grid_size(width), clamp_grid_size(height))

    src_w, src_h = image_size
    rect = crop.clamped()
    region_w = (rect.x2 - rect.x1) * src_w
    region_h = (rect.y2 - rect.y1) * src_h
    aspect = region_w / region_h if region_w > 0 and region_h > 0 else 1.0

    if height is not None:
        return GridDimensions.from_height(height, aspect)
    return GridDimensions.from_width(width if width is not None else DEFAULT_WIDTH, aspect)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Convert an image into a two-tone stitch pattern (crochet, cross-stitch, knitting)"
    )
    parser.add_argument("input", help="Input image path")
    parser.add_argument("-o", "--output", help="Output CSV path (default: pattern_WxH.csv next to input)")
    parser.add_argument("-W", "--width", type=int, help=f"Pattern width in stitches (default: {DEFAULT_WIDTH})")
    parser.add_argument("-H", "--height", type=int, help="Pattern height in stitches (default: keep aspect ratio)")
    parser.add_argument("-a", "--algorithm", choices=list(ALGORITHMS), default="threshold",
                        help="Pattern algorithm (default: threshold)")
    parser.add_argument("-t", "--threshold", type=float, help="Light/dark balance, 0-255")
    parser.add_argument("--contrast", type=float, help="Contrast in percent, 50-200")
    parser.add_argument("--brightness", type=float, help="Brightness in percent, 50-150")
    parser.add_argument("--dither-strength", type=float, help="Dither texture amount in percent, 0-200")
    parser.add_argument("--block-size", type=int, help="Adaptive threshold sample area, odd 3-31")
    parser.add_argument("--edge-sensitivity", type=float, help="Edge detection cutoff, 10-100")
    parser.add_argument("--crop", type=float, nargs=4, metavar=("X1", "Y1", "X2", "Y2"),
                        help="Crop region as fractions of the image (default: 0 0 1 1)")
    parser.add_argument("--invert", action="store_true", help="Swap filled and empty stitches")
    parser.add_argument("--preview", help="Also save a rendered preview image to this path")
    parser.add_argument("--cell-size", type=int, default=12, help="Preview cell size in pixels (default: 12)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress output")

    args = parser.parse_args(argv)
    verbose = not args.quiet

    # Options left unset take the algorithm's preset values
    preset = preset_for(args.algorithm)
    tone = ToneParams(
        contrast=args.contrast if args.contrast is not None else preset.tone.contrast,
        brightness=args.brightness if args.brightness is not None else preset.tone.brightness,
    )
    preset_values = vars(preset.params)
    algorithm = make_algorithm_params(
        args.algorithm,
        threshold=args.threshold if args.threshold is not None else preset_values.get("threshold"),
        dither_strength=(
            args.dither_strength if args.dither_strength is not None else preset_values.get("dither_strength")
        ),
        block_size=args.block_size if args.block_size is not None else preset_values.get("block_size"),
        edge_sensitivity=(
            args.edge_sensitivity if args.edge_sensitivity is not None else preset_values.get("edge_sensitivity")
        ),
    )
    crop = CropRect(*args.crop) if args.crop else CropRect.full()

    img = Image.open(args.input)

    try:
        crop = crop.validated()
        grid = grid_for(img.size, crop, args.width, args.height)
        pattern = convert(img, crop, grid, tone, algorithm, invert=args.invert, verbose=verbose)
    except InvalidInput as e:
        parser.error(str(e))

    # Default output path
    if args.output is None:
        input_path = Path(args.input)
        args.output = input_path.parent / pattern_filename(grid.width, grid.height)

    write_csv(pattern, args.output)
    if verbose:
        print(f"Saved to: {args.output}")

    if args.preview:
        render_preview(pattern, args.cell_size).save(args.preview)
        if verbose:
            print(f"Preview saved to: {args.preview}")


if __name__ == "__main__":
    main()
