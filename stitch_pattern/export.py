"""Write stitch patterns out as CSV charts and preview images."""

from pathlib import Path

from PIL import Image, ImageDraw

from .core import BinaryGrid

CELL_SIZE = 12
FILLED_COLOR = (34, 34, 34)
EMPTY_COLOR = (238, 238, 238)
LINE_COLOR = (170, 170, 170)
LINE10_COLOR = (90, 90, 90)  # every 10th line
GRID_LINE_WIDTH = 1


def to_csv(grid: BinaryGrid) -> str:
    """One line per row, X for a filled stitch and O for an empty one."""
    return "\n".join(",".join("X" if cell == 1 else "O" for cell in row) for row in grid)


def pattern_filename(width: int, height: int, extension: str = "csv") -> str:
    return f"pattern_{width}x{height}.{extension}"


def write_csv(grid: BinaryGrid, path: str | Path) -> Path:
    path = Path(path)
    path.write_text(to_csv(grid), encoding="utf-8")
    return path


def render_preview(grid: BinaryGrid, cell_size: int = CELL_SIZE) -> Image.Image:
    """
    Draw the pattern as a chart.

    A thin line separates every cell and a heavier line marks every 10th
    row/column counted from the top-left corner; the outer border stays thin.
    """
    n_rows = len(grid)
    n_cols = len(grid[0]) if n_rows else 0
    w = n_cols * cell_size + GRID_LINE_WIDTH
    h = n_rows * cell_size + GRID_LINE_WIDTH
    img = Image.new("RGB", (w, h), EMPTY_COLOR)
    draw = ImageDraw.Draw(img)

    for r, row in enumerate(grid):
        for c, cell in enumerate(row):
            if cell:
                x0 = c * cell_size
                y0 = r * cell_size
                draw.rectangle([(x0, y0), (x0 + cell_size, y0 + cell_size)], fill=FILLED_COLOR)

    for r in range(n_rows + 1):
        y = r * cell_size
        if 0 < r < n_rows and r % 10 == 0:
            draw.line([(0, y), (w, y)], fill=LINE10_COLOR, width=2)
        else:
            draw.line([(0, y), (w, y)], fill=LINE_COLOR, width=GRID_LINE_WIDTH)
    for c in range(n_cols + 1):
        x = c * cell_size
        if 0 < c < n_cols and c % 10 == 0:
            draw.line([(x, 0), (x, h)], fill=LINE10_COLOR, width=2)
        else:
            draw.line([(x, 0), (x, h)], fill=LINE_COLOR, width=GRID_LINE_WIDTH)

    return img
