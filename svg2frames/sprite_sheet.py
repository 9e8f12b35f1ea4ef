# svg2frames/sprite_sheet.py
"""
Vector preview of a compiled frame sequence: all frames laid out on one
SVG sheet, as a single filmstrip row or as a grid.
"""

import base64
import logging
import re
from typing import List, Optional

import svgwrite

from .svg_markup import SimpleSelector, find_elements

logger = logging.getLogger(__name__)

ROOT_SELECTOR = SimpleSelector(tag='svg')


def _frame_to_data_uri(frame: str) -> str:
    encoded = base64.b64encode(frame.encode('utf-8')).decode('ascii')
    return f'data:image/svg+xml;base64,{encoded}'


def _length(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    match = re.match(r'^\s*([\d.]+)\s*(px)?\s*$', value)
    return float(match.group(1)) if match else None


def frame_aspect_ratio(frame: str) -> float:
    """
    Height / width of a frame from the root ``<svg>`` element.

    ``viewBox`` wins over ``width``/``height``; square when neither helps.
    """
    for tag in find_elements(frame, ROOT_SELECTOR):
        attributes = tag.attribute_map()

        view_box = attributes.get('viewBox')
        if view_box:
            parts = re.split(r'[,\s]+', view_box.strip())
            try:
                width, height = float(parts[2]), float(parts[3])
            except (IndexError, ValueError):
                width = height = 0.0
            if width > 0 and height > 0:
                return height / width

        width = _length(attributes.get('width'))
        height = _length(attributes.get('height'))
        if width and height:
            return height / width
        break
    return 1.0


def build_sprite_sheet_svg(frames: List[str],
                           grid_cols: Optional[int] = None,
                           frame_width: int = 128,
                           frame_height: Optional[int] = None) -> str:
    """
    Builds an SVG sprite sheet from static frames.

    Args:
        frames: Static SVG documents
        grid_cols: Number of columns (None = all frames in one row)
        frame_width: Width of a single frame on the sheet
        frame_height: Height of a single frame (None = from the first frame's aspect ratio)

    Returns:
        SVG file content
    """
    if not frames:
        raise ValueError('No frames provided for the sprite sheet')

    num_frames = len(frames)
    grid_cols = grid_cols or num_frames
    grid_rows = (num_frames + grid_cols - 1) // grid_cols
    if frame_height is None:
        frame_height = int(round(frame_width * frame_aspect_ratio(frames[0])))

    total_width = min(grid_cols, num_frames) * frame_width
    total_height = grid_rows * frame_height

    logger.info(f"Building sprite sheet: {num_frames} frames, {grid_cols} columns, "
                f"{total_width}x{total_height}")

    dwg = svgwrite.Drawing(size=(total_width, total_height))

    for idx, frame in enumerate(frames):
        row = idx // grid_cols
        col = idx % grid_cols

        image = dwg.image(
            _frame_to_data_uri(frame),
            insert=(col * frame_width, row * frame_height),
            size=(frame_width, frame_height),
            id=f'frame_{idx}'
        )
        dwg.add(image)

    return dwg.tostring()
