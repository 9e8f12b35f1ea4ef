"""
svg2frames - Compile CSS-animated SVG files into static SVG frames.

This package parses the ``@keyframes`` and ``animation`` rules of an SVG's
inline stylesheet, interpolates the animated properties at evenly spaced
instants and bakes them into the markup as presentation attributes.
"""

__version__ = "0.1.0"

from .css_parser import AnimationBinding, KeyframeSet, KeyframeStop, parse_animations, parse_duration, parse_keyframes
from .interpolator import interpolate
from .frame_generator import FrameGenerator, SVGFrame, generate_frames
from .sprite_sheet import build_sprite_sheet_svg
from .converter import AnimatedSVGConverter

__all__ = [
    'AnimationBinding',
    'KeyframeSet',
    'KeyframeStop',
    'parse_keyframes',
    'parse_animations',
    'parse_duration',
    'interpolate',
    'FrameGenerator',
    'SVGFrame',
    'generate_frames',
    'build_sprite_sheet_svg',
    'AnimatedSVGConverter',
]
