#!/usr/bin/env python
"""
svg2frames - Command line interface for compiling animated SVGs into static frames.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .converter import AnimatedSVGConverter, Svg2FramesError, load_config

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Compile a CSS-animated SVG into static SVG frames')

    parser.add_argument('input', help='Input animated SVG file path')
    parser.add_argument('--output-dir', help='Output directory (default: frames/ next to the input)')
    parser.add_argument('--fps', type=float, help='Frames per second (default: 8)')
    parser.add_argument('--frames', type=int, dest='frame_count',
                        help='Exact number of frames (overrides --fps)')
    parser.add_argument('--canvas-size', type=float,
                        help='Canvas edge used for transform-origin keywords (default: 512)')
    parser.add_argument('--sprite-sheet', action='store_true',
                        help='Also write an SVG sprite sheet of all frames')
    parser.add_argument('--parallel', action='store_true', help='Compile frames on a thread pool')
    parser.add_argument('--config', help='Path to YAML configuration file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    return parser.parse_args(argv)


def build_config(args) -> Dict[str, Any]:
    """YAML configuration with command line overrides applied on top."""
    config = load_config(args.config)

    def section(name: str) -> Dict[str, Any]:
        if not isinstance(config.get(name), dict):
            config[name] = {}
        return config[name]

    if args.fps is not None:
        section('frames')['fps'] = args.fps
    if args.frame_count is not None:
        section('frames')['frame_count'] = args.frame_count
    if args.canvas_size is not None:
        section('canvas')['size'] = args.canvas_size
    if args.sprite_sheet:
        section('output')['sprite_sheet'] = True
    if args.parallel:
        section('advanced')['parallel_processing'] = True

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT
    )

    try:
        converter = AnimatedSVGConverter(build_config(args))
        report = converter.convert(args.input, args.output_dir)
    except Svg2FramesError as e:
        logger.error(f"Conversion failed: {e}")
        print(json.dumps({'error': str(e)}, indent=2), file=sys.stderr)
        return 1

    print(json.dumps(report, indent=2))
    logger.info(f"Successfully compiled {args.input} into {report['frames_count']} frames")
    return 0


if __name__ == "__main__":
    sys.exit(main())
