# -*- coding: utf-8 -*-
"""svg2frames.converter - Writes the static frames of an animated SVG to disk"""

from __future__ import annotations

import copy
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml

from .frame_generator import FrameGenerator, SVGFrame
from .sprite_sheet import build_sprite_sheet_svg

logger = logging.getLogger(__name__)

__all__ = [
    "AnimatedSVGConverter",
    "Svg2FramesError",
    "SVGNotFoundError",
    "ConversionError",
    "ConfigurationError",
    "create_default_config",
    "load_config",
]


class Svg2FramesError(Exception):
    """Base exception"""


class SVGNotFoundError(Svg2FramesError):
    """Raised when input file not found"""


class ConversionError(Svg2FramesError):
    """Raised on conversion failure"""


class ConfigurationError(Svg2FramesError):
    """Raised on invalid config"""


class AnimatedSVGConverter:
    """Compiles an animated SVG file into one static SVG file per frame."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = self._validate_config(copy.deepcopy(config or {}))
        self.generator = FrameGenerator({
            "fps": self.config["frames"]["fps"],
            "frame_count": self.config["frames"]["frame_count"],
            "canvas_size": self.config["canvas"]["size"],
            "parallel_processing": self.config["advanced"]["parallel_processing"],
            "num_workers": self.config["advanced"]["num_workers"],
        })

    # --- configuration helpers -------------------------------------------------
    def _validate_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        defaults = create_default_config()
        for section, values in defaults.items():
            if not isinstance(config.get(section), dict):
                if section in config and config[section] is not None:
                    raise ConfigurationError(f"Section '{section}' must be a mapping")
                config[section] = values
            else:
                for key, value in values.items():
                    config[section].setdefault(key, value)

        _require_positive(config["frames"]["fps"], "frames.fps")
        if config["frames"]["frame_count"] is not None:
            _require_positive(config["frames"]["frame_count"], "frames.frame_count", integer=True)
        _require_positive(config["canvas"]["size"], "canvas.size")
        _require_positive(config["output"]["sprite_frame_width"], "output.sprite_frame_width", integer=True)
        if config["output"]["sprite_columns"] is not None:
            _require_positive(config["output"]["sprite_columns"], "output.sprite_columns", integer=True)
        _require_positive(config["advanced"]["num_workers"], "advanced.num_workers", integer=True)
        return config

    # --- public API ------------------------------------------------------------
    def convert(self, input_path: str, output_dir: Optional[str] = None,
                progress_callback: Optional[Callable] = None) -> Dict[str, Any]:
        start_time = datetime.now()
        logger.info("Starting conversion %s -> %s", input_path, output_dir or "frames/")

        try:
            path = Path(input_path)
            if not path.is_file():
                raise SVGNotFoundError(f"File not found: {input_path}")
            out_dir = Path(output_dir) if output_dir else path.parent / "frames"

            # 1. read
            self._update_progress(progress_callback, 10, "Reading SVG...")
            svg_content = path.read_text(encoding="utf-8")

            # 2. compile frames
            self._update_progress(progress_callback, 30, "Compiling frames...")
            frames = self.generator.generate_timed(svg_content)
            if not frames:
                raise ConversionError("Frame generation returned 0 frames")

            # 3. save frames
            self._update_progress(progress_callback, 70, "Saving frames...")
            out_dir.mkdir(parents=True, exist_ok=True)
            results = self._save_frames(frames, path.stem, out_dir)

            # 4. optional sprite sheet
            sprite_path = None
            if self.config["output"]["sprite_sheet"]:
                self._update_progress(progress_callback, 90, "Building sprite sheet...")
                sprite = build_sprite_sheet_svg(
                    [frame.data for frame in frames],
                    grid_cols=self.config["output"]["sprite_columns"],
                    frame_width=self.config["output"]["sprite_frame_width"],
                )
                sprite_path = out_dir / f"{path.stem}_sprite.svg"
                self._save_svg(sprite, sprite_path)

            elapsed = (datetime.now() - start_time).total_seconds()
            self._update_progress(progress_callback, 100, "Done!")
            return {
                "status": "success",
                "input": str(path),
                "output_dir": str(out_dir),
                "fps": self.config["frames"]["fps"],
                "frames_count": len(frames),
                "total_duration": sum(frame.duration for frame in frames),
                "frames": results,
                "sprite_sheet": str(sprite_path) if sprite_path else None,
                "elapsed": elapsed,
            }
        except OSError as exc:
            logger.error("Conversion error: %s", exc)
            raise ConversionError(str(exc)) from exc
        except Svg2FramesError as exc:
            logger.error("Conversion error: %s", exc)
            raise

    # -------------------------------------------------------------------------
    def _save_frames(self, frames: List[SVGFrame], name: str, out_dir: Path) -> List[Dict[str, Any]]:
        pattern = self.config["output"]["filename_pattern"]
        results = []
        for frame in frames:
            try:
                filename = pattern.format(name=name, index=frame.index)
            except (KeyError, IndexError, ValueError) as exc:
                raise ConfigurationError(f"Invalid output.filename_pattern '{pattern}': {exc}") from exc
            frame_path = out_dir / filename
            size = self._save_svg(frame.data, frame_path)
            results.append({
                "frame": frame.index,
                "file": str(frame_path),
                "timestamp": frame.timestamp,
                "size": size,
            })
        logger.info("Saved %d frames to %s", len(results), out_dir)
        return results

    def _save_svg(self, svg: str, path: Path) -> int:
        with open(path, "w", encoding="utf-8") as f:
            f.write(svg)
        return os.path.getsize(path)

    def _update_progress(self, cb, pct: int, msg: str):
        if cb:
            cb(pct, msg)


# -----------------------------------------------------------------------------

def _require_positive(value: Any, name: str, integer: bool = False) -> None:
    valid_types = (int,) if integer else (int, float)
    if isinstance(value, bool) or not isinstance(value, valid_types) or value <= 0:
        kind = "positive integer" if integer else "positive number"
        raise ConfigurationError(f"{name} must be a {kind}, got {value!r}")


def create_default_config() -> Dict[str, Any]:
    return {
        "frames": {"fps": 8, "frame_count": None},
        "canvas": {"size": 512},
        "output": {
            "filename_pattern": "{name}_frame_{index:04d}.svg",
            "sprite_sheet": False,
            "sprite_frame_width": 128,
            "sprite_columns": None,
        },
        "advanced": {
            "parallel_processing": False,
            "num_workers": 4,
        },
    }


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML file if provided."""
    config: Dict[str, Any] = {}

    if config_path:
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error(f"Failed to load configuration: {exc}")
            raise ConfigurationError(f"Cannot load {config_path}: {exc}") from exc
        if not isinstance(config, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping")
        logger.info(f"Loaded configuration from {config_path}")

    return config
