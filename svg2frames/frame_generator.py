# svg2frames/frame_generator.py
"""
Compiles a CSS-animated SVG into a list of static SVG frames.

Each frame is sampled at a point of the timeline, the animated properties
of every binding are resolved at that instant and written onto the matching
elements as presentation attributes, and the ``<style>`` block is removed.
Frames are independent of each other and can be compiled in parallel.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np

from .css_parser import (
    AnimationBinding,
    KeyframeSet,
    KeyframeStop,
    extract_style_content,
    parse_animations,
    parse_keyframes,
)
from .interpolator import interpolate, round_half_up
from .svg_markup import DEFAULT_CANVAS_SIZE, apply_properties, strip_style_blocks

logger = logging.getLogger(__name__)

DEFAULT_FPS = 8


@dataclass
class SVGFrame:
    """Single compiled frame"""
    data: str  # Static SVG markup
    timestamp: float
    duration: float
    index: int
    size: int = 0  # Size in bytes


def compute_total_duration(animations: Mapping[str, AnimationBinding]) -> float:
    """Longest animation duration in seconds; 1 when every duration is zero."""
    durations = [b.duration for b in animations.values() if b.duration > 0]
    return max(durations) if durations else 1.0


def resolve_frame_count(total_duration: float, fps: float = DEFAULT_FPS,
                        frame_count: Optional[int] = None) -> int:
    if frame_count and frame_count > 0:
        return int(frame_count)
    return max(1, round_half_up(fps * total_duration))


def sample_times(total_duration: float, frame_count: int) -> np.ndarray:
    """Sample instants ``i / frame_count * total_duration`` for every frame."""
    return np.arange(frame_count, dtype=float) / frame_count * total_duration


def compute_progress(binding: AnimationBinding, time: float) -> float:
    """
    Position within the current animation cycle at ``time``.

    Args:
        binding: Animation binding
        time: Timeline position in seconds

    Returns:
        Progress in [0, 1] after delay and direction are applied
    """
    effective_time = max(0.0, time - binding.delay)
    duration = binding.duration

    if duration > 0:
        progress = math.fmod(effective_time, duration) / duration
        cycle = int(math.floor(effective_time / duration))
    else:
        progress = 0.0
        cycle = 0

    if binding.direction == 'reverse':
        progress = 1.0 - progress
    elif binding.direction == 'alternate':
        if cycle % 2 == 1:
            progress = 1.0 - progress
    elif binding.direction == 'alternate-reverse':
        if cycle % 2 == 0:
            progress = 1.0 - progress

    return progress


def resolve_keyframe_properties(stops: Sequence[KeyframeStop], progress: float,
                                timing_function: Optional[str] = 'ease') -> Dict[str, str]:
    """
    Resolves every animated property of a keyframe set at ``progress``.

    Outside the first and last stop the nearest stop is used as is. Between
    two stops each property present on both sides is interpolated; one-sided
    properties pass through unchanged.
    """
    if not stops:
        return {}
    if len(stops) == 1:
        return dict(stops[0].properties)

    first, last = stops[0], stops[-1]
    if progress <= first.offset:
        return dict(first.properties)
    if progress >= last.offset:
        return dict(last.properties)

    low, high = first, last
    for current, following in zip(stops, stops[1:]):
        if current.offset <= progress <= following.offset:
            low, high = current, following
            break

    span = high.offset - low.offset
    local_progress = (progress - low.offset) / span if span > 0 else 0.0

    resolved = {}
    for prop in list(low.properties) + [p for p in high.properties if p not in low.properties]:
        start = low.properties.get(prop)
        end = high.properties.get(prop)
        if start is not None and end is not None:
            resolved[prop] = interpolate(start, end, local_progress, timing_function)
        else:
            resolved[prop] = start if start is not None else end
    return resolved


def resolve_binding(binding: AnimationBinding, keyframe_set: KeyframeSet, time: float) -> Dict[str, str]:
    """Static declarations of the rule overlaid by the animated values at ``time``."""
    progress = compute_progress(binding, time)
    animated = resolve_keyframe_properties(keyframe_set.stops, progress, binding.timing_function)
    merged = dict(binding.static_properties)
    merged.update(animated)
    return merged


class FrameGenerator:
    """
    Turns an animated SVG into static frames.

    Example:
        generator = FrameGenerator({'fps': 12})
        frames = generator.generate(svg_text)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Args:
            config: Optional settings: ``fps``, ``frame_count``, ``canvas_size``,
                ``parallel_processing``, ``num_workers``
        """
        self.config = config or {}
        self.fps = self.config.get('fps') or DEFAULT_FPS
        self.frame_count = self.config.get('frame_count')
        self.canvas_size = self.config.get('canvas_size') or DEFAULT_CANVAS_SIZE
        self.parallel_processing = self.config.get('parallel_processing', False)
        self.num_workers = self.config.get('num_workers', 4)

    def generate(self, svg: str) -> List[str]:
        """
        Compiles the frames of an animated SVG.

        Args:
            svg: SVG markup with an inline ``<style>`` block

        Returns:
            Static SVG documents, one per frame. Markup without usable
            animation comes back as a single unchanged frame.
        """
        return [frame.data for frame in self.generate_timed(svg)]

    def generate_timed(self, svg: str) -> List[SVGFrame]:
        """Like generate(), keeping each frame's sample time and index."""
        style_content = extract_style_content(svg)
        if not style_content:
            logger.debug("No <style> block, returning the document as a single frame")
            return [SVGFrame(data=svg, timestamp=0.0, duration=0.0, index=0, size=len(svg.encode('utf-8')))]

        keyframes = parse_keyframes(style_content)
        animations = parse_animations(style_content)
        if not keyframes or not animations:
            logger.debug("No @keyframes or animation bindings, returning the document as a single frame")
            return [SVGFrame(data=svg, timestamp=0.0, duration=0.0, index=0, size=len(svg.encode('utf-8')))]

        total_duration = compute_total_duration(animations)
        frame_count = resolve_frame_count(total_duration, self.fps, self.frame_count)
        times = sample_times(total_duration, frame_count)
        frame_duration = total_duration / frame_count

        logger.info(f"Generating {frame_count} frames over {total_duration:g}s "
                    f"({len(animations)} animations, {len(keyframes)} keyframe sets)")

        def build(index: int) -> SVGFrame:
            data = self.render_frame(svg, keyframes, animations, float(times[index]))
            return SVGFrame(
                data=data,
                timestamp=float(times[index]),
                duration=frame_duration,
                index=index,
                size=len(data.encode('utf-8')),
            )

        if self.parallel_processing and frame_count > 1:
            with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
                return list(executor.map(build, range(frame_count)))
        return [build(index) for index in range(frame_count)]

    def render_frame(self,
                     svg: str,
                     keyframes: Mapping[str, KeyframeSet],
                     animations: Mapping[str, AnimationBinding],
                     time: float) -> str:
        """
        Renders the static document for a single instant.

        Args:
            svg: Animated SVG markup
            keyframes: Parsed ``@keyframes`` table
            animations: Parsed animation bindings
            time: Timeline position in seconds

        Returns:
            SVG markup with resolved attributes and without ``<style>``
        """
        frame = svg
        for selector_group, binding in animations.items():
            keyframe_set = keyframes.get(binding.name)
            if keyframe_set is None or not keyframe_set.stops:
                logger.debug(f"No keyframes '{binding.name}' for '{selector_group}', skipped")
                continue

            properties = resolve_binding(binding, keyframe_set, time)
            for selector in binding.selectors:
                frame = apply_properties(frame, selector, properties, self.canvas_size)

        return strip_style_blocks(frame)


def generate_frames(svg: str, fps: float = DEFAULT_FPS, frame_count: Optional[int] = None,
                    canvas_size: float = DEFAULT_CANVAS_SIZE) -> List[str]:
    """
    Compiles an animated SVG into static SVG frames.

    Args:
        svg: SVG markup with CSS ``@keyframes`` animations
        fps: Frames per second used when ``frame_count`` is not given
        frame_count: Explicit number of frames
        canvas_size: Canvas edge used to resolve ``transform-origin`` keywords

    Returns:
        One static SVG string per frame
    """
    generator = FrameGenerator({
        'fps': fps,
        'frame_count': frame_count,
        'canvas_size': canvas_size,
    })
    return generator.generate(svg)
