# svg2frames/interpolator.py
"""
Interpolation of CSS property values between two keyframe stops.

Values are first classified into one of a small set of kinds (hex colour,
transform-like function list, number with unit, plain number, SVG path data,
opaque text). Two values of the same kind are blended numerically; any other
pair falls back to a discrete switch at half progress.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

NUMBER_PATTERN = r'[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?'
UNITS = ('px', 'em', 'rem', '%', 'deg', 'rad', 'turn', 's', 'ms', 'vh', 'vw',
         'vmin', 'vmax', 'ch', 'ex', 'cm', 'mm', 'in', 'pt', 'pc')

HEX_COLOR_RE = re.compile(r'^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$')
FUNCTION_RE = re.compile(r'([\w-]+)\(([^)]*)\)')
NUMBER_RE = re.compile(r'^' + NUMBER_PATTERN + r'$')
UNIT_NUMBER_RE = re.compile(
    r'^(' + NUMBER_PATTERN + r')(' + '|'.join(re.escape(u) for u in UNITS) + r')$'
)
PATH_CHARS_RE = re.compile(r'^[MmLlHhVvCcSsQqTtAaZz\d\s.,eE+-]+$')
PATH_TOKEN_RE = re.compile(r'[a-zA-Z]|' + NUMBER_PATTERN)
CUBIC_BEZIER_RE = re.compile(
    r'^cubic-bezier\(\s*(' + NUMBER_PATTERN + r')\s*,\s*(' + NUMBER_PATTERN + r')\s*,\s*('
    + NUMBER_PATTERN + r')\s*,\s*(' + NUMBER_PATTERN + r')\s*\)$'
)

EPSILON = 1e-7


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------

def round_half_up(value: float) -> int:
    """Rounds to the nearest integer, halves upward."""
    return int(math.floor(value + 0.5))


def round_to(value: float, decimals: int = 4) -> float:
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def format_number(value: float) -> str:
    """
    Formats a number the way CSS authors write it: integral values without
    a trailing ``.0`` and negative zero as ``0``.
    """
    value = float(value)
    if not math.isfinite(value):
        return repr(value)
    if value == int(value):
        return str(int(value))
    return repr(value)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


# ---------------------------------------------------------------------------
# Easing
# ---------------------------------------------------------------------------

class CubicBezier:
    """
    CSS ``cubic-bezier()`` timing curve.

    The curve is parametric in ``u``; for an input progress ``x`` the
    parameter is found with Newton's method, falling back to bisection when
    the slope vanishes or Newton does not converge, and ``y(u)`` is returned.

    Example:
        ease = CubicBezier(0.25, 0.1, 0.25, 1.0)
        eased = ease(0.5)
    """

    def __init__(self, x1: float, y1: float, x2: float, y2: float):
        self.control_points = (x1, y1, x2, y2)

        # Polynomial coefficients for x(u) and y(u)
        self.cx = 3.0 * x1
        self.bx = 3.0 * (x2 - x1) - self.cx
        self.ax = 1.0 - self.cx - self.bx

        self.cy = 3.0 * y1
        self.by = 3.0 * (y2 - y1) - self.cy
        self.ay = 1.0 - self.cy - self.by

    def __call__(self, progress: float) -> float:
        if progress <= 0:
            return 0.0
        if progress >= 1:
            return 1.0
        return self.sample_y(self.solve_x(progress))

    def __repr__(self):
        return 'CubicBezier(%s, %s, %s, %s)' % self.control_points

    def sample_x(self, u: float) -> float:
        return ((self.ax * u + self.bx) * u + self.cx) * u

    def sample_y(self, u: float) -> float:
        return ((self.ay * u + self.by) * u + self.cy) * u

    def sample_derivative_x(self, u: float) -> float:
        return (3.0 * self.ax * u + 2.0 * self.bx) * u + self.cx

    def solve_x(self, x: float) -> float:
        """Finds the curve parameter ``u`` with ``x(u) == x``."""
        u = x
        for _ in range(8):
            error = self.sample_x(u) - x
            if abs(error) < EPSILON:
                return u
            slope = self.sample_derivative_x(u)
            if abs(slope) < EPSILON:
                break
            u -= error / slope

        # Bisection on [0, 1]
        low, high = 0.0, 1.0
        u = x
        while high - low >= EPSILON:
            estimate = self.sample_x(u)
            if abs(estimate - x) < EPSILON:
                return u
            if x > estimate:
                low = u
            else:
                high = u
            u = (low + high) / 2.0
        return u


def _step_start(progress: float) -> float:
    return 0.0 if progress <= 0 else 1.0


def _step_end(progress: float) -> float:
    return 1.0 if progress >= 1 else 0.0


EASING_FUNCTIONS: Dict[str, Callable[[float], float]] = {
    'linear': lambda progress: progress,
    'ease': CubicBezier(0.25, 0.1, 0.25, 1.0),
    'ease-in': CubicBezier(0.42, 0.0, 1.0, 1.0),
    'ease-out': CubicBezier(0.0, 0.0, 0.58, 1.0),
    'ease-in-out': CubicBezier(0.42, 0.0, 0.58, 1.0),
    'step-start': _step_start,
    'step-end': _step_end,
}


def get_easing(timing_function: Optional[str]) -> Callable[[float], float]:
    """
    Returns the easing callable for a CSS timing function.

    Args:
        timing_function: Keyword (``ease-in``...) or ``cubic-bezier(...)``

    Returns:
        Callable mapping raw progress to eased progress. Unknown names
        resolve to linear.
    """
    name = (timing_function or 'linear').strip()
    if name in EASING_FUNCTIONS:
        return EASING_FUNCTIONS[name]

    match = CUBIC_BEZIER_RE.match(name)
    if match:
        x1, y1, x2, y2 = (float(g) for g in match.groups())
        # x coordinates outside [0, 1] do not describe a function of time
        if 0.0 <= x1 <= 1.0 and 0.0 <= x2 <= 1.0:
            return CubicBezier(x1, y1, x2, y2)

    logger.debug(f"Unsupported timing function '{name}', using linear")
    return EASING_FUNCTIONS['linear']


# ---------------------------------------------------------------------------
# Value kinds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ColorValue:
    """Hex colour, reduced to its RGB channels."""
    raw: str
    red: int
    green: int
    blue: int


@dataclass(frozen=True)
class FunctionListValue:
    """Sequence of ``name(args)`` calls, e.g. a CSS transform list."""
    raw: str
    functions: Tuple[Tuple[str, Tuple[str, ...]], ...]


@dataclass(frozen=True)
class UnitNumber:
    raw: str
    value: float
    unit: str


@dataclass(frozen=True)
class PlainNumber:
    raw: str
    value: float


@dataclass(frozen=True)
class PathValue:
    """SVG path data split into command letters and numeric literals."""
    raw: str
    tokens: Tuple[str, ...]


@dataclass(frozen=True)
class OpaqueValue:
    raw: str


Value = Union[ColorValue, FunctionListValue, UnitNumber, PlainNumber, PathValue, OpaqueValue]


def parse_hex_color(text: str) -> Optional[ColorValue]:
    text = text.strip()
    if not HEX_COLOR_RE.match(text):
        return None
    digits = text[1:]
    if len(digits) in (3, 4):
        digits = ''.join(d * 2 for d in digits)
    return ColorValue(
        raw=text,
        red=int(digits[0:2], 16),
        green=int(digits[2:4], 16),
        blue=int(digits[4:6], 16),
    )


def parse_functions(text: str) -> Tuple[Tuple[str, Tuple[str, ...]], ...]:
    """Splits ``translate(10px, 5px) rotate(4deg)`` into (name, args) pairs."""
    functions = []
    for match in FUNCTION_RE.finditer(text):
        args = tuple(a for a in re.split(r'[,\s]+', match.group(2).strip()) if a)
        functions.append((match.group(1), args))
    return tuple(functions)


def parse_unit_number(text: str) -> Optional[UnitNumber]:
    match = UNIT_NUMBER_RE.match(text.strip())
    if not match:
        return None
    return UnitNumber(raw=text, value=float(match.group(1)), unit=match.group(2))


def looks_like_path(text: str) -> bool:
    stripped = text.strip()
    return bool(PATH_CHARS_RE.match(stripped)) and bool(re.search(r'[MmLl]', stripped))


def tokenize_path(text: str) -> Tuple[str, ...]:
    return tuple(PATH_TOKEN_RE.findall(text))


def classify(text: str) -> Value:
    """
    Classifies a raw property value.

    Priority: colour, function list, number with unit, plain number, path,
    opaque. A pair of values is only blended when both land in the same kind.
    """
    text = str(text)

    color = parse_hex_color(text)
    if color is not None:
        return color

    functions = parse_functions(text)
    if functions:
        return FunctionListValue(raw=text, functions=functions)

    unit_number = parse_unit_number(text)
    if unit_number is not None:
        return unit_number

    if NUMBER_RE.match(text.strip()):
        return PlainNumber(raw=text, value=float(text.strip()))

    if looks_like_path(text):
        return PathValue(raw=text, tokens=tokenize_path(text))

    return OpaqueValue(raw=text)


# ---------------------------------------------------------------------------
# Interpolation
# ---------------------------------------------------------------------------

def interpolate(from_value: str, to_value: str, progress: float,
                timing_function: Optional[str] = 'linear') -> str:
    """
    Interpolates between two CSS property values.

    Args:
        from_value: Value at the start of the segment
        to_value: Value at the end of the segment
        progress: Raw segment progress in [0, 1], easing not yet applied
        timing_function: CSS timing function name

    Returns:
        Interpolated value as CSS text
    """
    from_value, to_value = str(from_value), str(to_value)
    if progress <= 0:
        return from_value
    if progress >= 1:
        return to_value

    t = get_easing(timing_function)(progress)
    return interpolate_values(classify(from_value), classify(to_value), t)


def interpolate_values(start: Value, end: Value, t: float) -> str:
    """Blends two classified values at eased progress ``t``."""
    if type(start) is not type(end):
        return discrete(start.raw, end.raw, t)

    if isinstance(start, ColorValue):
        return _interpolate_color(start, end, t)
    if isinstance(start, FunctionListValue):
        return _interpolate_functions(start, end, t)
    if isinstance(start, UnitNumber):
        if start.unit != end.unit:
            return discrete(start.raw, end.raw, t)
        return format_number(round_to(lerp(start.value, end.value, t))) + start.unit
    if isinstance(start, PlainNumber):
        return format_number(round_to(lerp(start.value, end.value, t)))
    if isinstance(start, PathValue):
        return _interpolate_path(start, end, t)
    return discrete(start.raw, end.raw, t)


def discrete(from_value: str, to_value: str, t: float) -> str:
    return from_value if t < 0.5 else to_value


def _interpolate_color(start: ColorValue, end: ColorValue, t: float) -> str:
    channels = (
        round_half_up(lerp(start.red, end.red, t)),
        round_half_up(lerp(start.green, end.green, t)),
        round_half_up(lerp(start.blue, end.blue, t)),
    )
    return '#' + ''.join('%02x' % min(255, max(0, c)) for c in channels)


def _parse_argument(arg: str) -> Optional[Tuple[float, str]]:
    unit_number = parse_unit_number(arg)
    if unit_number is not None:
        return unit_number.value, unit_number.unit
    if NUMBER_RE.match(arg):
        return float(arg), ''
    return None


def _interpolate_functions(start: FunctionListValue, end: FunctionListValue, t: float) -> str:
    if len(start.functions) != len(end.functions):
        return discrete(start.raw, end.raw, t)

    parts = []
    for (name, args), (end_name, end_args) in zip(start.functions, end.functions):
        if name != end_name or len(args) != len(end_args):
            return discrete(start.raw, end.raw, t)

        blended = []
        for arg, end_arg in zip(args, end_args):
            a = _parse_argument(arg)
            b = _parse_argument(end_arg)
            if a is None or b is None:
                # Keywords such as url(#id) only survive when both sides agree
                if arg != end_arg:
                    return discrete(start.raw, end.raw, t)
                blended.append(arg)
                continue
            value = round_to(lerp(a[0], b[0], t))
            blended.append(format_number(value) + (a[1] or b[1]))

        parts.append('%s(%s)' % (name, ', '.join(blended)))

    return ' '.join(parts)


def _interpolate_path(start: PathValue, end: PathValue, t: float) -> str:
    if len(start.tokens) != len(end.tokens):
        return discrete(start.raw, end.raw, t)

    numeric = []
    for token, end_token in zip(start.tokens, end.tokens):
        is_number = bool(NUMBER_RE.match(token))
        if is_number != bool(NUMBER_RE.match(end_token)):
            return discrete(start.raw, end.raw, t)
        if not is_number and token != end_token:
            # Same shape but different commands: not a morph we can express
            return discrete(start.raw, end.raw, t)
        numeric.append(is_number)

    mask = np.array(numeric, dtype=bool)
    a = np.array([float(tok) if n else 0.0 for tok, n in zip(start.tokens, numeric)])
    b = np.array([float(tok) if n else 0.0 for tok, n in zip(end.tokens, numeric)])
    values = np.floor((a + (b - a) * t) * 1e4 + 0.5) / 1e4

    result = [
        format_number(values[i]) if mask[i] else token
        for i, token in enumerate(start.tokens)
    ]
    return ' '.join(result)
