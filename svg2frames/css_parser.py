# svg2frames/css_parser.py
"""
Parser for the subset of CSS found in animated SVG ``<style>`` blocks:
``@keyframes`` rules and rules binding simple selectors to an ``animation``.

Parsing never raises. Anything that cannot be understood is dropped, so a
document with unusable CSS simply comes back with empty tables.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

STYLE_CONTENT_RE = re.compile(r'<style[^>]*>([\s\S]*?)</style>', re.IGNORECASE)
COMMENT_RE = re.compile(r'/\*[\s\S]*?\*/')
CDATA_MARKER_RE = re.compile(r'<!\[CDATA\[|\]\]>')
KEYFRAMES_START_RE = re.compile(r'@(?:-webkit-|-moz-)?keyframes\s+([\w-]+)\s*\{')
STOP_RE = re.compile(r'([\w%.,\s]+?)\s*\{([^{}]*)\}')
RULE_RE = re.compile(r'([^{}]+?)\s*\{([^{}]*)\}')
TIME_TOKEN_RE = re.compile(r'^\d*\.?\d+m?s$')
DURATION_RE = re.compile(r'^(\d*\.?\d+)(ms|s)$')

TIMING_FUNCTIONS = ('linear', 'ease', 'ease-in', 'ease-out', 'ease-in-out', 'step-start', 'step-end')
DIRECTIONS = ('normal', 'reverse', 'alternate', 'alternate-reverse')
FILL_MODES = ('none', 'forwards', 'backwards', 'both')
PLAY_STATES = ('running', 'paused')

ANIMATION_PROPERTIES = (
    'animation',
    'animation-name',
    'animation-duration',
    'animation-timing-function',
    'animation-delay',
    'animation-iteration-count',
    'animation-direction',
    'animation-fill-mode',
    'animation-play-state',
)


@dataclass(frozen=True)
class KeyframeStop:
    """Single stop of a ``@keyframes`` rule; offset is a fraction in [0, 1]."""
    offset: float
    properties: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class KeyframeSet:
    """All stops of one ``@keyframes`` rule, sorted by offset."""
    name: str
    stops: Tuple[KeyframeStop, ...] = ()

    def __len__(self) -> int:
        return len(self.stops)


@dataclass(frozen=True)
class AnimationBinding:
    """Animation declared on one CSS rule together with its plain declarations."""
    selector_group: str
    name: str
    duration: float = 0.0
    delay: float = 0.0
    timing_function: str = 'ease'
    direction: str = 'normal'
    iteration_count: str = '1'
    fill_mode: str = 'none'
    static_properties: Dict[str, str] = field(default_factory=dict)

    @property
    def selectors(self) -> List[str]:
        """Individual selectors of a comma separated selector group."""
        return [s.strip() for s in self.selector_group.split(',') if s.strip()]


def extract_style_content(svg: str) -> Optional[str]:
    """Returns the text of the first ``<style>`` element, or None."""
    match = STYLE_CONTENT_RE.search(svg)
    return match.group(1) if match else None


def strip_comments(css: str) -> str:
    """Removes CSS comments and the ``<![CDATA[`` / ``]]>`` wrapper of a style body."""
    return COMMENT_RE.sub('', CDATA_MARKER_RE.sub('', css))


def parse_declarations(text: str) -> Dict[str, str]:
    """
    Parses ``prop: value; prop: value`` into a dict.

    Declarations without a colon or without a property name are dropped.
    """
    properties = {}
    for declaration in text.split(';'):
        if ':' not in declaration:
            continue
        prop, value = declaration.split(':', 1)
        prop = prop.strip()
        if prop:
            properties[prop] = value.strip()
    return properties


def parse_duration(value: str) -> float:
    """
    Converts a CSS time value to seconds.

    Args:
        value: ``500ms`` or ``2s``

    Returns:
        Seconds; 0 for anything that is not a plain time token
    """
    match = DURATION_RE.match((value or '').strip())
    if not match:
        return 0.0
    number = float(match.group(1))
    return number / 1000.0 if match.group(2) == 'ms' else number


def _find_block_end(text: str, open_index: int) -> int:
    """Index just past the brace matching the one at ``open_index``."""
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return index + 1
    return len(text)


def _iter_keyframes_blocks(css: str):
    """Yields (name, body, start, end) for every keyframes at-rule."""
    position = 0
    while True:
        match = KEYFRAMES_START_RE.search(css, position)
        if not match:
            return
        open_index = match.end() - 1
        end = _find_block_end(css, open_index)
        body = css[open_index + 1:end - 1] if css[end - 1:end] == '}' else css[open_index + 1:end]
        yield match.group(1), body, match.start(), end
        position = end


def _parse_offsets(selector: str) -> List[float]:
    offsets = []
    for part in selector.split(','):
        part = part.strip().lower()
        if part == 'from':
            offsets.append(0.0)
        elif part == 'to':
            offsets.append(1.0)
        else:
            match = re.match(r'^(\d*\.?\d+)%$', part)
            if not match:
                continue
            offset = float(match.group(1)) / 100.0
            if 0.0 <= offset <= 1.0:
                offsets.append(offset)
    return offsets


def parse_keyframe_body(body: str) -> Tuple[KeyframeStop, ...]:
    stops = []
    for match in STOP_RE.finditer(body):
        properties = parse_declarations(match.group(2))
        for offset in _parse_offsets(match.group(1)):
            stops.append(KeyframeStop(offset=offset, properties=properties))

    # Stable sort keeps declaration order for equal offsets
    stops.sort(key=lambda stop: stop.offset)
    return tuple(stops)


def parse_keyframes(css: str) -> Dict[str, KeyframeSet]:
    """
    Parses every ``@keyframes`` block of a stylesheet.

    Args:
        css: Stylesheet text, usually the content of an SVG ``<style>``

    Returns:
        Mapping of keyframes name to its KeyframeSet
    """
    css = strip_comments(css or '')
    result: Dict[str, KeyframeSet] = {}
    for name, body, _, _ in _iter_keyframes_blocks(css):
        result[name] = KeyframeSet(name=name, stops=parse_keyframe_body(body))
        logger.debug(f"Parsed @keyframes {name}: {len(result[name])} stops")
    return result


def remove_keyframes(css: str) -> str:
    pieces = []
    position = 0
    for _, _, start, end in _iter_keyframes_blocks(css):
        pieces.append(css[position:start])
        position = end
    pieces.append(css[position:])
    return ''.join(pieces)


def _split_layers(value: str) -> List[str]:
    """Splits on top level commas, leaving ``cubic-bezier(a, b, ...)`` intact."""
    layers, depth, current = [], 0, []
    for char in value:
        if char == '(':
            depth += 1
        elif char == ')':
            depth = max(0, depth - 1)
        if char == ',' and depth == 0:
            layers.append(''.join(current))
            current = []
        else:
            current.append(char)
    layers.append(''.join(current))
    return [layer.strip() for layer in layers if layer.strip()]


def _split_tokens(value: str) -> List[str]:
    """Splits on whitespace outside parentheses."""
    tokens, depth, current = [], 0, []
    for char in value:
        if char == '(':
            depth += 1
        elif char == ')':
            depth = max(0, depth - 1)
        if char.isspace() and depth == 0:
            if current:
                tokens.append(''.join(current))
                current = []
        else:
            current.append(char)
    if current:
        tokens.append(''.join(current))
    return tokens


def parse_animation_shorthand(shorthand: str) -> Dict[str, object]:
    """
    Parses the ``animation`` shorthand.

    Tokens are recognised by their shape: the first time value is the
    duration and the second the delay, keywords fill the timing function,
    iteration count, direction and fill mode, and whatever is left is the
    animation name.
    """
    info: Dict[str, object] = {}
    layers = _split_layers(shorthand)
    if not layers:
        return info
    if len(layers) > 1:
        logger.debug(f"Only the first animation of '{shorthand}' is used")

    duration_found = False
    for token in _split_tokens(layers[0]):
        if TIME_TOKEN_RE.match(token):
            if not duration_found:
                info['duration'] = parse_duration(token)
                duration_found = True
            else:
                info['delay'] = parse_duration(token)
        elif token in TIMING_FUNCTIONS or token.startswith('cubic-bezier('):
            info['timing_function'] = token
        elif token == 'infinite' or token.isdigit():
            info['iteration_count'] = token
        elif token in DIRECTIONS:
            info['direction'] = token
        elif token in FILL_MODES:
            info['fill_mode'] = token
        elif token in PLAY_STATES:
            continue
        else:
            if 'name' in info:
                logger.debug(f"Token '{token}' replaces animation name '{info['name']}' in '{shorthand}'")
            info['name'] = token
    return info


def _extract_animation_info(properties: Dict[str, str]) -> Dict[str, object]:
    info: Dict[str, object] = {}
    if properties.get('animation'):
        info.update(parse_animation_shorthand(properties['animation']))

    # Longhands override the shorthand
    if properties.get('animation-name'):
        info['name'] = _split_layers(properties['animation-name'])[0]
    if properties.get('animation-duration'):
        info['duration'] = parse_duration(properties['animation-duration'])
    if properties.get('animation-timing-function'):
        info['timing_function'] = properties['animation-timing-function']
    if properties.get('animation-delay'):
        info['delay'] = parse_duration(properties['animation-delay'])
    if properties.get('animation-iteration-count'):
        info['iteration_count'] = properties['animation-iteration-count']
    if properties.get('animation-direction'):
        info['direction'] = properties['animation-direction']
    if properties.get('animation-fill-mode'):
        info['fill_mode'] = properties['animation-fill-mode']
    return info


def parse_animations(css: str) -> Dict[str, AnimationBinding]:
    """
    Finds rules that bind selectors to an animation.

    Args:
        css: Stylesheet text

    Returns:
        Mapping of selector group (as written) to AnimationBinding. Rules
        without an animation name are left out.
    """
    css = remove_keyframes(strip_comments(css or ''))
    result: Dict[str, AnimationBinding] = {}

    for match in RULE_RE.finditer(css):
        selector = ' '.join(match.group(1).split())
        if not selector or selector.startswith('@'):
            continue

        properties = parse_declarations(match.group(2))
        info = _extract_animation_info(properties)
        name = info.pop('name', '')
        if not name or name == 'none':
            continue

        static_properties = {
            prop: value for prop, value in properties.items()
            if prop not in ANIMATION_PROPERTIES
        }
        result[selector] = AnimationBinding(
            selector_group=selector,
            name=name,
            static_properties=static_properties,
            **info
        )
        logger.debug(f"Animation '{name}' bound to '{selector}'")

    return result
