# svg2frames/svg_markup.py
"""
Rewriting of SVG markup: setting presentation attributes on elements
matched by simple CSS selectors, translating CSS transforms to the SVG
``transform`` attribute syntax and baking ``transform-origin`` into it.

The document is never parsed into a tree. A tokenizer walks the markup tag
by tag and only opening tags that match are rebuilt, so everything else
(whitespace, comments, attribute order, unknown elements) is kept byte for
byte.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Mapping, Optional, Tuple

from .interpolator import NUMBER_PATTERN, format_number, round_to

logger = logging.getLogger(__name__)

DEFAULT_CANVAS_SIZE = 512

TOKEN_RE = re.compile(
    r'<!--[\s\S]*?-->'
    r'|<!\[CDATA\[[\s\S]*?\]\]>'
    r'|<\?[\s\S]*?\?>'
    r'|<![^>]*>'
    r'|(?P<tag><(?P<name>[a-zA-Z][\w:.-]*)'
    r'(?P<attrs>(?:\s+[^\s=/>]+(?:\s*=\s*(?:"[^"]*"|\'[^\']*\'|[^\s"\'>]+))?)*)'
    r'\s*(?P<close>/?)>)'
)
ATTRIBUTE_RE = re.compile(
    r'(?P<name>[^\s=/>]+)(?:\s*=\s*(?:"(?P<dq>[^"]*)"|\'(?P<sq>[^\']*)\'|(?P<bare>[^\s"\'>]+)))?'
)
STYLE_BLOCK_RE = re.compile(r'<style[^>]*>[\s\S]*?</style>', re.IGNORECASE)
SELECTOR_RE = re.compile(r'^(?P<tag>[a-zA-Z][\w-]*)?(?P<rest>(?:[#.][a-zA-Z_][\w-]*)*)$')
TRANSFORM_FUNCTION_RE = re.compile(r'(\w+)\(([^)]*)\)')
LEADING_NUMBER_RE = re.compile(r'^\s*(' + NUMBER_PATTERN + r')')
ANGLE_RE = re.compile(r'^\s*(' + NUMBER_PATTERN + r')\s*(deg|rad|turn|grad)?\s*$')


@dataclass(frozen=True)
class SimpleSelector:
    """``tag``, ``.class``, ``#id`` or a compound of those such as ``rect.eye``."""
    tag: Optional[str] = None
    element_id: Optional[str] = None
    classes: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, text: str) -> Optional['SimpleSelector']:
        """Returns None for selectors outside the supported subset."""
        text = text.strip()
        match = SELECTOR_RE.match(text)
        if not text or not match:
            return None

        element_id = None
        classes = []
        for kind, name in re.findall(r'([#.])([a-zA-Z_][\w-]*)', match.group('rest')):
            if kind == '#':
                if element_id is not None:
                    return None
                element_id = name
            else:
                classes.append(name)
        return cls(tag=match.group('tag'), element_id=element_id, classes=tuple(classes))

    def matches(self, tag_name: str, attributes: Mapping[str, str]) -> bool:
        if self.tag is not None and tag_name != self.tag:
            return False
        if self.element_id is not None and attributes.get('id') != self.element_id:
            return False
        if self.classes:
            class_names = (attributes.get('class') or '').split()
            if not all(c in class_names for c in self.classes):
                return False
        return True


@dataclass
class Attribute:
    name: str
    value: Optional[str]
    text: str
    # Span inside the tag source; -1 for attributes added by set()
    start: int = -1
    end: int = -1


@dataclass
class OpeningTag:
    """
    Opening tag together with its source text.

    set() edits attributes in place; render() writes the tag back touching
    only the edited spans, appending new attributes before ``>`` / ``/>``.
    """
    source: str
    name: str
    attributes: List[Attribute]
    self_closing: bool
    added: List[Attribute] = field(default_factory=list)

    @classmethod
    def from_match(cls, match: re.Match) -> 'OpeningTag':
        offset = match.start('attrs') - match.start('tag')
        attributes = []
        for attr in ATTRIBUTE_RE.finditer(match.group('attrs')):
            value = next((v for v in attr.group('dq', 'sq', 'bare') if v is not None), None)
            attributes.append(Attribute(
                name=attr.group('name'),
                value=value,
                text=attr.group(0),
                start=offset + attr.start(),
                end=offset + attr.end(),
            ))
        return cls(
            source=match.group('tag'),
            name=match.group('name'),
            attributes=attributes,
            self_closing=bool(match.group('close')),
        )

    def attribute_map(self) -> dict:
        return {a.name: a.value for a in self.attributes + self.added if a.value is not None}

    def set(self, name: str, value: str) -> None:
        text = '%s="%s"' % (name, escape_attribute(value))
        for attribute in self.attributes + self.added:
            if attribute.name == name:
                attribute.value = value
                attribute.text = text
                return
        self.added.append(Attribute(name, value, text))

    def render(self) -> str:
        pieces = []
        position = 0
        for attribute in self.attributes:
            pieces.append(self.source[position:attribute.start])
            pieces.append(attribute.text)
            position = attribute.end

        closing = len(self.source) - (2 if self.self_closing else 1)
        middle = self.source[position:closing]
        body = middle.rstrip()
        pieces.append(body)
        for attribute in self.added:
            pieces.append(' ' + attribute.text)
        pieces.append(middle[len(body):])
        pieces.append(self.source[closing:])
        return ''.join(pieces)


def escape_attribute(value: str) -> str:
    return value.replace('&', '&amp;').replace('<', '&lt;').replace('"', '&quot;')


def iter_opening_tags(svg: str) -> Iterator[Tuple[re.Match, OpeningTag]]:
    """Yields every opening tag; comments, CDATA and declarations are skipped."""
    for match in TOKEN_RE.finditer(svg):
        if match.group('tag') is None:
            continue
        yield match, OpeningTag.from_match(match)


def find_elements(svg: str, selector: SimpleSelector) -> List[OpeningTag]:
    """Returns the opening tags matched by a selector, in document order."""
    return [tag for _, tag in iter_opening_tags(svg) if selector.matches(tag.name, tag.attribute_map())]


def strip_style_blocks(svg: str) -> str:
    return STYLE_BLOCK_RE.sub('', svg)


def css_property_to_attribute(prop: str) -> str:
    """``strokeWidth`` -> ``stroke-width``; dashed names stay as they are."""
    return re.sub(r'([A-Z])', r'-\1', prop).lower()


def _leading_number(text: str) -> Optional[float]:
    match = LEADING_NUMBER_RE.match(text)
    return float(match.group(1)) if match else None


def _to_degrees(text: str) -> str:
    match = ANGLE_RE.match(text)
    if not match:
        number = _leading_number(text)
        return format_number(number) if number is not None else text.strip()
    value = float(match.group(1))
    unit = match.group(2)
    if unit == 'rad':
        value = math.degrees(value)
    elif unit == 'turn':
        value *= 360.0
    elif unit == 'grad':
        value *= 0.9
    return format_number(round_to(value))


def _split_args(args: str) -> List[str]:
    return [a for a in re.split(r'[,\s]+', args.strip()) if a]


def _numbers(args: str) -> List[str]:
    values = []
    for arg in _split_args(args):
        number = _leading_number(arg)
        values.append(format_number(number) if number is not None else '0')
    return values


def css_transform_to_svg(css_transform: str) -> str:
    """
    Converts a CSS transform list to SVG ``transform`` attribute syntax.

    ``translateY(-20px)`` -> ``translate(0,-20)``, ``rotate(5deg)`` ->
    ``rotate(5)``, ``scaleX(0.9) scaleY(1.1)`` -> ``scale(0.9,1.1)``. Units
    are dropped since SVG user units are implied; unknown functions are
    passed through untouched.
    """
    parts = []
    scale_x = scale_y = None

    for name, args in TRANSFORM_FUNCTION_RE.findall(css_transform or ''):
        if name == 'translateX':
            parts.append('translate(%s,0)' % (_numbers(args) or ['0'])[0])
        elif name == 'translateY':
            parts.append('translate(0,%s)' % (_numbers(args) or ['0'])[0])
        elif name == 'translate':
            values = _numbers(args) + ['0', '0']
            parts.append('translate(%s,%s)' % (values[0], values[1]))
        elif name == 'rotate':
            parts.append('rotate(%s)' % ','.join(_to_degrees(a) for a in _split_args(args)))
        elif name == 'scale':
            values = _numbers(args) or ['1']
            parts.append('scale(%s)' % ','.join(values[:2]))
        elif name in ('skewX', 'skewY'):
            parts.append('%s(%s)' % (name, _to_degrees(args)))
        elif name == 'scaleX':
            scale_x = (_numbers(args) or ['1'])[0]
        elif name == 'scaleY':
            scale_y = (_numbers(args) or ['1'])[0]
        else:
            parts.append('%s(%s)' % (name, args.strip()))

    if scale_x is not None or scale_y is not None:
        parts.append('scale(%s,%s)' % (scale_x or '1', scale_y or '1'))

    return ' '.join(parts)


def _origin_component(part: str, canvas_size: float) -> Optional[float]:
    if part == 'center':
        return canvas_size / 2.0
    if part in ('left', 'top'):
        return 0.0
    if part in ('right', 'bottom'):
        return float(canvas_size)
    number = _leading_number(part)
    if number is None:
        return None
    if part.endswith('%'):
        return number / 100.0 * canvas_size
    return number


def parse_transform_origin(value: str, canvas_size: float = DEFAULT_CANVAS_SIZE) -> Optional[Tuple[float, float]]:
    """
    Resolves a CSS ``transform-origin`` to canvas coordinates.

    Args:
        value: e.g. ``center``, ``50% 40%``, ``256px 198px``
        canvas_size: Edge length of the (square) canvas keywords refer to

    Returns:
        (x, y) or None when the value is not understood
    """
    parts = (value or '').split()
    if len(parts) >= 2:
        x = _origin_component(parts[0], canvas_size)
        y = _origin_component(parts[1], canvas_size)
        if x is not None and y is not None:
            return x, y
    elif len(parts) == 1:
        v = _origin_component(parts[0], canvas_size)
        if v is not None:
            return v, v
    return None


def bake_transform_origin(svg_transform: str, transform_origin: Optional[str],
                          canvas_size: float = DEFAULT_CANVAS_SIZE) -> str:
    """
    Wraps an SVG transform so it pivots around ``transform_origin``.

    ``scale(2)`` around ``center`` on a 512 canvas becomes
    ``translate(256,256) scale(2) translate(-256,-256)``.
    """
    if not transform_origin or not svg_transform or not svg_transform.strip():
        return svg_transform

    origin = parse_transform_origin(transform_origin, canvas_size)
    if origin is None:
        return svg_transform

    x, y = (format_number(round_to(c)) for c in origin)
    neg_x, neg_y = (format_number(round_to(-c)) for c in origin)
    return 'translate(%s,%s) %s translate(%s,%s)' % (x, y, svg_transform, neg_x, neg_y)


def properties_to_attributes(properties: Mapping[str, str],
                             canvas_size: float = DEFAULT_CANVAS_SIZE) -> List[Tuple[str, str]]:
    """
    Turns resolved CSS properties into (attribute, value) pairs.

    ``transform-origin`` is folded into ``transform`` and never emitted on
    its own.
    """
    transform_origin = properties.get('transform-origin')
    attributes = []
    for prop, value in properties.items():
        if prop == 'transform-origin':
            continue
        name = css_property_to_attribute(prop)
        if name == 'transform':
            value = bake_transform_origin(css_transform_to_svg(value), transform_origin, canvas_size)
        attributes.append((name, value))
    return attributes


def apply_properties(svg: str, selector: str, properties: Mapping[str, str],
                     canvas_size: float = DEFAULT_CANVAS_SIZE) -> str:
    """
    Sets resolved properties as attributes on every element matching a selector.

    Args:
        svg: SVG markup
        selector: Single simple selector (no commas)
        properties: Resolved CSS properties
        canvas_size: Canvas edge used to resolve ``transform-origin`` keywords

    Returns:
        Rewritten markup; unchanged if the selector is unsupported or matches nothing
    """
    parsed = SimpleSelector.parse(selector)
    if parsed is None:
        logger.debug(f"Unsupported selector '{selector}' skipped")
        return svg
    if not properties:
        return svg

    attributes = properties_to_attributes(properties, canvas_size)
    pieces = []
    position = 0
    for match, tag in iter_opening_tags(svg):
        if not parsed.matches(tag.name, tag.attribute_map()):
            continue
        for name, value in attributes:
            tag.set(name, value)
        pieces.append(svg[position:match.start()])
        pieces.append(tag.render())
        position = match.end()

    if not pieces:
        return svg
    pieces.append(svg[position:])
    return ''.join(pieces)
