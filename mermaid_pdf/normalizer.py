"""
Post-processing of inline SVG diagrams so they scale legibly in print.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

from pathlib import Path
from typing import Optional, Tuple, Union

from bs4 import BeautifulSoup, Tag

from .scaling import scale_dimension, scale_style_property, scale_viewbox

DIAGRAM_STYLE = "width:90%;height:auto;display:block;margin:auto;"

SHAPE_TAGS = ['rect', 'circle', 'ellipse', 'polygon', 'line', 'path']
SHAPE_ATTRIBUTES = [
    'x', 'y', 'cx', 'cy', 'rx', 'ry', 'r', 'width', 'height',
    'x1', 'y1', 'x2', 'y2', 'stroke-width',
]


def _find_attribute(tag: Tag, name: str) -> Optional[str]:
    """Return the attribute key matching ``name`` case-insensitively."""
    lowered = name.lower()
    for key in tag.attrs:
        if key.lower() == lowered:
            return key
    return None


def _scale_text(text: Tag, factor: float) -> None:
    if text.get('font-size'):
        text['font-size'] = scale_dimension(text['font-size'], factor)
    style = text.get('style')
    if style and 'font-size' in style:
        text['style'] = scale_style_property(style, 'font-size', factor)


def _scale_shape(shape: Tag, factor: float) -> None:
    for attr in SHAPE_ATTRIBUTES:
        if shape.get(attr):
            shape[attr] = scale_dimension(shape[attr], factor)
    style = shape.get('style')
    if style and 'stroke-width' in style:
        shape['style'] = scale_style_property(style, 'stroke-width', factor)


def normalize(document: BeautifulSoup, factor: float = 1) -> Tuple[BeautifulSoup, int]:
    """Rewrite every SVG diagram in ``document`` for responsive print layout.

    Each ``<svg>`` loses its explicit ``width``/``height``, gets a fixed
    responsive style, has its text and shape geometry multiplied by
    ``factor`` and its ``viewBox`` size divided by ``factor``.

    Args:
        document: Parsed HTML document, mutated in place
        factor: Scale factor applied to child geometry (must be positive)

    Returns:
        Tuple of (document, number of SVG elements processed)
    """
    if factor <= 0:
        raise ValueError(f"Scale factor must be positive, got {factor}")

    count = 0
    for svg in document.find_all('svg'):
        count += 1
        for attr in ('width', 'height'):
            key = _find_attribute(svg, attr)
            if key is not None:
                del svg[key]
        svg['style'] = DIAGRAM_STYLE

        for text in svg.find_all('text'):
            _scale_text(text, factor)
        for shape in svg.find_all(SHAPE_TAGS):
            _scale_shape(shape, factor)

        viewbox_key = _find_attribute(svg, 'viewBox')
        if viewbox_key is not None and svg[viewbox_key]:
            svg[viewbox_key] = scale_viewbox(svg[viewbox_key], factor)

    return document, count


def normalize_html(html: str, factor: float = 1) -> Tuple[str, int]:
    """Parse an HTML string, normalize its diagrams and serialize it back."""
    soup = BeautifulSoup(html, 'html.parser')
    soup, count = normalize(soup, factor)
    return str(soup), count


def normalize_html_file(html_file: Union[str, Path], factor: float = 1) -> int:
    """Normalize the diagrams of an HTML file in place.

    The file is only rewritten when at least one diagram was found.
    """
    html_file = Path(html_file)
    with open(html_file, 'r', encoding='utf-8') as f:
        html_content = f.read()

    updated_html, count = normalize_html(html_content, factor)
    if count > 0:
        with open(html_file, 'w', encoding='utf-8') as f:
            f.write(updated_html)
    return count
