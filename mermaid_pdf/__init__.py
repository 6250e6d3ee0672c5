"""Markdown with Mermaid diagrams to PDF, via pandoc and a headless browser."""
from .converter import ConversionError, MarkdownToPDFConverter, Stage, clean_generated_files
from .normalizer import normalize, normalize_html, normalize_html_file
from .scaling import scale_dimension, scale_style_property, scale_viewbox

__all__ = [
    "MarkdownToPDFConverter",
    "ConversionError",
    "Stage",
    "clean_generated_files",
    "normalize",
    "normalize_html",
    "normalize_html_file",
    "scale_dimension",
    "scale_style_property",
    "scale_viewbox",
]
