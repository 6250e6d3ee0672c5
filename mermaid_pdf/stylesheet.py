"""
Shared print stylesheet for converted documents.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

from pathlib import Path

STYLESHEET_NAME = "mermaid-styles.css"

MERMAID_STYLES = """
/* Mermaid diagram layout - sizing is left to the SVG post-processing */
.mermaid {
    display: block !important;
    width: 100% !important;
    max-width: none !important;
    min-height: 400px !important;
    margin: 40px 0 !important;
    overflow: visible !important;
}

.mermaid svg {
    width: 100% !important;
    height: auto !important;
    min-height: 400px !important;
    max-width: none !important;
    margin-bottom: 200px !important;
    display: block !important;
}

.mermaid svg text {
    font-size: 14px !important;
    font-family: Arial, sans-serif !important;
}

.mermaid svg .node rect,
.mermaid svg .node circle,
.mermaid svg .node ellipse,
.mermaid svg .node polygon {
    stroke-width: 2px !important;
}

body {
    font-family: Arial, sans-serif;
    line-height: 1.6;
    margin: 40px;
    zoom: 1 !important;
}

@media print {
    .mermaid {
        display: block !important;
        page-break-inside: avoid !important;
        margin: 60px 0 !important;
        min-height: 500px !important;
    }
    .mermaid svg {
        margin-bottom: 300px !important;
        min-height: 500px !important;
    }
    body {
        zoom: 1 !important;
    }
}

.mermaid * {
    visibility: visible !important;
    opacity: 1 !important;
}
"""


def write_stylesheet(html_dir: Path) -> bool:
    """Write the diagram stylesheet into ``html_dir`` unless it already exists.

    Returns:
        True if the file was created, False if an existing one was kept
    """
    css_path = Path(html_dir) / STYLESHEET_NAME
    if css_path.exists():
        return False
    with open(css_path, 'w', encoding='utf-8') as f:
        f.write(MERMAID_STYLES)
    return True
