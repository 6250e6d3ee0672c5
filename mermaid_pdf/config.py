"""
Configuration for the markdown to PDF converter.

Settings are resolved in this order (first wins):
    1. Values passed on the command line
    2. Environment variables prefixed with ``MERMAID_PDF_``
    3. A JSON file named by ``MERMAID_PDF_CONFIG``
    4. Built-in defaults

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

ENV_PREFIX = "MERMAID_PDF_"
CONFIG_FILE_ENV = "MERMAID_PDF_CONFIG"

DEFAULTS: Dict[str, Any] = {
    "output_dir": ".",
    "tools_dir": ".",
    "pandoc_path": None,
    "mermaid_format": "svg",
    "mermaid_width": 1600,
    "mermaid_scale": 10,
    "svg_scale": 1.0,
    "settle_timeout_ms": 2000,
    "page_margin": "20mm",
}


@dataclass
class MermaidFilterOptions:
    """Rendering options handed to mermaid-filter."""

    format: str = "svg"
    width: int = 1600
    scale: float = 10

    def to_env(self) -> Dict[str, str]:
        """Environment variables understood by mermaid-filter."""
        return {
            "MERMAID_FILTER_FORMAT": self.format,
            "MERMAID_FILTER_WIDTH": str(self.width),
            "MERMAID_FILTER_SCALE": _format_value(self.scale),
        }


def _format_value(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _parse_positive_number(key: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid value for {key}: '{value}'. Expected a number.")
    if number <= 0:
        raise ValueError(f"Invalid value for {key}: '{value}'. Must be greater than 0.")
    return number


def _parse_positive_int(key: str, value: Any) -> int:
    number = _parse_positive_number(key, value)
    if not number.is_integer():
        raise ValueError(f"Invalid value for {key}: '{value}'. Expected a whole number.")
    return int(number)


def validate_margin(margin_str: str) -> str:
    """Validate and normalize a single margin value such as ``20mm``."""
    match = re.match(r'^(\d+(?:\.\d+)?)\s*(cm|in|mm|pt|px)?$', margin_str.strip())
    if not match:
        raise ValueError(f"Invalid margin format: '{margin_str}'. Use format like '1in', '2.5cm', '10mm', etc.")

    value_str, unit = match.groups()
    value = float(value_str)
    if not unit:
        unit = 'mm'

    # Convert to inches for validation
    if unit == 'cm':
        value_inches = value / 2.54
    elif unit == 'mm':
        value_inches = value / 25.4
    elif unit == 'pt':
        value_inches = value / 72
    elif unit == 'px':
        value_inches = value / 96  # Assuming 96 DPI
    else:  # 'in'
        value_inches = value

    if value_inches > 3:
        raise ValueError(f"Margin too large: '{margin_str}'. Maximum value is 3 inches (7.62cm).")

    return f"{_format_value(value)}{unit}"


class Config:
    """Layered converter configuration."""

    def __init__(self, cli_config: Optional[Dict[str, Any]] = None, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ
        self.cli_config = {k: v for k, v in (cli_config or {}).items() if v is not None}
        self.file_config = self._load_config_file()

    def _load_config_file(self) -> Dict[str, Any]:
        config_path = self.environ.get(CONFIG_FILE_ENV)
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise ValueError(f"Config file not found: {path}")
        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in config file {path}: {e}")
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a JSON object")
        return data

    def get(self, key: str) -> Any:
        """Look up a setting by key, honouring the precedence order."""
        if key in self.cli_config:
            return self.cli_config[key]
        env_value = self.environ.get(ENV_PREFIX + key.upper())
        if env_value:
            return env_value
        if self.file_config.get(key) is not None:
            return self.file_config[key]
        return DEFAULTS.get(key)

    def get_output_dir(self) -> Path:
        return Path(self.get("output_dir"))

    def get_tools_dir(self) -> Path:
        return Path(self.get("tools_dir"))

    def get_pandoc_path(self) -> str:
        """Pandoc executable: explicit setting, bundled copy, or the one on PATH."""
        configured = self.get("pandoc_path")
        if configured:
            return str(configured)
        bundled = self.get_tools_dir() / "pandoc" / "bin" / "pandoc"
        if bundled.exists():
            return str(bundled)
        return "pandoc"

    def get_node_bin_dir(self) -> Optional[Path]:
        """Local node_modules/.bin holding mermaid-filter, if installed."""
        bin_dir = self.get_tools_dir() / "node_modules" / ".bin"
        return bin_dir if bin_dir.is_dir() else None

    def get_filter_options(self) -> MermaidFilterOptions:
        return MermaidFilterOptions(
            format=str(self.get("mermaid_format")),
            width=_parse_positive_int("mermaid_width", self.get("mermaid_width")),
            scale=_parse_positive_number("mermaid_scale", self.get("mermaid_scale")),
        )

    def get_svg_scale(self) -> float:
        return _parse_positive_number("svg_scale", self.get("svg_scale"))

    def get_settle_timeout_ms(self) -> int:
        return _parse_positive_int("settle_timeout_ms", self.get("settle_timeout_ms"))

    def get_page_margin(self) -> str:
        return validate_margin(str(self.get("page_margin")))
