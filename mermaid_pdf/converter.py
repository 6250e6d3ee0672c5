#!/usr/bin/env python3
"""
Markdown (with Mermaid diagrams) to PDF converter.

Pandoc with mermaid-filter turns the Markdown into standalone HTML, the inline
SVG diagrams are rewritten to scale readably, and Playwright prints the page
to PDF (the Python equivalent of the Puppeteer approach).

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import argparse
import asyncio
import os
import shutil
import subprocess
import sys
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from colorama import init, Fore, Style
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright
from tqdm import tqdm

from .config import Config
from .dependencies import check_dependencies, install_chromium
from .normalizer import normalize_html_file
from .stylesheet import STYLESHEET_NAME, write_stylesheet

# Initialize colorama for cross-platform colored output
init(autoreset=True)

# Evaluated in the page until it returns true; replaces a fixed settle delay.
RENDER_COMPLETE_JS = """() =>
    document.readyState === 'complete'
    && (!document.fonts || document.fonts.status === 'loaded')
    && Array.from(document.images).every(img => img.complete)
"""


class Stage(Enum):
    """Progress of a single conversion run."""

    IDLE = "idle"
    PATHS_RESOLVED = "paths_resolved"
    CONVERTED = "converted"
    NORMALIZED = "normalized"
    RENDERED = "rendered"
    DONE = "done"
    FAILED = "failed"


class ConversionError(RuntimeError):
    """The external document converter did not produce HTML."""


def clean_generated_files(output_dir: Path) -> bool:
    """Remove the generated html/ directory. Returns True if anything was removed."""
    print("Cleaning generated files...")
    html_dir = Path(output_dir) / "html"

    if not html_dir.exists():
        print("No generated files found to clean.")
        return False

    try:
        shutil.rmtree(html_dir)
    except OSError as e:
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} Could not remove {html_dir}: {e}", file=sys.stderr)
        return False
    print(f"{Fore.GREEN}✓{Style.RESET_ALL} Removed html/ directory")
    print("Cleaning complete!")
    return True


def build_env(config: Config) -> Dict[str, str]:
    """Environment for the pandoc child process.

    A local node_modules/.bin goes first on PATH so a locally installed
    mermaid-filter is found. mermaid-filter options go into the child
    environment only, the current process environment is left alone.
    """
    env = dict(os.environ)
    node_bin = config.get_node_bin_dir()
    if node_bin is not None:
        env["PATH"] = f"{node_bin.absolute()}{os.pathsep}{env.get('PATH', '')}"
    env.update(config.get_filter_options().to_env())
    return env


class MarkdownToPDFConverter:
    """Converts one Markdown file to HTML and PDF."""

    VIEWPORT = {"width": 1200, "height": 800}
    DEVICE_SCALE_FACTOR = 2

    def __init__(self, input_file: str, output_name: Optional[str] = None, config: Optional[Config] = None,
                 debug: bool = False):
        """Initialize the converter.

        Args:
            input_file: Markdown file to convert
            output_name: Base name of the HTML output, ``.html`` is appended when missing
            config: Settings, defaults to ``Config()`` (environment and built-ins)
            debug: If True, print debug messages
        """
        self.input_file = Path(input_file)
        self.output_name = output_name
        self.config = config if config is not None else Config()
        self.debug = debug
        self.stage = Stage.IDLE

        output_dir = self.config.get_output_dir()
        self.output_dir = output_dir
        self.html_dir = output_dir / "html"
        self.pdf_dir = output_dir / "pdf"
        self.html_file: Optional[Path] = None
        self.pdf_file: Optional[Path] = None

    def _log_debug(self, message: str) -> None:
        """Log debug message with color (only if debug mode is enabled)."""
        if self.debug:
            print(f"{Fore.CYAN}[DEBUG]{Style.RESET_ALL} {message}")

    def _log_info(self, message: str) -> None:
        """Log info message with color."""
        print(f"{Fore.GREEN}[INFO]{Style.RESET_ALL} {message}")

    def _log_warning(self, message: str) -> None:
        """Log warning message with color."""
        print(f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} {message}")

    def _log_error(self, message: str) -> None:
        """Log error message with color."""
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {message}", file=sys.stderr)

    def _log_success(self, message: str) -> None:
        """Log success message with color."""
        print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} {message}")

    def resolve_paths(self) -> None:
        """Work out the HTML and PDF output paths from the input and output name."""
        if self.output_name:
            base_filename = self.output_name if self.output_name.endswith('.html') else f"{self.output_name}.html"
            self.html_file = self.html_dir / base_filename
        else:
            self.html_file = self.html_dir / f"{self.input_file.stem}.html"

        self.pdf_file = self.pdf_dir / f"{self.html_file.stem}.pdf"
        self.stage = Stage.PATHS_RESOLVED

    def _prepare_output_dirs(self) -> None:
        self.html_dir.mkdir(parents=True, exist_ok=True)
        self.pdf_dir.mkdir(parents=True, exist_ok=True)
        if write_stylesheet(self.html_dir):
            self._log_info(f"Created html/{STYLESHEET_NAME} for better diagram rendering")

    def build_env(self) -> Dict[str, str]:
        """Environment for the pandoc child process."""
        return build_env(self.config)

    def _pandoc_command(self) -> List[str]:
        return [
            self.config.get_pandoc_path(),
            "-F", "mermaid-filter",
            "--standalone",
            "--css", STYLESHEET_NAME,
            str(self.input_file),
            "-o", str(self.html_file),
        ]

    def _run_pandoc(self) -> None:
        cmd = self._pandoc_command()
        self._log_debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, env=self.build_env())
        except FileNotFoundError as e:
            raise ConversionError(f"Pandoc error: {e}") from e
        if result.returncode != 0:
            raise ConversionError(f"Pandoc error: {result.stderr.strip() or f'exit status {result.returncode}'}")
        self._log_info("Pandoc conversion complete.")

    def _normalize_svgs(self) -> int:
        svg_count = normalize_html_file(self.html_file, self.config.get_svg_scale())
        if svg_count > 0:
            self._log_info(f"Adjusted and scaled {svg_count} SVG(s) for readability.")
        else:
            self._log_debug("No SVG diagrams found, HTML left as generated")
        return svg_count

    async def _wait_for_render(self, page) -> None:
        """Wait for the page to report that rendering finished, bounded by the settle timeout."""
        timeout_ms = self.config.get_settle_timeout_ms()
        try:
            await page.wait_for_function(RENDER_COMPLETE_JS, timeout=timeout_ms)
            self._log_debug("Page reported rendering complete")
        except PlaywrightTimeoutError:
            self._log_warning(f"Page did not report rendering complete within {timeout_ms}ms, printing anyway")

    async def _convert_html_to_pdf(self, html_file: Path, output_pdf: Path) -> None:
        """Print the HTML file to an A4 PDF with Playwright."""
        margin = self.config.get_page_margin()
        async with async_playwright() as p:
            browser = await p.chromium.launch(
                headless=True,
                args=[
                    '--disable-dev-shm-usage',  # Use /tmp instead of /dev/shm (prevents OOM crashes)
                    '--disable-gpu',
                ]
            )
            try:
                page = await browser.new_page(viewport=self.VIEWPORT, device_scale_factor=self.DEVICE_SCALE_FACTOR)
                await page.goto(html_file.absolute().as_uri(), wait_until='networkidle')
                await self._wait_for_render(page)

                self._log_debug(f"Printing PDF with {margin} margins")
                await page.pdf(
                    path=str(output_pdf),
                    format='A4',
                    margin={'top': margin, 'right': margin, 'bottom': margin, 'left': margin},
                    print_background=True,
                    prefer_css_page_size=True,
                )
            finally:
                await browser.close()

    def convert(self) -> bool:
        """Run the whole pipeline. Returns True if the PDF was written."""
        try:
            self.resolve_paths()
            self._log_info(f"Converting '{self.input_file}' to '{self.html_file}'")

            with tqdm(total=4, desc=f"  {self.input_file.name}", unit="step", leave=False) as pbar:
                pbar.set_description(f"  {self.input_file.name} - Preparing")
                self._prepare_output_dirs()
                pbar.update(1)

                pbar.set_description(f"  {self.input_file.name} - Pandoc")
                self._run_pandoc()
                self.stage = Stage.CONVERTED
                pbar.update(1)

                pbar.set_description(f"  {self.input_file.name} - Diagrams")
                self._normalize_svgs()
                self.stage = Stage.NORMALIZED
                pbar.update(1)

                pbar.set_description(f"  {self.input_file.name} - PDF")
                asyncio.run(self._convert_html_to_pdf(self.html_file, self.pdf_file))
                self.stage = Stage.RENDERED
                pbar.update(1)

        except ConversionError as e:
            self.stage = Stage.FAILED
            self._log_error(str(e))
            return False
        except Exception as e:
            self.stage = Stage.FAILED
            self._log_error(f"Error converting {self.input_file.name}: {e}")
            return False

        self.stage = Stage.DONE
        self._log_success(f"PDF generated successfully: {self.pdf_file}")
        return True

    def clean(self) -> bool:
        """Remove the generated HTML directory."""
        return clean_generated_files(self.output_dir)


class UsageArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage problems with exit status 1."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"Error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = UsageArgumentParser(
        prog="mermaid-pdf",
        description="Convert a markdown file with Mermaid diagrams to PDF via pandoc and a headless browser",
        epilog="Run 'mermaid-pdf clean' to remove all generated HTML files.",
    )
    parser.add_argument("input", nargs="?", help="Markdown file to convert, or 'clean'")
    parser.add_argument("output", nargs="?", help="Output HTML file name (default: input name with .html)")
    parser.add_argument("--clean", action="store_true", help="Remove generated HTML files after the PDF is written")
    parser.add_argument("--output-dir", default=None, help="Directory holding html/ and pdf/ (default: current directory)")
    parser.add_argument("--tools-dir", default=None, help="Directory holding a local pandoc/ and node_modules/ (default: current directory)")
    parser.add_argument("--pandoc", default=None, help="Pandoc executable (default: ./pandoc/bin/pandoc or pandoc on PATH)")
    parser.add_argument("--svg-scale", default=None, help="Scale factor for diagram geometry (default: 1)")
    parser.add_argument("--settle-timeout", default=None, help="Max milliseconds to wait for page rendering (default: 2000)")
    parser.add_argument("--margin", default=None, help="Page margin on every side (default: 20mm). Units: in, cm, mm, pt, px")
    parser.add_argument("--skip-checks", action="store_true", help="Do not check for pandoc and mermaid-filter first")
    parser.add_argument("--setup", action="store_true", help="Install Playwright Chromium, check external tools and exit")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging for detailed output")
    return parser


def _validate_config(config: Config) -> None:
    config.get_filter_options()
    config.get_svg_scale()
    config.get_settle_timeout_ms()
    config.get_page_margin()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit status."""
    parser = _build_parser()
    args = parser.parse_intermixed_args(argv)

    cli_config = {
        "output_dir": args.output_dir,
        "tools_dir": args.tools_dir,
        "pandoc_path": args.pandoc,
        "svg_scale": args.svg_scale,
        "settle_timeout_ms": args.settle_timeout,
        "page_margin": args.margin,
    }
    try:
        config = Config(cli_config)
        _validate_config(config)
    except ValueError as e:
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {e}", file=sys.stderr)
        return 1

    if args.setup:
        ready = install_chromium()
        ready = check_dependencies(config.get_pandoc_path(), build_env(config), check_optional=True) and ready
        return 0 if ready else 1

    if args.input == "clean":
        if not clean_generated_files(config.get_output_dir()) and (config.get_output_dir() / "html").exists():
            return 1
        return 0

    if not args.input:
        parser.print_help(sys.stderr)
        return 1

    if not Path(args.input).is_file():
        print(f"{Fore.RED}Error:{Style.RESET_ALL} Input file '{args.input}' not found.", file=sys.stderr)
        return 1

    converter = MarkdownToPDFConverter(args.input, args.output, config=config, debug=args.debug)

    if not args.skip_checks and not check_dependencies(config.get_pandoc_path(), converter.build_env()):
        return 1

    if not converter.convert():
        return 1

    if args.clean:
        converter.clean()
        print("")
    return 0


if __name__ == "__main__":
    sys.exit(main())
