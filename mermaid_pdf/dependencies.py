"""
Checks and setup for the external tools the converter drives.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import shutil
import subprocess
import sys
from pathlib import Path
from typing import List, Mapping, Optional

from colorama import Fore, Style


def run_command(cmd: List[str], description: str) -> bool:
    """Run a command and return success status."""
    print(f"Installing {description}...")
    try:
        subprocess.run(cmd, check=True, capture_output=True, text=True)
        print(f"{Fore.GREEN}✓{Style.RESET_ALL} {description} installed successfully")
        return True
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        details = getattr(e, 'stderr', None) or str(e)
        print(f"{Fore.RED}✗{Style.RESET_ALL} Failed to install {description}: {details}")
        return False


def check_command(cmd: List[str], description: str, env: Optional[Mapping[str, str]] = None) -> bool:
    """Check if a command is available."""
    try:
        subprocess.run(cmd, check=True, capture_output=True, env=env)
        print(f"{Fore.GREEN}✓{Style.RESET_ALL} {description} is available")
        return True
    except (subprocess.CalledProcessError, FileNotFoundError):
        print(f"{Fore.RED}✗{Style.RESET_ALL} {description} is not available")
        return False


def check_executable(name: str, description: str, env: Optional[Mapping[str, str]] = None) -> bool:
    """Check that ``name`` resolves on the PATH of ``env``."""
    search_path = env.get("PATH") if env else None
    if shutil.which(name, path=search_path):
        print(f"{Fore.GREEN}✓{Style.RESET_ALL} {description} is available")
        return True
    print(f"{Fore.RED}✗{Style.RESET_ALL} {description} is not available")
    return False


def check_chromium() -> bool:
    """Check that Playwright has a Chromium build installed."""
    from playwright.sync_api import sync_playwright

    try:
        with sync_playwright() as p:
            executable = p.chromium.executable_path
    except Exception as e:
        print(f"{Fore.RED}✗{Style.RESET_ALL} Playwright Chromium could not be located: {e}")
        return False

    if executable and Path(executable).exists():
        print(f"{Fore.GREEN}✓{Style.RESET_ALL} Playwright Chromium is available")
        return True
    print(f"{Fore.RED}✗{Style.RESET_ALL} Playwright Chromium is not installed")
    print(f"  Install it with: {sys.executable} -m playwright install chromium")
    return False


def install_chromium() -> bool:
    """Download the Chromium build used for PDF rendering."""
    return run_command([sys.executable, "-m", "playwright", "install", "chromium"], "Playwright Chromium")


def check_dependencies(pandoc_path: str = "pandoc", env: Optional[Mapping[str, str]] = None,
                       check_optional: bool = False) -> bool:
    """Verify that the tools needed for a conversion are present.

    Args:
        pandoc_path: Pandoc executable to probe
        env: Environment the converter will run pandoc with (its PATH is searched)
        check_optional: Also verify the Playwright Chromium download

    Returns:
        True if every required tool was found
    """
    pandoc_available = check_command([pandoc_path, "--version"], "Pandoc", env=env)
    filter_available = check_executable("mermaid-filter", "mermaid-filter", env=env)

    if not pandoc_available:
        print("\nPandoc is required but not found. Please install it from:")
        print("https://pandoc.org/installing.html")
    if not filter_available:
        print("\nmermaid-filter is required but not found. Install it with:")
        print("npm install mermaid-filter")

    ready = pandoc_available and filter_available
    if check_optional:
        ready = check_chromium() and ready
    return ready
