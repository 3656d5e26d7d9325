"""Launch the user's browser at an authorization URL."""
import logging
import os
import subprocess
import sys
import webbrowser

logger = logging.getLogger(__name__)


class DefaultBrowserLauncher:
    """Portable launcher backed by the webbrowser module."""

    def open(self, url):
        if not webbrowser.open(url):
            logger.warning("⚠️  Could not open a browser, visit the URL above manually")


class WindowsBrowserLauncher:
    def open(self, url):
        os.startfile(url)


class ShellBrowserLauncher:
    """Hands the URL to an OS command such as `open` (macOS) or `xdg-open` (Linux/X11)."""

    def __init__(self, command):
        self.command = command

    def open(self, url):
        try:
            result = subprocess.run([self.command, url], check=False)
        except FileNotFoundError:
            logger.warning(f"⚠️  '{self.command}' not found, falling back to the default browser")
            DefaultBrowserLauncher().open(url)
            return
        if result.returncode != 0:
            logger.warning(f"⚠️  '{self.command}' exited with status {result.returncode}")


class PrintOnlyLauncher:
    """For headless machines: the URL is only logged."""

    def open(self, url):
        logger.info(f"Open this URL in a browser to continue:\n{url}")


def select_launcher(name=None, platform=None):
    """Pick a launcher by explicit name, falling back to the current platform."""
    platform = platform or sys.platform

    if name:
        name = name.lower()
        if name in ("default", "webbrowser"):
            return DefaultBrowserLauncher()
        if name == "windows":
            return WindowsBrowserLauncher()
        if name in ("open", "xdg-open"):
            return ShellBrowserLauncher(name)
        if name == "none":
            return PrintOnlyLauncher()
        raise ValueError(
            f"Unknown browser launcher '{name}'. "
            "Use one of: default, windows, open, xdg-open, none"
        )

    if platform == "win32":
        return WindowsBrowserLauncher()
    if platform == "darwin":
        return ShellBrowserLauncher("open")
    if platform.startswith("linux"):
        return ShellBrowserLauncher("xdg-open")
    return DefaultBrowserLauncher()
