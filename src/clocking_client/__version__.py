"""Version information for clocking-client."""

__version__ = "0.4.0"
__version_date__ = "2026-10-18"

__title__ = "clocking_client"
__description__ = "Client, CLI and local dashboard for a remote clocking (time tracking) service"
__url__ = "https://github.com/clocking/clocking-client"

__author__ = "Clocking Contributors"

__license__ = "MIT"
__copyright__ = "Copyright 2026 Clocking Contributors"

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__url__",
    "__author__",
    "__license__",
    "__copyright__",
]
