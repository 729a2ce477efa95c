"""Top-level package for carrots, an update server for desktop apps.

License: GPL-3.0
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("carrots")
except PackageNotFoundError:
    # Fallback for development environments where package isn't installed
    __version__ = "dev"
