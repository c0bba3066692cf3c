"""Overleaf Desktop Launcher.

Starts a local Overleaf toolkit stack, waits until its containers and web
service answer, then hands the user over to the launchpad.
"""

__version__ = "0.1.0"
__author__ = "Overleaf Launcher Team"

__all__ = [
    "__author__",
    "__version__",
]
