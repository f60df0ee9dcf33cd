"""
gitsync - keep feature branches rebased on an upstream base branch
"""

from .__version__ import __version__
from .core import SyncKeeper
from .cli.main import main

__all__ = ["SyncKeeper", "main", "__version__"]
