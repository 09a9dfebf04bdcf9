"""
Model runtimes and label tables.
"""

from .backend import ModelRuntime
from .labels import load_labels

__all__ = ["ModelRuntime", "load_labels"]
