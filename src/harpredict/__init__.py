"""
harpredict: Weight-lifting activity quality prediction.

This package loads the PML sensor-activity dataset, prunes its covariates,
compares several off-the-shelf classifiers and writes per-case answer files.
"""

from importlib.metadata import version

__version__ = version("harpredict")

__all__ = ["__version__"]
