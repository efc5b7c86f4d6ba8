"""
MAS 610 VRR Report Validation

Rule-based validation engine for MAS 610 regulatory returns (appendices
A1/B1/C1/D1): typed VRR field validators, a declarative rule registry,
an all-at-once validation engine, actionable error reports, and a
cache & batch layer.
"""

__version__ = "0.1.0"
__author__ = "Regulatory Reporting Team"

from . import config
from . import models
from . import utils
from . import validation
from . import cache

__all__ = [
    "config",
    "models",
    "utils",
    "validation",
    "cache",
]
