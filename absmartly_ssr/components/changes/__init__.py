"""
Changes component - DOM change application (tree and regex backends).
"""

from ._common import validate_change
from ._regex import RegexChangeApplier, decompose_selector
from ._tree import STYLE_ELEMENT_ID, TreeChangeApplier
from .component import create_applier, run_apply
from .models import ApplyChangesInput, ApplyChangesOutput, Backend, SelectorParts
from .ports import ChangeApplierPort

__all__ = [
    # Entry points
    "create_applier",
    "run_apply",
    # Input models
    "ApplyChangesInput",
    # Output models
    "ApplyChangesOutput",
    # Ports
    "ChangeApplierPort",
    # Backends
    "RegexChangeApplier",
    "TreeChangeApplier",
    # Helpers
    "Backend",
    "STYLE_ELEMENT_ID",
    "SelectorParts",
    "decompose_selector",
    "validate_change",
]
