"""Bin intake and capacity services."""

from .ledger import Admission, CapacityLedger
from .registry import BinRegistry
from .service import SubmissionResult, submit_bin

__all__ = [
    "Admission",
    "BinRegistry",
    "CapacityLedger",
    "SubmissionResult",
    "submit_bin",
]
