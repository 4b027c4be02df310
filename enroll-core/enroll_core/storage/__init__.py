"""
Candidate Storage
=================
Pluggable persistence for candidate records.
"""

from .base import CandidateStorage
from .memory import MemoryCandidateStorage
from .sql import SqlCandidateStorage, CandidateRow

__all__ = [
    "CandidateStorage",
    "MemoryCandidateStorage",
    "SqlCandidateStorage",
    "CandidateRow",
]
