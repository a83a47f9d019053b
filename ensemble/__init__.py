"""
Ensemble loss layers.
"""

from ensemble.bagging import BaggingLossLayer
from ensemble.dropout import (
    hash_input,
    member_key,
    is_member_dropped,
    included_members
)

__all__ = [
    'BaggingLossLayer',
    'hash_input',
    'member_key',
    'is_member_dropped',
    'included_members'
]
