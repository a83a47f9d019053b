"""
Deterministic member dropout for the bagging ensemble.

Whether a member skips an example is decided by hashing the member index
together with the example's input ids, so every pass over the data drops the
same members for the same example. Nothing here holds state; the functions
are safe to call from any number of training threads.
"""
from typing import List, Sequence

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
HASH_BITS = 24


def hash_input(text: str) -> float:
    """32-bit FNV-1a of ``text`` folded to 24 bits and scaled into [0, 1)."""
    h = FNV_OFFSET_BASIS
    for byte in text.encode('utf-8'):
        h ^= byte
        h = (h * FNV_PRIME) & 0xFFFFFFFF
    max_value = 1 << HASH_BITS
    return (h % max_value) / max_value


def member_key(index: int, input_ids: Sequence[int]) -> str:
    """Key hashed for member ``index``, e.g. ``"2&_5_7"`` for input ``[5, 7]``."""
    return str(index) + "&" + "".join("_" + str(i) for i in input_ids)


def is_member_dropped(index: int, input_ids: Sequence[int], p: float) -> bool:
    """True when member ``index`` skips the example; never with ``p >= 1.0``."""
    if p >= 1.0:
        return False
    return hash_input(member_key(index, input_ids)) < p


def included_members(n: int, input_ids: Sequence[int], p: float) -> List[int]:
    """Indices of the members that train on the example."""
    return [i for i in range(n) if not is_member_dropped(i, input_ids, p)]
