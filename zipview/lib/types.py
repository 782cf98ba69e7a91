"""
This module is used as a unified resource for types that are primarily used for type hints.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from typing import Union

    buf = Union[bytes, bytearray, memoryview]

else:
    buf = Any


__all__ = [
    'buf',
]
