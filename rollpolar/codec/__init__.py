"""Binary codecs for roll response datasets."""

from .bpolar import (
    ResponseMatrix,
    decode,
    encode,
    from_lists,
    read_bpolar,
    write_bpolar,
    MAX_SPEED_COUNT,
    MAX_HEADING_COUNT,
)

__all__ = [
    'ResponseMatrix',
    'decode',
    'encode',
    'from_lists',
    'read_bpolar',
    'write_bpolar',
    'MAX_SPEED_COUNT',
    'MAX_HEADING_COUNT',
]
