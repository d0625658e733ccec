"""
Proof-of-work algorithm of a block, read from its version field.

Bits 8-31 of the version carry the algorithm tag; the low byte is free
for version-bits signalling and is ignored.
"""

from enum import Enum

VERSION_ALGO_MASK = 0xFFFFFF00


class AlgorithmKind(str, Enum):
    MEOWPOW = "MeowPow"
    SCRYPT = "Scrypt"
    UNKNOWN = "Unknown"


VERSION_PREFIXES = {
    0x30090000: AlgorithmKind.MEOWPOW,
    0x30090100: AlgorithmKind.SCRYPT,
}

# algoIndex argument of getdifficulty / getnetworkhashps
ALGORITHM_INDEX = {
    AlgorithmKind.MEOWPOW: 0,
    AlgorithmKind.SCRYPT: 1,
}

MINED_ALGORITHMS = tuple(ALGORITHM_INDEX)


def classify_version(version: int) -> AlgorithmKind:
    """Map a block version to its mining algorithm (Unknown if untagged)."""
    return VERSION_PREFIXES.get(version & VERSION_ALGO_MASK, AlgorithmKind.UNKNOWN)
