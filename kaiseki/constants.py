"""
Named constants from MeCab's public header (mecab.h).

The values below mirror the ``#define`` constants of libmecab's public
header. They are exposed both as typed enumerations and as an immutable
``MECAB_CONSTANTS`` lookup table keyed by the original C names.

Example:
    >>> from kaiseki.constants import NodeStat, MECAB_CONSTANTS
    >>> NodeStat.EOS
    <NodeStat.EOS: 3>
    >>> MECAB_CONSTANTS["MECAB_BOS_NODE"]
    2
"""

from enum import IntEnum, IntFlag
from types import MappingProxyType


class NodeStat(IntEnum):
    """Node type stored in ``mecab_node_t.stat``."""

    NOR = 0  # normal node defined in the dictionary
    UNK = 1  # unknown word
    BOS = 2  # virtual beginning-of-sentence node
    EOS = 3  # virtual end-of-sentence node
    EON = 4  # virtual end-of-nbest node


class DictionaryType(IntEnum):
    """Dictionary kind stored in ``mecab_dictionary_info_t.type``."""

    SYS = 0
    USR = 1
    UNK = 2


class RequestType(IntFlag):
    """Lattice request type bits."""

    ONE_BEST = 1
    NBEST = 2
    PARTIAL = 4
    MARGINAL_PROB = 8
    ALTERNATIVE = 16
    ALL_MORPHS = 32
    ALLOCATE_SENTENCE = 64


class BoundaryConstraint(IntEnum):
    """Boundary constraint type used in partial parsing."""

    ANY_BOUNDARY = 0
    TOKEN_BOUNDARY = 1
    INSIDE_TOKEN = 2


MECAB_NOR_NODE = NodeStat.NOR
MECAB_UNK_NODE = NodeStat.UNK
MECAB_BOS_NODE = NodeStat.BOS
MECAB_EOS_NODE = NodeStat.EOS
MECAB_EON_NODE = NodeStat.EON

MECAB_SYS_DIC = DictionaryType.SYS
MECAB_USR_DIC = DictionaryType.USR
MECAB_UNK_DIC = DictionaryType.UNK

MECAB_ONE_BEST = RequestType.ONE_BEST
MECAB_NBEST = RequestType.NBEST
MECAB_PARTIAL = RequestType.PARTIAL
MECAB_MARGINAL_PROB = RequestType.MARGINAL_PROB
MECAB_ALTERNATIVE = RequestType.ALTERNATIVE
MECAB_ALL_MORPHS = RequestType.ALL_MORPHS
MECAB_ALLOCATE_SENTENCE = RequestType.ALLOCATE_SENTENCE

MECAB_ANY_BOUNDARY = BoundaryConstraint.ANY_BOUNDARY
MECAB_TOKEN_BOUNDARY = BoundaryConstraint.TOKEN_BOUNDARY
MECAB_INSIDE_TOKEN = BoundaryConstraint.INSIDE_TOKEN

MECAB_CONSTANTS = MappingProxyType({
    name: int(value)
    for name, value in list(globals().items())
    if name.startswith("MECAB_")
})


__all__ = [
    "NodeStat",
    "DictionaryType",
    "RequestType",
    "BoundaryConstraint",
    "MECAB_CONSTANTS",
] + sorted(MECAB_CONSTANTS)
