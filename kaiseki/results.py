"""
Owned result classes for MeCab analyses.

Nodes returned by ``Analyzer.parse`` borrow memory that belongs to the
analyzer. The classes in this module hold plain Python copies instead, so
they stay valid after the analyzer is released or reused, and can be
shared between threads.

Classes:
    ClonedNode: Immutable copy of one ``mecab_node_t``.
    ClonedResult: Immutable copy of a node chain plus the output formats
        of the analyzer it came from.
    DictionaryInfo: Description of a dictionary loaded by an analyzer.

Cloning copies every field of every node, so a clone costs memory linear
in the chain length (roughly doubling the footprint of the borrowed chain
while both are alive).

Example:
    >>> from kaiseki import Analyzer
    >>> with Analyzer() as analyzer:
    ...     result = analyzer.parse("すもももももももものうち").clone()
    >>> print(result.surfaces())
    >>> print(result.to_dict())
"""

import csv
import ctypes
import html
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import numpy as np

from ._native import MeCabNode
from .constants import DictionaryType, NodeStat


# Fields of mecab_node_t exposed by every node class, in struct order
NODE_FIELDS = (
    "surface",
    "feature",
    "id",
    "length",
    "rlength",
    "rc_attr",
    "lc_attr",
    "posid",
    "char_type",
    "stat",
    "is_best",
    "alpha",
    "beta",
    "prob",
    "wcost",
    "cost",
)

_ARRAY_DTYPES = {
    "id": np.uint32,
    "length": np.uint16,
    "rlength": np.uint16,
    "rc_attr": np.uint16,
    "lc_attr": np.uint16,
    "posid": np.uint16,
    "char_type": np.uint8,
    "stat": np.uint8,
    "is_best": np.bool_,
    "alpha": np.float32,
    "beta": np.float32,
    "prob": np.float32,
    "wcost": np.int16,
    "cost": np.int64,
}


class NodeMixin:
    """Helpers shared by borrowed and cloned nodes."""

    @property
    def is_bos(self) -> bool:
        return self.stat == NodeStat.BOS

    @property
    def is_eos(self) -> bool:
        return self.stat == NodeStat.EOS

    @property
    def is_unknown(self) -> bool:
        return self.stat == NodeStat.UNK

    @property
    def is_morpheme(self) -> bool:
        """True for normal and unknown nodes (not BOS/EOS/EON)."""
        return self.stat in (NodeStat.NOR, NodeStat.UNK)

    @property
    def features(self) -> List[str]:
        """
        Split the feature string into its comma-separated columns.

        Quoted columns (as written by some dictionaries) are unquoted.
        """
        if not self.feature:
            return []
        return next(csv.reader([self.feature]))

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a JSON-serializable dictionary.

        Returns:
            Dict: One entry per ``mecab_node_t`` field.
        """
        data = {name: getattr(self, name) for name in NODE_FIELDS}
        data["stat"] = int(data["stat"])
        return data


@dataclass(frozen=True)
class ClonedNode(NodeMixin):
    """
    Immutable copy of a single MeCab node.

    Attributes mirror ``mecab_node_t`` field for field. ``next`` and
    ``prev`` follow the chain inside the owning ClonedResult.

    Attributes:
        surface: Surface form.
        feature: Feature string (comma-separated dictionary columns).
        id: Unique node id within the lattice.
        length: Byte length of the surface.
        rlength: Byte length of the surface including leading whitespace.
        rc_attr: Right context attribute id.
        lc_attr: Left context attribute id.
        posid: Part-of-speech id.
        char_type: Character type.
        stat: Node type (NodeStat).
        is_best: Whether the node is on the best path.
        alpha: Forward log probability.
        beta: Backward log probability.
        prob: Marginal probability.
        wcost: Word cost.
        cost: Accumulated best cost from BOS to this node.
    """

    surface: str
    feature: str
    id: int
    length: int
    rlength: int
    rc_attr: int
    lc_attr: int
    posid: int
    char_type: int
    stat: NodeStat
    is_best: bool
    alpha: float
    beta: float
    prob: float
    wcost: int
    cost: int
    _result: Optional["ClonedResult"] = field(
        default=None, repr=False, compare=False
    )
    _index: int = field(default=-1, repr=False, compare=False)

    @property
    def next(self) -> Optional["ClonedNode"]:
        """The following node, or None after the last node."""
        if self._result is None:
            return None
        return self._result.next(self)

    @property
    def prev(self) -> Optional["ClonedNode"]:
        """The preceding node within the clone, or None for the first one."""
        if self._result is None or self._index <= 0:
            return None
        return self._result.nodes[self._index - 1]

    def to_native(self, encoding: str) -> Tuple[MeCabNode, Any]:
        """
        Materialize this node as a standalone ``mecab_node_t``.

        The returned buffer holds the surface bytes the struct points to and
        must be kept alive for as long as the struct is used.

        Args:
            encoding: Charset used to encode the surface and feature.

        Returns:
            Tuple of the struct and its surface buffer.
        """
        surface = self.surface.encode(encoding)
        # lengths follow the target encoding, not the source one
        length = len(surface)
        rlength = self.rlength - self.length + length
        buffer = ctypes.create_string_buffer(surface)

        node = MeCabNode()
        node.surface = ctypes.addressof(buffer)
        node.feature = self.feature.encode(encoding)
        node.id = self.id
        node.length = length
        node.rlength = rlength
        node.rcAttr = self.rc_attr
        node.lcAttr = self.lc_attr
        node.posid = self.posid
        node.char_type = self.char_type
        node.stat = int(self.stat)
        node.isbest = int(self.is_best)
        node.alpha = self.alpha
        node.beta = self.beta
        node.prob = self.prob
        node.wcost = self.wcost
        node.cost = self.cost
        return node, buffer

    def format(self, analyzer) -> str:
        """Render this node with the output formats of ``analyzer``."""
        return analyzer.format_node(self)


@dataclass(frozen=True)
class ClonedResult:
    """
    Independently owned copy of a MeCab node chain.

    Exposes the same traversal contract as ResultView (``head`` and
    ``next``) but does not depend on any analyzer being alive. Instances
    are immutable and safe to read from several threads.

    Attributes:
        nodes: Copied nodes, ending with the EOS node.
        formats: Output format options of the originating analyzer
            (``node-format``, ``eos-format``, ...).
        encoding: Charset of the originating analyzer's dictionary.

    Example:
        >>> result = analyzer.parse("吾輩は猫である").clone()
        >>> analyzer.release()
        >>> for node in result.morphemes():
        ...     print(node.surface, node.features[0])
    """

    nodes: Tuple[ClonedNode, ...]
    formats: Mapping[str, str] = field(default_factory=dict, hash=False)
    encoding: str = "utf-8"

    def __post_init__(self):
        nodes = tuple(replace(node) for node in self.nodes)
        object.__setattr__(self, "nodes", nodes)
        for index, node in enumerate(nodes):
            object.__setattr__(node, "_result", self)
            object.__setattr__(node, "_index", index)

    def head(self) -> Optional[ClonedNode]:
        """Return the first node, or None if the chain is empty."""
        return self.nodes[0] if self.nodes else None

    def next(self, node: ClonedNode) -> Optional[ClonedNode]:
        """Return the node after ``node``, or None after the last one."""
        index = node._index + 1
        if node._result is not self or index >= len(self.nodes):
            return None
        return self.nodes[index]

    def __iter__(self) -> Iterator[ClonedNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index):
        return self.nodes[index]

    @property
    def terminal(self) -> Optional[ClonedNode]:
        """The last node of the chain (EOS for a complete chain)."""
        return self.nodes[-1] if self.nodes else None

    def morphemes(self) -> List[ClonedNode]:
        """Return normal and unknown nodes, skipping BOS/EOS."""
        return [node for node in self.nodes if node.is_morpheme]

    def surfaces(self) -> List[str]:
        """Return the surface forms of all morphemes."""
        return [node.surface for node in self.morphemes()]

    def to_dict(self) -> Dict:
        """
        Convert to a JSON-serializable dictionary.

        Returns:
            Dict: Nodes, surfaces, formats and encoding.
        """
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "surfaces": self.surfaces(),
            "formats": dict(self.formats),
            "encoding": self.encoding,
        }

    def as_arrays(self) -> Dict[str, np.ndarray]:
        """
        Return the numeric node fields as numpy arrays.

        Every array has one element per node, in chain order.

        Returns:
            Dict mapping field name to array.
        """
        return {
            name: np.array([getattr(node, name) for node in self.nodes], dtype=dtype)
            for name, dtype in _ARRAY_DTYPES.items()
        }

    def to_html(self) -> str:
        """
        Generate an HTML fragment for htmx partial updates.

        Returns:
            str: A table with one row per morpheme.
        """
        rows = []
        for node in self.morphemes():
            row_class = "unknown" if node.is_unknown else ""
            rows.append(f"""
                <tr class="{row_class}">
                    <td>{html.escape(node.surface)}</td>
                    <td>{html.escape(node.feature)}</td>
                    <td>{node.wcost}</td>
                    <td>{node.cost}</td>
                </tr>
            """)

        return f"""
        <div class="analysis-result">
            <table class="morpheme-table">
                <thead>
                    <tr>
                        <th>Surface</th>
                        <th>Feature</th>
                        <th>Word cost</th>
                        <th>Cost</th>
                    </tr>
                </thead>
                <tbody>
                    {''.join(rows)}
                </tbody>
            </table>
        </div>
        """


@dataclass(frozen=True)
class DictionaryInfo:
    """
    A dictionary loaded by an analyzer.

    Attributes:
        filename: Path of the compiled dictionary file.
        charset: Charset the dictionary was compiled with.
        size: Number of entries.
        type: Dictionary kind (system, user or unknown-word).
        lsize: Left context attribute size.
        rsize: Right context attribute size.
        version: Dictionary format version.
    """

    filename: str
    charset: str
    size: int
    type: DictionaryType
    lsize: int
    rsize: int
    version: int

    def to_dict(self) -> Dict:
        return {
            "filename": self.filename,
            "charset": self.charset,
            "size": self.size,
            "type": self.type.name.lower(),
            "lsize": self.lsize,
            "rsize": self.rsize,
            "version": self.version,
        }


__all__ = [
    "NODE_FIELDS",
    "NodeMixin",
    "ClonedNode",
    "ClonedResult",
    "DictionaryInfo",
]
