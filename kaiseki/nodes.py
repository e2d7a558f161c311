"""
Borrowed views over the node chain produced by ``Analyzer.parse``.

A ResultView and its Nodes read directly from memory owned by the
analyzer. They are valid only while that analyzer is alive AND has not
parsed anything else since. After ``Analyzer.release()`` or a later
``Analyzer.parse()`` every field read on an old Node reads freed or reused
memory.

This is not checked on field access. A check would cost a lookup on every
read, so the rule is a documented precondition instead. When results must
outlive the analyzer (or the next parse), call ``clone()`` to take an owned
copy (see ``kaiseki.results.ClonedResult``).

Example:
    >>> view = analyzer.parse("すもももももももものうち")
    >>> node = view.head()
    >>> while node is not None and not node.is_eos:
    ...     print(node.surface, node.feature)
    ...     node = node.next
"""

import ctypes
from typing import Iterator, List, Optional, Union

from .constants import NodeStat
from .results import ClonedNode, ClonedResult, NodeMixin


class Node(NodeMixin):
    """
    Borrowed view of one ``mecab_node_t``.

    Every property reads the native struct at the time of access. Reading
    any property after the owning analyzer was released or re-parsed is
    undefined behaviour.
    """

    def __init__(self, pointer, analyzer):
        self._ptr = pointer
        self._analyzer = analyzer

    @property
    def analyzer(self):
        """The Analyzer this node was produced by."""
        return self._analyzer

    @property
    def address(self) -> int:
        """Address of the underlying ``mecab_node_t``."""
        return ctypes.addressof(self._ptr.contents)

    def _wrap(self, pointer) -> Optional["Node"]:
        return Node(pointer, self._analyzer) if pointer else None

    @property
    def surface(self) -> str:
        raw = self._ptr.contents
        if not raw.surface:
            return ""
        data = ctypes.string_at(raw.surface, raw.length)
        return data.decode(self._analyzer.encoding, errors="replace")

    @property
    def feature(self) -> str:
        data = self._ptr.contents.feature
        if data is None:
            return ""
        return data.decode(self._analyzer.encoding, errors="replace")

    @property
    def id(self) -> int:
        return self._ptr.contents.id

    @property
    def length(self) -> int:
        return self._ptr.contents.length

    @property
    def rlength(self) -> int:
        return self._ptr.contents.rlength

    @property
    def rc_attr(self) -> int:
        return self._ptr.contents.rcAttr

    @property
    def lc_attr(self) -> int:
        return self._ptr.contents.lcAttr

    @property
    def posid(self) -> int:
        return self._ptr.contents.posid

    @property
    def char_type(self) -> int:
        return self._ptr.contents.char_type

    @property
    def stat(self) -> NodeStat:
        return NodeStat(self._ptr.contents.stat)

    @property
    def is_best(self) -> bool:
        return bool(self._ptr.contents.isbest)

    @property
    def alpha(self) -> float:
        return self._ptr.contents.alpha

    @property
    def beta(self) -> float:
        return self._ptr.contents.beta

    @property
    def prob(self) -> float:
        return self._ptr.contents.prob

    @property
    def wcost(self) -> int:
        return self._ptr.contents.wcost

    @property
    def cost(self) -> int:
        return self._ptr.contents.cost

    @property
    def next(self) -> Optional["Node"]:
        """The following node, or None after EOS."""
        return self._wrap(self._ptr.contents.next)

    @property
    def prev(self) -> Optional["Node"]:
        return self._wrap(self._ptr.contents.prev)

    @property
    def enext(self) -> Optional["Node"]:
        """Next node in the lattice ending at the same position."""
        return self._wrap(self._ptr.contents.enext)

    @property
    def bnext(self) -> Optional["Node"]:
        """Next node in the lattice beginning at the same position."""
        return self._wrap(self._ptr.contents.bnext)

    def format(self, analyzer=None) -> str:
        """
        Render this node through MeCab's output formatter.

        Args:
            analyzer: Analyzer whose output formats are used. Defaults to
                the analyzer that produced the node.
        """
        return (analyzer or self._analyzer).format_node(self)

    def clone(self) -> ClonedResult:
        """Copy the chain from this node to EOS into owned memory."""
        return clone(self)

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return self.address == other.address

    def __hash__(self):
        return hash(self.address)

    def __repr__(self):
        return f"<Node stat={self.stat.name} surface={self.surface!r}>"


class ResultView:
    """
    Head of a borrowed node chain returned by ``Analyzer.parse``.

    The chain starts at MeCab's BOS node. ``head()`` skips it and returns
    the first real node, which is the EOS node for empty input. Iteration
    yields every node from ``head()`` through EOS.

    The view keeps a reference to its analyzer and the parse generation it
    belongs to. ``is_valid`` reports whether the memory is still live; it is
    meant for assertions and is never consulted on field access.

    Example:
        >>> view = analyzer.parse("今日は良い天気")
        >>> [node.surface for node in view.morphemes()]
        ['今日', 'は', '良い', '天気']
    """

    def __init__(self, analyzer, bos_pointer, generation: int):
        self._analyzer = analyzer
        self._bos = bos_pointer
        self.generation = generation

    @property
    def analyzer(self):
        return self._analyzer

    @property
    def is_valid(self) -> bool:
        """False once the analyzer was released or has parsed again."""
        return (
            not self._analyzer.released
            and self._analyzer.generation == self.generation
        )

    @property
    def bos(self) -> Optional[Node]:
        """The virtual beginning-of-sentence node."""
        return Node(self._bos, self._analyzer) if self._bos else None

    def head(self) -> Optional[Node]:
        """
        Return the first node after BOS.

        Returns:
            The first morpheme, the EOS node for empty input, or None if the
            analyzer produced no chain at all.
        """
        bos = self.bos
        return bos.next if bos is not None else None

    def next(self, node: Node) -> Optional[Node]:
        """Return the node after ``node``, or None after EOS."""
        return node.next

    def __iter__(self) -> Iterator[Node]:
        node = self.head()
        while node is not None:
            yield node
            node = node.next

    def morphemes(self) -> List[Node]:
        """Return normal and unknown nodes, skipping BOS/EOS."""
        return [node for node in self if node.is_morpheme]

    def surfaces(self) -> List[str]:
        return [node.surface for node in self.morphemes()]

    def clone(self) -> ClonedResult:
        """Copy the whole chain into an independently owned ClonedResult."""
        return clone(self)

    def __repr__(self):
        state = "valid" if self.is_valid else "stale"
        return f"<ResultView generation={self.generation} {state}>"


def _copy_node(node: Node) -> ClonedNode:
    raw = node._ptr.contents
    encoding = node.analyzer.encoding
    surface = b""
    if raw.surface:
        surface = ctypes.string_at(raw.surface, raw.length)
    return ClonedNode(
        surface=surface.decode(encoding, errors="replace"),
        feature=(raw.feature or b"").decode(encoding, errors="replace"),
        id=raw.id,
        length=raw.length,
        rlength=raw.rlength,
        rc_attr=raw.rcAttr,
        lc_attr=raw.lcAttr,
        posid=raw.posid,
        char_type=raw.char_type,
        stat=NodeStat(raw.stat),
        is_best=bool(raw.isbest),
        alpha=raw.alpha,
        beta=raw.beta,
        prob=raw.prob,
        wcost=raw.wcost,
        cost=raw.cost,
    )


def clone(source: Union[ResultView, Node, ClonedResult, ClonedNode]) -> ClonedResult:
    """
    Deep-copy a node chain into owned memory.

    Walks from the start node (the view's head, or the given node) to the
    end of the chain and copies every field of every node. The result is
    independent of the analyzer's lifetime. Time and memory are linear in
    the chain length.

    Args:
        source: A ResultView, a Node (copies the sub-chain starting at that
            node), a ClonedResult (returned as is) or a ClonedNode (copies
            the sub-chain of its clone).

    Returns:
        ClonedResult: The owned copy.

    Raises:
        TypeError: If ``source`` is not a node or a result.

    Example:
        >>> view = analyzer.parse("猫が好き")
        >>> result = clone(view)
        >>> analyzer.release()
        >>> result.surfaces()
        ['猫', 'が', '好き']
    """
    if isinstance(source, ClonedResult):
        return source

    if isinstance(source, ClonedNode):
        owner = source._result
        if owner is None:
            return ClonedResult(nodes=(source,))
        return ClonedResult(
            nodes=owner.nodes[source._index:],
            formats=owner.formats,
            encoding=owner.encoding,
        )

    if isinstance(source, ResultView):
        assert source.is_valid, (
            "ResultView used after its analyzer was released or re-parsed"
        )
        start = source.head()
    elif isinstance(source, Node):
        start = source
    else:
        raise TypeError(
            f"clone() expects a ResultView or a node, got {type(source).__name__}"
        )

    analyzer = source.analyzer
    nodes = []
    node = start
    while node is not None:
        nodes.append(_copy_node(node))
        node = node.next

    return ClonedResult(
        nodes=tuple(nodes),
        formats=analyzer.formats,
        encoding=analyzer.encoding,
    )


__all__ = ["Node", "ResultView", "clone"]
