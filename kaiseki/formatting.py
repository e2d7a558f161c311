"""
Rendering nodes through MeCab's output template engine.

MeCab's formatter (``%m``, ``%H``, ``%pS`` and friends) lives inside the
analyzer instance: the templates are fixed when the analyzer is created
(``output_format_type`` plus ``node_format``/``unk_format``/``bos_format``/
``eos_format``) and every render call needs that analyzer. Templates are
passed through untouched; this module never parses them.

Rendering is forgiving by default. When the analyzer was configured with
a different template than the one asked for, or MeCab fails to format a
node, a warning is logged and the node is rendered in MeCab's default
representation (``surface<TAB>feature``, ``EOS``). Pass ``strict=True``
to get a FormatError instead.

Example:
    >>> analyzer = Analyzer(output_format_type="user", node_format="%m\\n")
    >>> renderer = FormatRenderer(analyzer)
    >>> view = analyzer.parse("hello")
    >>> "".join(renderer.render(node, "%m\\n") for node in view.morphemes())
    'hello\\n'
"""

import logging
from typing import Iterable, Optional

from .exceptions import FormatError

logger = logging.getLogger(__name__)


def default_representation(node) -> str:
    """
    Render a node the way MeCab does without custom formats.

    Returns:
        str: ``""`` for BOS, ``"EOS\\n"`` for EOS, otherwise
        ``"surface\\tfeature\\n"``.
    """
    if node.is_bos:
        return ""
    if node.is_eos:
        return "EOS\n"
    return f"{node.surface}\t{node.feature}\n"


def render(template: Optional[str], node, analyzer, *, strict: bool = False) -> str:
    """
    Render one node with the analyzer's template engine.

    Args:
        template: The template the caller expects to be applied, or None
            to use whatever the analyzer was configured with.
        node: A borrowed Node or a ClonedNode.
        analyzer: A live Analyzer providing the formatting context.
        strict: Raise FormatError instead of falling back.

    Returns:
        str: The rendered node.

    Raises:
        FormatError: Only when ``strict`` is True.
    """
    if not analyzer.uses_template(template):
        error = FormatError(
            f"Analyzer is not configured with template {template!r}"
        )
        if strict:
            raise error
        logger.warning("%s; using its configured output format", error)

    try:
        return analyzer.format_node(node)
    except FormatError as e:
        if strict:
            raise
        logger.warning("Falling back to default node representation: %s", e)
        return default_representation(node)


class FormatRenderer:
    """
    Render nodes with a fixed analyzer as formatting context.

    Attributes:
        analyzer: The Analyzer whose templates are used.
        strict: Raise FormatError instead of falling back.
    """

    def __init__(self, analyzer, strict: bool = False):
        self.analyzer = analyzer
        self.strict = strict

    def render(self, node, template: Optional[str] = None) -> str:
        """Render one node. See ``kaiseki.formatting.render``."""
        return render(template, node, self.analyzer, strict=self.strict)

    def render_all(self, nodes: Iterable, template: Optional[str] = None) -> str:
        """Render each node in turn and join the output."""
        return "".join(self.render(node, template) for node in nodes)


__all__ = ["FormatRenderer", "render", "default_representation"]
