"""
Kaiseki: a Python binding for the MeCab morphological analyzer.

Kaiseki loads the pre-built libmecab through ctypes and exposes it with
an object-oriented interface: options are encoded into MeCab's own
argument format, an Analyzer owns one MeCab instance, parses return the
analyzer's node chain as a borrowed view, and nodes can be cloned into
owned memory or rendered with MeCab's template engine.

Key Features:
    - Keyword/dataclass configuration encoded to MeCab's ``--flag=value`` form
    - Zero-copy node views over MeCab's own memory
    - Explicit deep copies (ClonedResult) that outlive the analyzer
    - Output rendering through MeCab's ``%m``/``%H`` templates
    - User dictionary compilation with mecab-dict-index

Lifetime Rules:
    A ResultView (and every Node reached from it) reads memory owned by
    its Analyzer. It becomes invalid when the analyzer is released or
    parses again. This is NOT checked on each access; clone results you
    want to keep.

Quick Start:
    >>> from kaiseki import Analyzer
    >>>
    >>> with Analyzer() as analyzer:
    ...     view = analyzer.parse("すもももももももものうち")
    ...     for node in view.morphemes():
    ...         print(node.surface, node.features[0])
    ...     result = view.clone()
    >>>
    >>> print(result.to_dict())  # valid after release

Custom output formats:
    >>> from kaiseki import Analyzer, FormatRenderer
    >>> analyzer = Analyzer(output_format_type="user", node_format="%m\\n")
    >>> renderer = FormatRenderer(analyzer)
    >>> print(renderer.render_all(analyzer.parse("hello").morphemes()))

Installation Requirements:
    MeCab and a dictionary must be installed, e.g.:
        apt install libmecab2 mecab-ipadic-utf8
    Set KAISEKI_MECAB_LIBRARY if libmecab is not on the default search path.

Classes:
    Analyzer: One MeCab instance.
    AnalyzerOptions: Typed option set.
    ResultView: Borrowed node chain returned by Analyzer.parse.
    Node: Borrowed view of one node.
    ClonedResult: Owned copy of a node chain.
    ClonedNode: Owned copy of one node.
    DictionaryInfo: Description of a loaded dictionary.
    FormatRenderer: Render nodes with an analyzer's templates.
    UserDictionary: Build dictionaries with mecab-dict-index.

Functions:
    encode_options: Encode options into MeCab's argument vector.
    clone: Deep-copy a view or node chain.
    render: Render one node with an analyzer's templates.
    is_available: Check whether libmecab can be loaded.
"""

__version__ = "0.1.0"
__author__ = "Noyu Ritsuji"

# Analyzer and its configuration
from .analyzer import Analyzer
from .options import AnalyzerOptions, encode_options, BOOLEAN_FLAGS

# Borrowed and owned results
from .nodes import Node, ResultView, clone
from .results import ClonedNode, ClonedResult, DictionaryInfo

# Formatting
from .formatting import FormatRenderer, render, default_representation

# User dictionaries
from .dictionary import DictionaryEntry, UserDictionary

# Constants from mecab.h
from .constants import NodeStat, DictionaryType, RequestType, BoundaryConstraint

# Exceptions
from .exceptions import (
    KaisekiError,
    ConfigurationError,
    ConstructionError,
    LibraryNotFoundError,
    ParseError,
    FormatError,
    DictionaryError,
)

# Native library discovery
from ._native import is_available

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Analyzer
    "Analyzer",
    "AnalyzerOptions",
    "encode_options",
    "BOOLEAN_FLAGS",
    # Results
    "Node",
    "ResultView",
    "clone",
    "ClonedNode",
    "ClonedResult",
    "DictionaryInfo",
    # Formatting
    "FormatRenderer",
    "render",
    "default_representation",
    # Dictionaries
    "DictionaryEntry",
    "UserDictionary",
    # Constants
    "NodeStat",
    "DictionaryType",
    "RequestType",
    "BoundaryConstraint",
    # Exceptions
    "KaisekiError",
    "ConfigurationError",
    "ConstructionError",
    "LibraryNotFoundError",
    "ParseError",
    "FormatError",
    "DictionaryError",
    # Library discovery
    "is_available",
]
