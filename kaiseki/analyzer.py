"""
The Analyzer class: one MeCab instance and the lifetime of its results.

An Analyzer owns exactly one native ``mecab_t``. Everything MeCab
allocates while parsing (the node chain returned by ``parse``) belongs to
that instance:

    - ``parse()`` returns a ResultView that borrows the analyzer's memory.
    - The next ``parse()`` on the same analyzer reuses that memory, so the
      previous view must no longer be read.
    - ``release()`` frees the instance. Every view derived from it becomes
      invalid at that moment, whether or not the view object still exists.
      Releasing twice is a no-op.

Use ``ResultView.clone()`` to keep results beyond either event.

Thread safety:
    MeCab's internal buffers are not reentrant. Never run two ``parse``
    calls on one Analyzer concurrently, and never read a view while another
    thread releases or re-parses its analyzer. Create one Analyzer per
    thread instead. ClonedResult objects can be shared freely.

Example:
    >>> from kaiseki import Analyzer
    >>>
    >>> with Analyzer(output_format_type="wakati") as analyzer:
    ...     view = analyzer.parse("すもももももももものうち")
    ...     print(view.surfaces())
    ...     kept = view.clone()
    >>> print(kept.surfaces())  # still valid after release
"""

import codecs
import ctypes
import logging
import os
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

from ._native import load_library
from .constants import DictionaryType
from .exceptions import (
    ConfigurationError,
    ConstructionError,
    FormatError,
    KaisekiError,
    ParseError,
)
from .nodes import Node, ResultView
from .options import FORMAT_OPTIONS, AnalyzerOptions, encode_options, normalize_options
from .results import ClonedNode, DictionaryInfo

logger = logging.getLogger(__name__)

# argv[0] handed to mecab_new
PROGRAM_NAME = "mecab"

DEFAULT_ENCODING = "utf-8"


def _lookup_encoding(name: str) -> str:
    return codecs.lookup(name).name


def _normalize_template(template: str) -> str:
    return template.replace("\\n", "\n").replace("\\t", "\t")


class Analyzer:
    """
    A MeCab analyzer instance.

    Options are encoded with ``kaiseki.options.encode_options`` and handed
    to MeCab's own initializer. MeCab validates them; any failure surfaces
    as ConstructionError carrying MeCab's message verbatim.

    Attributes:
        options: Normalized options (dashed names), read-only.
        arguments: The argument vector passed to MeCab (without argv[0]).
        encoding: Charset used to encode input and decode node strings.
        library: The MeCabLibrary (or compatible object) in use.

    Example:
        >>> analyzer = Analyzer(dicdir="/usr/lib/mecab/dic/ipadic")
        >>> try:
        ...     for node in analyzer.parse("猫が好き").morphemes():
        ...         print(node.surface, node.feature)
        ... finally:
        ...     analyzer.release()
    """

    def __init__(
        self,
        options: Optional[Union[AnalyzerOptions, Mapping[str, Any]]] = None,
        *,
        library=None,
        encoding: Optional[str] = None,
        **kwargs,
    ):
        """
        Create a MeCab instance.

        Args:
            options: AnalyzerOptions or a mapping of option name to value
                (e.g. ``{"dicdir": "/path", "node_format": "%m\\n"}``).
            library: Object exposing the MeCabLibrary interface. Defaults
                to the process-wide libmecab (see ``load_library``).
            encoding: Charset for input and output. Defaults to the charset
                of the loaded system dictionary.
            **kwargs: Further options; they override ``options``.

        Raises:
            ConfigurationError: If an option or the encoding is invalid.
                Raised before libmecab is loaded or called.
            ConstructionError: If MeCab rejects the options or libmecab
                cannot be loaded.
        """
        self._handle = None
        self._released = True
        self._generation = 0

        if isinstance(options, AnalyzerOptions):
            mapping = options.to_mapping()
        else:
            mapping = dict(options or {})
        mapping.update(kwargs)

        self.options = MappingProxyType(normalize_options(mapping))
        self.arguments = encode_options(self.options)

        if encoding is not None:
            try:
                encoding = _lookup_encoding(encoding)
            except LookupError as e:
                raise ConfigurationError(f"Unknown encoding: {encoding!r}") from e

        self.library = library if library is not None else load_library()

        argv = [os.fsencode(token) for token in [PROGRAM_NAME] + self.arguments]
        handle = self.library.new(argv)
        if not handle:
            message = self.library.strerror(None).decode("utf-8", errors="replace")
            raise ConstructionError(message or "mecab_new failed")

        self._handle = handle
        self._released = False
        self.encoding = encoding or self._dictionary_encoding()

        logger.debug(
            "Created analyzer with %s (encoding %s)", self.arguments, self.encoding
        )

    def _dictionary_encoding(self) -> str:
        infos = self.dictionary_info()
        if not infos or not infos[0].charset:
            return DEFAULT_ENCODING
        charset = infos[0].charset
        try:
            return _lookup_encoding(charset)
        except LookupError:
            logger.warning(
                "Dictionary charset %r is not known to Python; using %s",
                charset, DEFAULT_ENCODING,
            )
            return DEFAULT_ENCODING

    def _last_error(self) -> str:
        return self.library.strerror(self._handle).decode(
            self.encoding, errors="replace"
        )

    @property
    def released(self) -> bool:
        """True once ``release()`` has run."""
        return self._released

    @property
    def generation(self) -> int:
        """Number of parse calls made so far; views record the value they saw."""
        return self._generation

    @property
    def formats(self) -> Dict[str, str]:
        """Output format options this analyzer was configured with."""
        return {
            name: str(self.options[name])
            for name in FORMAT_OPTIONS
            if name in self.options
        }

    def uses_template(self, template: Optional[str]) -> bool:
        """
        Check whether ``template`` is one of the configured output formats.

        ``\\n`` and ``\\t`` escapes are treated the same as the characters
        they stand for. ``None`` always matches.
        """
        if template is None:
            return True
        wanted = _normalize_template(template)
        return any(
            _normalize_template(value) == wanted
            for name, value in self.formats.items()
            if name != "output-format-type"
        )

    def _encode_input(self, text: Union[str, bytes]) -> bytes:
        if self._released:
            raise ParseError("Cannot parse with a released analyzer")
        if isinstance(text, bytes):
            return text
        if not isinstance(text, str):
            raise TypeError(f"text must be str or bytes, got {type(text).__name__}")
        try:
            return text.encode(self.encoding)
        except UnicodeEncodeError as e:
            raise ParseError(f"Input cannot be encoded as {self.encoding}: {e}") from e

    def parse(self, text: Union[str, bytes]) -> ResultView:
        """
        Analyze ``text`` and return a borrowed view of the node chain.

        The returned view, and every view returned earlier by this
        analyzer, share MeCab's internal buffers: calling ``parse`` again
        invalidates the previous view.

        Args:
            text: Text to analyze. ``str`` is encoded with ``encoding``;
                ``bytes`` are passed to MeCab unchanged.

        Returns:
            ResultView: View over the nodes, starting at BOS.

        Raises:
            ParseError: If the analyzer was released, the text cannot be
                encoded, or MeCab fails on the input.
            TypeError: If ``text`` is neither str nor bytes.
        """
        data = self._encode_input(text)

        self._generation += 1
        pointer = self.library.sparse_tonode(self._handle, data)
        if not pointer:
            raise ParseError(self._last_error() or "mecab_sparse_tonode failed")

        logger.debug("Parsed %d bytes (generation %d)", len(data), self._generation)
        return ResultView(self, pointer, self._generation)

    def parse_to_string(self, text: Union[str, bytes]) -> str:
        """
        Analyze ``text`` and return MeCab's formatted output for it.

        The output honours the configured ``output_format_type`` and
        templates. Like ``parse``, this reuses the analyzer's buffers and
        invalidates earlier views.

        Raises:
            ParseError: Same conditions as ``parse``.
        """
        data = self._encode_input(text)

        self._generation += 1
        result = self.library.sparse_tostr(self._handle, data)
        if result is None:
            raise ParseError(self._last_error() or "mecab_sparse_tostr failed")
        return result.decode(self.encoding, errors="replace")

    def format_node(self, node: Union[Node, ClonedNode]) -> str:
        """
        Render a node with this analyzer's output templates.

        Borrowed nodes are passed to ``mecab_format_node`` directly; cloned
        nodes are first copied into a temporary native struct.

        Raises:
            FormatError: If the analyzer was released or MeCab cannot
                format the node.
        """
        if self._released:
            raise FormatError("Cannot format with a released analyzer")

        if isinstance(node, ClonedNode):
            struct, _surface = node.to_native(self.encoding)
            result = self.library.format_node(self._handle, ctypes.pointer(struct))
        elif isinstance(node, Node):
            result = self.library.format_node(self._handle, node._ptr)
        else:
            raise TypeError(f"Cannot format {type(node).__name__}")

        if result is None:
            raise FormatError(self._last_error() or "mecab_format_node failed")
        return result.decode(self.encoding, errors="replace")

    def dictionary_info(self) -> List[DictionaryInfo]:
        """
        Describe the dictionaries loaded by this analyzer.

        Returns:
            List[DictionaryInfo]: System dictionary first, then user and
            unknown-word dictionaries as reported by MeCab.
        """
        if self._released:
            raise KaisekiError("Cannot inspect a released analyzer")

        infos = []
        pointer = self.library.dictionary_info(self._handle)
        while pointer:
            raw = pointer.contents
            infos.append(DictionaryInfo(
                filename=os.fsdecode(raw.filename or b""),
                charset=(raw.charset or b"").decode("ascii", errors="replace"),
                size=raw.size,
                type=DictionaryType(raw.type),
                lsize=raw.lsize,
                rsize=raw.rsize,
                version=raw.version,
            ))
            pointer = raw.next
        return infos

    def version(self) -> str:
        """Return the version of the loaded libmecab."""
        return self.library.version().decode("ascii", errors="replace")

    def release(self) -> None:
        """
        Destroy the native MeCab instance.

        All views derived from this analyzer become invalid. Calling this
        more than once has no further effect.
        """
        if self._released:
            return
        self._released = True
        handle, self._handle = self._handle, None
        self.library.destroy(handle)
        logger.debug("Released analyzer after %d parses", self._generation)

    close = release

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()

    def __del__(self):
        if not getattr(self, "_released", True):
            self.release()

    def __repr__(self):
        state = "released" if self._released else "live"
        return f"<Analyzer {state} args={self.arguments!r}>"


__all__ = ["Analyzer", "PROGRAM_NAME"]
