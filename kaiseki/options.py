"""
Encoding of analyzer options into MeCab's argument vector.

MeCab is configured the same way as its command-line tool: through an
``argv`` of ``--flag`` and ``--flag=value`` tokens. This module turns a
Python mapping (or an ``AnalyzerOptions`` record) into that vector.

Rules:
    - ``node_format`` becomes ``--node-format``: underscores are replaced by
      dashes and the ``--`` marker is prepended.
    - A fixed set of boolean flags (``BOOLEAN_FLAGS``) is presence-only.
      They are emitted without a value whatever value was supplied.
    - ``--allocate-sentence`` is always emitted, even when the caller set it
      to False or left it out. Without it MeCab keeps pointers into the
      caller's input buffer, which the binding does not keep alive.
    - Values must be strings, numbers or booleans. Anything else raises
      ConfigurationError before libmecab is touched.

The order of the produced tokens follows the mapping's iteration order and
carries no meaning to MeCab. Compare results as sets.

Example:
    >>> from kaiseki.options import encode_options
    >>> sorted(encode_options({"node_format": "%m\\n", "all_morphs": True}))
    ['--all-morphs', '--allocate-sentence', '--node-format=%m\\n']
"""

import numbers
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import ConfigurationError


# Flags MeCab treats as switches (no value)
BOOLEAN_FLAGS = frozenset({
    "all-morphs",
    "partial",
    "allocate-sentence",
    "version",
    "help",
})

# Flags emitted regardless of caller input
FORCED_FLAGS = frozenset({"allocate-sentence"})

# Option names that hold output templates
FORMAT_OPTIONS = (
    "output-format-type",
    "node-format",
    "unk-format",
    "bos-format",
    "eos-format",
    "eon-format",
)


def normalize_key(key: str) -> str:
    """
    Convert an option key into MeCab's dashed flag name (without ``--``).

    Args:
        key: Option name such as ``"node_format"`` or ``"--node-format"``.

    Returns:
        str: The dashed name, e.g. ``"node-format"``.

    Raises:
        ConfigurationError: If the key is not a string or is empty.
    """
    if not isinstance(key, str):
        raise ConfigurationError(
            f"Option keys must be strings, got {type(key).__name__}"
        )
    name = key.strip().lstrip("-").replace("_", "-")
    if not name:
        raise ConfigurationError(f"Invalid option key: {key!r}")
    return name


def encode_value(key: str, value: Any) -> str:
    """
    Render an option value as MeCab expects it on the command line.

    Booleans become ``1``/``0``, numbers go through ``str()`` and strings
    pass through unchanged.

    Raises:
        ConfigurationError: If the value is of any other type.
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, str):
        return value
    if isinstance(value, numbers.Real):
        return str(value)
    raise ConfigurationError(
        f"Unsupported value for option {key!r}: "
        f"{type(value).__name__} (expected str, number or bool)"
    )


def normalize_options(options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Normalize keys and validate values of an option mapping.

    The forced flags are added with a value of True. Two keys that
    normalize to the same flag (``node_format`` and ``node-format``) are
    rejected.

    Returns:
        Dict[str, Any]: Mapping of dashed flag name to the original value.

    Raises:
        ConfigurationError: On an invalid key, a duplicate flag or an
            unsupported value type.
    """
    normalized: Dict[str, Any] = {}
    for key, value in (options or {}).items():
        name = normalize_key(key)
        if name in normalized:
            raise ConfigurationError(f"Option {name!r} was given more than once")
        encode_value(key, value)
        normalized[name] = value

    # silently overrides a caller-supplied False
    for flag in FORCED_FLAGS:
        normalized[flag] = True

    return normalized


def encode_options(options: Optional[Mapping[str, Any]] = None) -> List[str]:
    """
    Encode an option mapping into MeCab's argument vector.

    Args:
        options: Mapping of option name to str, number or bool.

    Returns:
        List[str]: Tokens such as ``--dicdir=/path`` and ``--all-morphs``.
        The program name (``argv[0]``) is not included.

    Raises:
        ConfigurationError: If any key or value is invalid.

    Example:
        >>> encode_options({"dicdir": "/opt/ipadic", "partial": False})
        ['--dicdir=/opt/ipadic', '--partial', '--allocate-sentence']
    """
    args = []
    for name, value in normalize_options(options).items():
        if name in BOOLEAN_FLAGS:
            args.append(f"--{name}")
        else:
            args.append(f"--{name}={encode_value(name, value)}")
    return args


@dataclass(frozen=True)
class AnalyzerOptions:
    """
    Typed set of MeCab options.

    Fields left at None (or False for switches) are not passed to MeCab.
    Any flag without a dedicated field can be given through ``extra``.

    Attributes:
        rcfile: Path to a mecabrc resource file.
        dicdir: System dictionary directory.
        userdic: Comma-separated list of user dictionaries.
        lattice_level: Legacy lattice level (0-2).
        output_format_type: Named output format (``wakati``, ``user``, ...).
        node_format: Template for normal nodes.
        unk_format: Template for unknown words.
        bos_format: Template emitted before a sentence.
        eos_format: Template emitted after a sentence.
        eon_format: Template emitted after n-best output.
        unk_feature: Feature string used for unknown words.
        input_buffer_size: Maximum input size in bytes.
        nbest: Number of n-best results for string output.
        theta: Temperature parameter for marginal probabilities.
        cost_factor: Cost factor used when computing probabilities.
        max_grouping_size: Maximum grouping size for unknown words.
        all_morphs: Output all morphs in the lattice.
        partial: Enable partial parsing mode.
        extra: Additional options, keyed like ``encode_options`` keys.

    Example:
        >>> opts = AnalyzerOptions(output_format_type="user", node_format="%m\\n")
        >>> analyzer = Analyzer(opts)
    """

    rcfile: Optional[str] = None
    dicdir: Optional[str] = None
    userdic: Optional[str] = None
    lattice_level: Optional[int] = None
    output_format_type: Optional[str] = None
    node_format: Optional[str] = None
    unk_format: Optional[str] = None
    bos_format: Optional[str] = None
    eos_format: Optional[str] = None
    eon_format: Optional[str] = None
    unk_feature: Optional[str] = None
    input_buffer_size: Optional[int] = None
    nbest: Optional[int] = None
    theta: Optional[float] = None
    cost_factor: Optional[int] = None
    max_grouping_size: Optional[int] = None
    all_morphs: bool = False
    partial: bool = False
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "AnalyzerOptions":
        """Build options from a plain mapping; unknown keys go to ``extra``."""
        known = {f.name for f in fields(cls)} - {"extra"}
        values = {}
        extra = {}
        for key, value in options.items():
            attr = normalize_key(key).replace("-", "_")
            if attr in known:
                values[attr] = value
            else:
                extra[key] = value
        return cls(extra=extra, **values)

    def to_mapping(self) -> Dict[str, Any]:
        """Return the options as a mapping accepted by ``encode_options``."""
        mapping: Dict[str, Any] = {}
        for f in fields(self):
            if f.name == "extra":
                continue
            value = getattr(self, f.name)
            if value is None or value is False:
                continue
            mapping[f.name] = value
        mapping.update(self.extra)
        return mapping

    def to_args(self) -> List[str]:
        """Return the encoded argument vector."""
        return encode_options(self.to_mapping())


__all__ = [
    "BOOLEAN_FLAGS",
    "FORCED_FLAGS",
    "FORMAT_OPTIONS",
    "AnalyzerOptions",
    "normalize_key",
    "encode_value",
    "normalize_options",
    "encode_options",
]
