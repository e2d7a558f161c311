"""
Custom exceptions for the kaiseki package.

This module defines exception classes used throughout the kaiseki library
to report failures at each stage of working with the MeCab analyzer:
option encoding, analyzer construction, parsing, formatting and user
dictionary compilation.

Reading a node after its analyzer was released (or re-parsed) is NOT
reported by any of these exceptions. That is a precondition violation
which the binding deliberately does not check on every field access.
"""


class KaisekiError(Exception):
    """
    Base exception class for all kaiseki-related errors.

    This exception serves as the parent class for more specific exceptions
    and can be used to catch any error raised by the kaiseki library.

    Example:
        >>> try:
        ...     analyzer = Analyzer(dicdir="/no/such/dir")
        ... except KaisekiError as e:
        ...     print(f"kaiseki error: {e}")
    """
    pass


class ConfigurationError(KaisekiError):
    """
    Raised when analyzer options cannot be encoded.

    This exception is raised before any call into libmecab when:
    - An option key is empty
    - An option value is not a string, number or boolean
    """
    pass


class ConstructionError(KaisekiError):
    """
    Raised when MeCab refuses to create an analyzer.

    The message is MeCab's own error text, passed through verbatim
    (bad dictionary path, unknown flag, missing rc file, ...).
    """
    pass


class LibraryNotFoundError(ConstructionError):
    """Raised when libmecab cannot be located or loaded."""
    pass


class ParseError(KaisekiError):
    """
    Raised when a single parse call fails.

    This exception is raised when:
    - The analyzer has already been released
    - The text cannot be encoded in the dictionary charset
    - MeCab returns no result for the input

    The analyzer remains usable for further parses.
    """
    pass


class FormatError(KaisekiError):
    """
    Raised when a node cannot be rendered through MeCab's formatter.

    FormatRenderer recovers from this error by falling back to MeCab's
    default representation unless it runs in strict mode.
    """
    pass


class DictionaryError(KaisekiError):
    """Raised when mecab-dict-index is missing or fails."""
    pass
