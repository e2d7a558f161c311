"""
ctypes declarations for libmecab.

This module is the only place that talks to the native library. It mirrors
the two structures the binding reads (``mecab_node_t`` and
``mecab_dictionary_info_t``) field for field, and wraps the handful of C
entry points the binding needs in ``MeCabLibrary``.

Anything that provides the same methods as ``MeCabLibrary`` can be handed
to ``kaiseki.Analyzer(library=...)``; the test suite uses this to run the
binding against an in-process fake.

The library is located through the ``KAISEKI_MECAB_LIBRARY`` environment
variable, falling back to ``ctypes.util.find_library("mecab")``.
"""

import ctypes
import ctypes.util
import logging
import os
from functools import lru_cache
from typing import Optional, Sequence

from .exceptions import LibraryNotFoundError

logger = logging.getLogger(__name__)

LIBRARY_ENV = "KAISEKI_MECAB_LIBRARY"


class MeCabNode(ctypes.Structure):
    """Mirror of ``struct mecab_node_t``."""


MeCabNode._fields_ = [
    ("prev", ctypes.POINTER(MeCabNode)),
    ("next", ctypes.POINTER(MeCabNode)),
    ("enext", ctypes.POINTER(MeCabNode)),
    ("bnext", ctypes.POINTER(MeCabNode)),
    ("rpath", ctypes.c_void_p),
    ("lpath", ctypes.c_void_p),
    # surface points into the sentence and is not NUL-terminated
    ("surface", ctypes.c_void_p),
    ("feature", ctypes.c_char_p),
    ("id", ctypes.c_uint),
    ("length", ctypes.c_ushort),
    ("rlength", ctypes.c_ushort),
    ("rcAttr", ctypes.c_ushort),
    ("lcAttr", ctypes.c_ushort),
    ("posid", ctypes.c_ushort),
    ("char_type", ctypes.c_ubyte),
    ("stat", ctypes.c_ubyte),
    ("isbest", ctypes.c_ubyte),
    ("alpha", ctypes.c_float),
    ("beta", ctypes.c_float),
    ("prob", ctypes.c_float),
    ("wcost", ctypes.c_short),
    ("cost", ctypes.c_long),
]


class MeCabDictionaryInfo(ctypes.Structure):
    """Mirror of ``struct mecab_dictionary_info_t``."""


MeCabDictionaryInfo._fields_ = [
    ("filename", ctypes.c_char_p),
    ("charset", ctypes.c_char_p),
    ("size", ctypes.c_uint),
    ("type", ctypes.c_int),
    ("lsize", ctypes.c_uint),
    ("rsize", ctypes.c_uint),
    ("version", ctypes.c_ushort),
    ("next", ctypes.POINTER(MeCabDictionaryInfo)),
]


NodePointer = ctypes.POINTER(MeCabNode)
DictionaryInfoPointer = ctypes.POINTER(MeCabDictionaryInfo)


class MeCabLibrary:
    """
    Thin wrapper around a loaded libmecab shared object.

    Every method is a direct delegation to one C function. Handles are the
    raw ``mecab_t*`` addresses returned by ``mecab_new`` (plain ints), and
    strings cross the boundary as ``bytes``.

    Args:
        path: Path or soname of the shared library to load.

    Raises:
        LibraryNotFoundError: If the shared object cannot be loaded.
    """

    def __init__(self, path: str):
        try:
            self._lib = ctypes.CDLL(path)
        except OSError as e:
            raise LibraryNotFoundError(
                f"Could not load libmecab from {path!r}: {e}"
            ) from e
        self.path = path
        self._declare()

    def _declare(self) -> None:
        lib = self._lib

        lib.mecab_new.argtypes = [ctypes.c_int, ctypes.POINTER(ctypes.c_char_p)]
        lib.mecab_new.restype = ctypes.c_void_p

        lib.mecab_strerror.argtypes = [ctypes.c_void_p]
        lib.mecab_strerror.restype = ctypes.c_char_p

        lib.mecab_destroy.argtypes = [ctypes.c_void_p]
        lib.mecab_destroy.restype = None

        lib.mecab_sparse_tonode2.argtypes = [
            ctypes.c_void_p, ctypes.c_char_p, ctypes.c_size_t,
        ]
        lib.mecab_sparse_tonode2.restype = NodePointer

        lib.mecab_sparse_tostr2.argtypes = [
            ctypes.c_void_p, ctypes.c_char_p, ctypes.c_size_t,
        ]
        lib.mecab_sparse_tostr2.restype = ctypes.c_char_p

        lib.mecab_format_node.argtypes = [ctypes.c_void_p, NodePointer]
        lib.mecab_format_node.restype = ctypes.c_char_p

        lib.mecab_dictionary_info.argtypes = [ctypes.c_void_p]
        lib.mecab_dictionary_info.restype = DictionaryInfoPointer

        lib.mecab_version.argtypes = []
        lib.mecab_version.restype = ctypes.c_char_p

    def new(self, argv: Sequence[bytes]) -> Optional[int]:
        """Call ``mecab_new``; returns the handle or None on failure."""
        c_argv = (ctypes.c_char_p * len(argv))(*argv)
        return self._lib.mecab_new(len(argv), c_argv)

    def strerror(self, handle: Optional[int]) -> bytes:
        """Return the last error message (``handle=None`` for construction errors)."""
        return self._lib.mecab_strerror(handle) or b""

    def destroy(self, handle: int) -> None:
        self._lib.mecab_destroy(handle)

    def sparse_tonode(self, handle: int, data: bytes):
        """Parse ``data`` and return a pointer to the BOS node (NULL on failure)."""
        return self._lib.mecab_sparse_tonode2(handle, data, len(data))

    def sparse_tostr(self, handle: int, data: bytes) -> Optional[bytes]:
        return self._lib.mecab_sparse_tostr2(handle, data, len(data))

    def format_node(self, handle: int, node) -> Optional[bytes]:
        return self._lib.mecab_format_node(handle, node)

    def dictionary_info(self, handle: int):
        return self._lib.mecab_dictionary_info(handle)

    def version(self) -> bytes:
        return self._lib.mecab_version() or b""


def find_library_path() -> Optional[str]:
    """
    Locate libmecab.

    Returns:
        The value of ``KAISEKI_MECAB_LIBRARY`` if set, otherwise whatever
        ``ctypes.util.find_library("mecab")`` reports, or None.
    """
    configured = os.environ.get(LIBRARY_ENV)
    if configured:
        return configured
    return ctypes.util.find_library("mecab")


@lru_cache(maxsize=None)
def _load(path: str) -> MeCabLibrary:
    logger.debug("Loading libmecab from %s", path)
    return MeCabLibrary(path)


def load_library(path: Optional[str] = None) -> MeCabLibrary:
    """
    Return the process-wide ``MeCabLibrary`` for ``path``.

    Each distinct path is loaded once and shared by every analyzer.

    Raises:
        LibraryNotFoundError: If no library path can be found or the
            library fails to load.
    """
    path = path or find_library_path()
    if not path:
        raise LibraryNotFoundError(
            "libmecab could not be found. Install MeCab or set "
            f"{LIBRARY_ENV} to the path of the shared library."
        )
    return _load(path)


def is_available() -> bool:
    """
    Check if libmecab can be loaded.

    Returns:
        bool: True if the shared library was found and loaded.

    Example:
        >>> from kaiseki import is_available
        >>> if not is_available():
        ...     print("Install MeCab to use kaiseki")
    """
    try:
        load_library()
    except LibraryNotFoundError:
        return False
    return True


__all__ = [
    "LIBRARY_ENV",
    "MeCabNode",
    "MeCabDictionaryInfo",
    "MeCabLibrary",
    "NodePointer",
    "DictionaryInfoPointer",
    "find_library_path",
    "load_library",
    "is_available",
]
