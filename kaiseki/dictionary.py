"""
User dictionary maintenance with mecab-dict-index.

MeCab dictionaries are compiled from CSV sources by the
``mecab-dict-index`` tool that ships with MeCab. UserDictionary collects
entries, writes them as CSV in IPA dictionary column order, and runs the
tool to either rebuild a system dictionary source tree or compile a
standalone user dictionary.

The tool is located through, in order: the ``dict_index`` argument, the
``KAISEKI_DICT_INDEX`` environment variable, ``PATH``, and
``mecab-config --libexecdir``.

Example:
    >>> from kaiseki import UserDictionary
    >>> dic = UserDictionary("/usr/share/mecab/dic/ipadic")
    >>> dic.add(surface="形態素", pos="名詞", category1="一般",
    ...         yomi="ケイタイソ", pronounce="ケイタイソ", cost=1000)
    >>> dic.write("entries.csv")
    >>> dic.compile("entries.csv", "user.dic")
"""

import csv
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from .exceptions import DictionaryError

logger = logging.getLogger(__name__)

DICT_INDEX_ENV = "KAISEKI_DICT_INDEX"

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class DictionaryEntry:
    """
    One line of an IPA-style dictionary source.

    Context ids and cost may be left as None; mecab-dict-index then fills
    them in when the dictionary carries a model. Unset feature columns are
    written as ``*``.
    """

    surface: str
    pos: str
    left_id: Optional[int] = None
    right_id: Optional[int] = None
    cost: Optional[int] = None
    category1: Optional[str] = None
    category2: Optional[str] = None
    category3: Optional[str] = None
    inflect: Optional[str] = None
    inflect_type: Optional[str] = None
    original: Optional[str] = None
    yomi: Optional[str] = None
    pronounce: Optional[str] = None
    extra: Tuple[str, ...] = field(default_factory=tuple)

    def to_row(self) -> List[str]:
        """Return the CSV columns in IPA dictionary order."""

        def number(value):
            return "" if value is None else str(value)

        def feature(value):
            return "*" if value is None else value

        return [
            self.surface,
            number(self.left_id),
            number(self.right_id),
            number(self.cost),
            self.pos,
            feature(self.category1),
            feature(self.category2),
            feature(self.category3),
            feature(self.inflect),
            feature(self.inflect_type),
            feature(self.original),
            feature(self.yomi),
            feature(self.pronounce),
            *self.extra,
        ]


def find_dict_index(explicit: Optional[PathLike] = None) -> Optional[str]:
    """
    Locate the mecab-dict-index executable.

    Returns:
        The path to the tool, or None if it cannot be found.
    """
    if explicit:
        return os.fspath(explicit)

    configured = os.environ.get(DICT_INDEX_ENV)
    if configured:
        return configured

    found = shutil.which("mecab-dict-index")
    if found:
        return found

    mecab_config = shutil.which("mecab-config")
    if mecab_config:
        completed = subprocess.run(
            [mecab_config, "--libexecdir"],
            capture_output=True,
            text=True,
            check=False,
        )
        if completed.returncode == 0:
            candidate = Path(completed.stdout.strip()) / "mecab-dict-index"
            if candidate.exists():
                return str(candidate)

    return None


class UserDictionary:
    """
    Collect dictionary entries and compile them with mecab-dict-index.

    Attributes:
        dict_source: Directory holding the dictionary source (the
            ``dicrc``, ``matrix.def`` and CSV files).
        input_encoding: Charset of the CSV sources.
        output_encoding: Charset of the compiled dictionary.
    """

    def __init__(
        self,
        dict_source: PathLike,
        input_encoding: str = "utf-8",
        output_encoding: str = "utf-8",
        dict_index: Optional[PathLike] = None,
    ):
        self.dict_source = Path(dict_source)
        self.input_encoding = input_encoding
        self.output_encoding = output_encoding
        self._dict_index = dict_index
        self._entries: List[DictionaryEntry] = []

    @property
    def entries(self) -> List[DictionaryEntry]:
        return list(self._entries)

    def add(self, entry: Optional[DictionaryEntry] = None, **fields) -> DictionaryEntry:
        """
        Add an entry, given either as a DictionaryEntry or as its fields.

        Returns:
            DictionaryEntry: The entry that was added.

        Example:
            >>> dic.add(surface="京都", pos="名詞", category1="固有名詞")
        """
        if entry is None:
            try:
                entry = DictionaryEntry(**fields)
            except TypeError as e:
                raise DictionaryError(f"Invalid dictionary entry: {e}") from e
        elif fields:
            raise DictionaryError("Pass either an entry or its fields, not both")
        self._entries.append(entry)
        return entry

    def write(self, path: PathLike, append: bool = True) -> Path:
        """
        Write the collected entries as CSV.

        Args:
            path: Destination file.
            append: Append to an existing file instead of replacing it.

        Returns:
            Path: The written file.
        """
        path = Path(path)
        mode = "a" if append else "w"
        with open(path, mode, encoding=self.input_encoding, newline="") as fh:
            writer = csv.writer(fh, lineterminator="\n")
            for entry in self._entries:
                writer.writerow(entry.to_row())
        logger.debug("Wrote %d entries to %s", len(self._entries), path)
        return path

    def _tool(self) -> str:
        tool = find_dict_index(self._dict_index)
        if tool is None:
            raise DictionaryError(
                "mecab-dict-index was not found. Install MeCab or set "
                f"{DICT_INDEX_ENV} to its path."
            )
        return tool

    def _run(self, args: Sequence[str]) -> None:
        command = [self._tool(), *args]
        logger.info("Running %s", " ".join(command))
        try:
            completed = subprocess.run(
                command, capture_output=True, text=True, check=False
            )
        except OSError as e:
            raise DictionaryError(f"Could not run mecab-dict-index: {e}") from e
        if completed.returncode != 0:
            raise DictionaryError(
                f"mecab-dict-index failed ({completed.returncode}): "
                f"{completed.stderr.strip()}"
            )

    def rebuild(self) -> None:
        """Re-index the dictionary source directory in place."""
        source = str(self.dict_source)
        self._run([
            "-d", source,
            "-o", source,
            "-f", self.input_encoding,
            "-t", self.output_encoding,
        ])

    def compile(self, csv_path: PathLike, output_path: PathLike) -> Path:
        """
        Compile a CSV file into a user dictionary.

        Args:
            csv_path: CSV source, typically produced by ``write``.
            output_path: Path of the ``.dic`` file to create. Load it with
                ``Analyzer(userdic=...)``.

        Returns:
            Path: ``output_path``.
        """
        self._run([
            "-d", str(self.dict_source),
            "-u", str(output_path),
            "-f", self.input_encoding,
            "-t", self.output_encoding,
            str(csv_path),
        ])
        return Path(output_path)


__all__ = ["DictionaryEntry", "UserDictionary", "find_dict_index", "DICT_INDEX_ENV"]
