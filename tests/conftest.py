"""
Pytest configuration and fixtures for kaiseki tests.

FakeMeCab stands in for libmecab. It builds real ``mecab_node_t``
structures with ctypes, so the binding reads node fields exactly as it
does against the native library, and it records every call made to it.
"""

import codecs
import ctypes
import re

import pytest

from kaiseki._native import MeCabDictionaryInfo, MeCabNode, NodePointer
from kaiseki.constants import DictionaryType, NodeStat


KNOWN_OPTIONS = {
    "rcfile", "dicdir", "userdic", "lattice-level", "output-format-type",
    "node-format", "unk-format", "bos-format", "eos-format", "eon-format",
    "unk-feature", "input-buffer-size", "nbest", "theta", "cost-factor",
    "max-grouping-size", "all-morphs", "partial", "allocate-sentence",
    "marginal", "version", "help", "dictionary-info",
}

SWITCHES = {
    "all-morphs", "partial", "allocate-sentence", "marginal",
    "version", "help", "dictionary-info",
}

TOKEN_PATTERN = re.compile(r"\w+|[^\w\s]")
FORMAT_PATTERN = re.compile(r"%([mHsc%])")
DEFAULT_NODE_FORMAT = "%m\t%H\n"


class _Tagger:
    """State of one fake mecab_t."""

    def __init__(self, options):
        self.options = options
        self.error = b""
        self.sentence = None
        self.nodes = None
        self.features = []
        self.dictionaries = None

    def template_for(self, stat):
        options = self.options
        format_type = options.get("output-format-type")
        if format_type == "wakati":
            return {NodeStat.BOS: "", NodeStat.EOS: "\n"}.get(stat, "%m ")

        custom = format_type == "user" or "node-format" in options
        if not custom:
            return {NodeStat.BOS: "", NodeStat.EOS: "EOS\n"}.get(stat, DEFAULT_NODE_FORMAT)

        node_format = options.get("node-format", DEFAULT_NODE_FORMAT)
        if stat == NodeStat.BOS:
            return options.get("bos-format", "")
        if stat == NodeStat.EOS:
            return options.get("eos-format", "EOS\n")
        if stat == NodeStat.UNK:
            return options.get("unk-format", node_format)
        return node_format


def _expand(template, surface, feature, node):
    template = template.replace("\\n", "\n").replace("\\t", "\t")
    values = {
        "m": surface,
        "H": feature,
        "s": str(node.stat),
        "c": str(node.wcost),
        "%": "%",
    }
    return FORMAT_PATTERN.sub(lambda m: values[m.group(1)], template)


def _classify(surface):
    """Return (stat, feature, posid) for a token."""
    if surface.isascii() and surface.isalpha():
        return NodeStat.UNK, "名詞,固有名詞,組織,*,*,*,*", 45
    if not surface[0].isalnum():
        return NodeStat.NOR, "記号,一般,*,*,*,*,*", 5
    return NodeStat.NOR, f"名詞,一般,*,*,*,*,{surface},*,*", 38


class FakeMeCab:
    """
    In-process replacement for MeCabLibrary.

    Tokens are runs of word characters or single symbols. ASCII words are
    reported as unknown words, everything else as normal nodes.

    Attributes:
        calls: Every call made, as (name, ...) tuples.
        destroyed: Handles passed to destroy(), in order.
    """

    def __init__(self, charset="UTF-8", fail_parse=False, fail_format=False):
        self.charset = charset
        self.fail_parse = fail_parse
        self.fail_format = fail_format
        self.calls = []
        self.destroyed = []
        self.taggers = {}
        self._error = b""
        self._next_handle = 0x1000

    @property
    def codec(self):
        try:
            return codecs.lookup(self.charset).name
        except LookupError:
            return "utf-8"

    def new(self, argv):
        args = [token.decode("utf-8") for token in argv]
        self.calls.append(("new", args))

        options = {}
        for arg in args[1:]:
            name, sep, value = arg[2:].partition("=")
            if not arg.startswith("--") or name not in KNOWN_OPTIONS:
                self._error = f"unrecognized option `{arg}`".encode()
                return None
            if name in SWITCHES and sep:
                self._error = f"`--{name}` doesn't allow an argument".encode()
                return None
            options[name] = value if sep else True

        format_type = options.get("output-format-type")
        if format_type not in (None, "wakati", "user"):
            self._error = f"unknown format type [{format_type}]".encode()
            return None

        dicdir = options.get("dicdir", "")
        if dicdir.startswith("/missing"):
            self._error = f"no such file or directory: {dicdir}/dicrc".encode()
            return None

        handle = self._next_handle
        self._next_handle += 0x10
        self.taggers[handle] = _Tagger(options)
        return handle

    def strerror(self, handle):
        if handle is None:
            return self._error
        tagger = self.taggers.get(handle)
        return tagger.error if tagger else b""

    def destroy(self, handle):
        self.calls.append(("destroy", handle))
        self.destroyed.append(handle)
        del self.taggers[handle]

    def sparse_tonode(self, handle, data):
        self.calls.append(("sparse_tonode", handle, data))
        tagger = self.taggers[handle]
        if self.fail_parse:
            tagger.error = b"lattice allocation failed"
            return NodePointer()

        codec = self.codec
        text = data.decode(codec)
        tokens = [(m.group(), m.start(), m.end()) for m in TOKEN_PATTERN.finditer(text)]

        sentence = ctypes.create_string_buffer(data)
        base = ctypes.addressof(sentence)
        nodes = (MeCabNode * (len(tokens) + 2))()
        features = []

        def set_feature(node, feature):
            encoded = feature.encode(codec)
            features.append(encoded)
            node.feature = encoded

        bos = nodes[0]
        bos.stat = int(NodeStat.BOS)
        bos.surface = base
        bos.isbest = 1
        set_feature(bos, "BOS/EOS,*,*,*,*,*,*,*,*")

        previous_end = 0
        cost = 0
        for index, (surface, start, end) in enumerate(tokens, 1):
            byte_start = len(text[:start].encode(codec))
            byte_end = len(text[:end].encode(codec))
            stat, feature, posid = _classify(surface)

            node = nodes[index]
            node.surface = base + byte_start
            node.length = byte_end - byte_start
            node.rlength = byte_end - previous_end
            node.id = index
            node.posid = posid
            node.rcAttr = 1280 + index
            node.lcAttr = 1280 + index
            node.char_type = 2 if stat == NodeStat.UNK else 0
            node.stat = int(stat)
            node.isbest = 1
            node.wcost = 100 * index
            cost += 250 * index
            node.cost = cost
            node.alpha = -0.5 * index
            node.beta = -0.25 * index
            node.prob = 1.0
            set_feature(node, feature)
            previous_end = byte_end

        eos = nodes[len(nodes) - 1]
        eos.stat = int(NodeStat.EOS)
        eos.surface = base + len(data)
        eos.id = len(nodes) - 1
        eos.isbest = 1
        eos.cost = cost + 100
        set_feature(eos, "BOS/EOS,*,*,*,*,*,*,*,*")

        for index in range(len(nodes)):
            if index > 0:
                nodes[index].prev = ctypes.pointer(nodes[index - 1])
            if index < len(nodes) - 1:
                nodes[index].next = ctypes.pointer(nodes[index + 1])

        tagger.sentence = sentence
        tagger.nodes = nodes
        tagger.features = features
        return ctypes.pointer(nodes[0])

    def sparse_tostr(self, handle, data):
        pointer = self.sparse_tonode(handle, data)
        if not pointer:
            return None
        output = []
        while pointer:
            output.append(self.format_node(handle, pointer))
            pointer = pointer.contents.next
        return b"".join(output)

    def format_node(self, handle, node_pointer):
        self.calls.append(("format_node", handle))
        tagger = self.taggers[handle]
        if self.fail_format:
            tagger.error = b"cannot format node"
            return None

        codec = self.codec
        node = node_pointer.contents
        surface = ""
        if node.surface:
            surface = ctypes.string_at(node.surface, node.length).decode(codec)
        feature = (node.feature or b"").decode(codec)
        template = tagger.template_for(node.stat)
        return _expand(template, surface, feature, node).encode(codec)

    def dictionary_info(self, handle):
        tagger = self.taggers[handle]
        if tagger.dictionaries is None:
            infos = [
                MeCabDictionaryInfo(
                    filename=b"/usr/lib/mecab/dic/ipadic/sys.dic",
                    charset=self.charset.encode("ascii"),
                    size=392126,
                    type=int(DictionaryType.SYS),
                    lsize=1316,
                    rsize=1316,
                    version=102,
                )
            ]
            if "userdic" in tagger.options:
                infos.append(MeCabDictionaryInfo(
                    filename=tagger.options["userdic"].encode(),
                    charset=self.charset.encode("ascii"),
                    size=12,
                    type=int(DictionaryType.USR),
                    lsize=1316,
                    rsize=1316,
                    version=102,
                ))
            for current, following in zip(infos, infos[1:]):
                current.next = ctypes.pointer(following)
            tagger.dictionaries = infos
        return ctypes.pointer(tagger.dictionaries[0])

    def version(self):
        return b"0.996"


@pytest.fixture
def fake_mecab():
    """Provide a fresh fake libmecab."""
    return FakeMeCab()


@pytest.fixture
def make_analyzer(fake_mecab):
    """
    Create analyzers bound to the fake library.

    Analyzers created through this fixture are released after the test.
    """
    from kaiseki import Analyzer

    created = []

    def factory(options=None, **kwargs):
        kwargs.setdefault("library", fake_mecab)
        analyzer = Analyzer(options, **kwargs)
        created.append(analyzer)
        return analyzer

    yield factory

    for analyzer in created:
        analyzer.release()


@pytest.fixture
def analyzer(make_analyzer):
    """Create an analyzer with default options."""
    return make_analyzer()


@pytest.fixture
def sample_japanese_text():
    """Provide sample Japanese text for testing."""
    return "今日は 良い 天気です。"
