"""
Tests for rendering nodes through the analyzer's template engine.
"""

import logging

import pytest

from kaiseki import Analyzer, FormatRenderer, default_representation, render
from kaiseki.exceptions import FormatError

from conftest import FakeMeCab


@pytest.fixture
def user_analyzer(make_analyzer):
    """Analyzer configured with a custom node template."""
    return make_analyzer(output_format_type="user", node_format="%m\n")


class TestRender:
    """Tests for render() and FormatRenderer."""

    def test_user_template_matches_plain_traversal(self, user_analyzer, analyzer):
        rendered = [
            render("%m\n", node, user_analyzer)
            for node in user_analyzer.parse("hello").morphemes()
        ]
        plain = analyzer.parse("hello").surfaces()
        assert rendered == [surface + "\n" for surface in plain]

    def test_render_all(self, user_analyzer):
        renderer = FormatRenderer(user_analyzer)
        view = user_analyzer.parse("hello big world")
        assert renderer.render_all(view.morphemes(), "%m\n") == "hello\nbig\nworld\n"

    def test_escaped_template(self, make_analyzer):
        analyzer = make_analyzer(output_format_type="user", node_format="%m\\t%c\\n")
        node = analyzer.parse("hello").head()
        assert FormatRenderer(analyzer).render(node, "%m\\t%c\\n") == "hello\t100\n"

    def test_sentinel_templates(self, make_analyzer):
        analyzer = make_analyzer(
            output_format_type="user",
            node_format="%m|",
            bos_format="[",
            eos_format="]\n",
        )
        view = analyzer.parse("a b")
        renderer = FormatRenderer(analyzer)
        assert renderer.render(view.bos) == "["
        assert renderer.render_all(view) == "a|b|]\n"

    def test_unconfigured_analyzer_uses_default_representation(self, analyzer):
        view = analyzer.parse("hello")
        rendered = FormatRenderer(analyzer).render_all(view)
        assert rendered == "hello\t名詞,固有名詞,組織,*,*,*,*\nEOS\n"

    def test_cloned_nodes_render(self, user_analyzer):
        result = user_analyzer.parse("hello world").clone()
        renderer = FormatRenderer(user_analyzer)
        assert renderer.render_all(result.morphemes()) == "hello\nworld\n"
        assert result.head().format(user_analyzer) == "hello\n"

    def test_node_format_defaults_to_own_analyzer(self, user_analyzer):
        node = user_analyzer.parse("hello").head()
        assert node.format() == "hello\n"


class TestFormatFallback:
    """Tests for recovery from formatting errors."""

    def test_template_mismatch_warns(self, user_analyzer, caplog):
        node = user_analyzer.parse("hello").head()
        with caplog.at_level(logging.WARNING, logger="kaiseki.formatting"):
            rendered = render("%H\n", node, user_analyzer)
        assert rendered == "hello\n"
        assert "not configured" in caplog.text

    def test_template_mismatch_strict(self, user_analyzer):
        node = user_analyzer.parse("hello").head()
        with pytest.raises(FormatError, match="not configured"):
            render("%H\n", node, user_analyzer, strict=True)

    def test_engine_failure_falls_back(self, caplog):
        analyzer = Analyzer(
            library=FakeMeCab(fail_format=True),
            output_format_type="user",
            node_format="%m\n",
        )
        node = analyzer.parse("hello").head()
        with caplog.at_level(logging.WARNING, logger="kaiseki.formatting"):
            rendered = FormatRenderer(analyzer).render(node)
        assert rendered == default_representation(node)
        assert "cannot format node" in caplog.text
        analyzer.release()

    def test_engine_failure_strict(self):
        analyzer = Analyzer(library=FakeMeCab(fail_format=True))
        node = analyzer.parse("hello").head()
        with pytest.raises(FormatError, match="cannot format node"):
            FormatRenderer(analyzer, strict=True).render(node)
        analyzer.release()

    def test_released_analyzer_falls_back_for_clones(self, user_analyzer):
        result = user_analyzer.parse("hello").clone()
        user_analyzer.release()
        renderer = FormatRenderer(user_analyzer)
        assert renderer.render_all(result) == (
            "hello\t名詞,固有名詞,組織,*,*,*,*\nEOS\n"
        )


class TestDefaultRepresentation:
    """Tests for default_representation."""

    def test_sentinels(self, analyzer):
        view = analyzer.parse("hello")
        assert default_representation(view.bos) == ""
        assert default_representation(list(view)[-1]) == "EOS\n"

    def test_morpheme(self, analyzer):
        node = analyzer.parse("猫").clone().head()
        assert default_representation(node) == "猫\t名詞,一般,*,*,*,*,猫,*,*\n"
