"""Tests for sitesmith.pipeline.templates: two-pass composition."""

import pytest

from sitesmith.errors import SourceError, TemplateRenderError
from sitesmith.pipeline.models import Document, SiteMeta
from sitesmith.pipeline.templates import TemplateComposer, create_environment


def _doc(tmp_path, name="index.md", body="", data=None, extras=None) -> Document:
    doc = Document(
        name=name,
        source_path=tmp_path / "pages" / name,
        dest_path=tmp_path / "out" / name,
    )
    doc.body = body
    doc.data = data or {}
    doc.extras = extras or {}
    return doc


@pytest.fixture
def composer_factory(tmp_path, converter):
    def _make(**kwargs) -> TemplateComposer:
        return TemplateComposer(
            SiteMeta(base_url="https://example.com/"), converter, tmp_path / "out", **kwargs
        )

    return _make


class TestEnvironment:
    def test_leading_dot_fields(self):
        env = create_environment()
        out = env.from_string("{{.Data.name}}|{{ .Meta.BaseURL }}").render(
            Data={"name": "Ann"}, Meta={"BaseURL": "/"}
        )
        assert out == "Ann|/"

    def test_dots_inside_expressions_are_kept(self):
        env = create_environment()
        out = env.from_string("{{ '.x' }}{{ 1.5 }}{{ Data.items()|length }}").render(Data={"a": 1})
        assert out == ".x1.51"

    def test_dot_in_statement_tags(self):
        env = create_environment()
        out = env.from_string("{% if .Data.show %}yes{% endif %}").render(Data={"show": True})
        assert out == "yes"

    def test_text_outside_tags_untouched(self):
        env = create_environment()
        assert env.from_string("a .b. c.").render() == "a .b. c."

    def test_missing_fields_render_empty(self):
        env = create_environment()
        out = env.from_string("[{{ Data.missing }}][{{ Data.a.b.c }}][{{ Nope }}]").render(Data={})
        assert out == "[][][]"

    def test_values_are_escaped(self):
        env = create_environment()
        assert env.from_string("{{ Data.x }}").render(Data={"x": "<b>"}) == "&lt;b&gt;"

    def test_dots_in_string_literals_kept(self):
        env = create_environment()
        assert env.from_string('{{ "see .Data" }}').render() == "see .Data"

    def test_raw_block_left_alone(self):
        env = create_environment()
        out = env.from_string("{% raw %}{{ .Data.x }}{% endraw %}").render(Data={"x": 1})
        assert out == "{{ .Data.x }}"

    def test_brace_hash_is_literal_text(self):
        env = create_environment()
        assert env.from_string("## Install {#install}").render() == "## Install {#install}"
        assert env.from_string("{# a #} b #}").render() == "{# a #} b #}"

    def test_go_style_comments(self):
        env = create_environment()
        assert env.from_string("a{{/* note .Data */}}b").render() == "ab"


class TestCompose:
    def test_body_sees_page_data_before_conversion(self, tmp_path, composer_factory):
        doc = _doc(tmp_path, body="# {{ .Data.title }}", data={"title": "Welcome"})
        assert composer_factory().compose(doc) == '<h1 id="welcome">Welcome</h1>'

    def test_missing_data_renders_empty_heading(self, tmp_path, composer_factory):
        doc = _doc(tmp_path, body="# Hi {{.Data.name}}")
        assert composer_factory().compose(doc) == '<h1 id="hi">Hi</h1>'

    def test_layout_wraps_content_unescaped(self, tmp_path, composer_factory):
        layout = "<html><title>{{ .Data.title }}</title><body>{{ .Content }}</body></html>"
        doc = _doc(tmp_path, body="*hi*", data={"title": "T"})
        out = composer_factory(layout=layout).compose(doc)
        assert out == "<html><title>T</title><body><p><em>hi</em></p></body></html>"

    def test_layout_sees_site_meta_and_extras(self, tmp_path, composer_factory):
        layout = '<a href="{{ .Meta.BaseURL }}">{{ .Extras.nav }}</a>{{ .Content }}'
        doc = _doc(tmp_path, body="x", extras={"nav": "Home"})
        out = composer_factory(layout=layout).compose(doc)
        assert out.startswith('<a href="https://example.com/">Home</a>')

    def test_head_and_tail_without_layout(self, tmp_path, composer_factory):
        composer = composer_factory(head="<header>{{ .Data.title }}</header>", tail="<footer/>")
        doc = _doc(tmp_path, body="text", data={"title": "Top"})
        assert composer.compose(doc) == "<header>Top</header><p>text</p><footer/>"

    def test_head_and_tail_apply_to_html_sources(self, tmp_path, composer_factory):
        composer = composer_factory(head="<h>", tail="</h>")
        doc = _doc(tmp_path, name="raw.html", body="<p>{{ .Data.x }}</p>", data={"x": 1})
        assert composer.compose(doc) == "<h><p>1</p></h>"

    def test_head_and_tail_skip_other_sources(self, tmp_path, composer_factory):
        composer = composer_factory(head="<h>", tail="</h>")
        doc = _doc(tmp_path, name="style.css", body="body { color: red; }")
        assert composer.compose(doc) == "body { color: red; }"

    def test_layout_replaces_head_and_tail(self, tmp_path, composer_factory):
        composer = composer_factory(layout="[{{ .Content }}]", head="<h>", tail="</h>")
        doc = _doc(tmp_path, body="x")
        assert composer.compose(doc) == "[<p>x</p>]"

    def test_non_markdown_is_not_converted(self, tmp_path, composer_factory):
        doc = _doc(tmp_path, name="page.html", body="# not a heading")
        assert composer_factory().compose(doc) == "# not a heading"

    def test_directives_surviving_first_pass_resolve_in_second(self, tmp_path, composer_factory):
        body = "Title: {% raw %}{{ .Data.title }}{% endraw %}"
        doc = _doc(tmp_path, body=body, data={"title": "Late"})
        assert composer_factory().compose(doc) == "<p>Title: Late</p>"

    def test_heading_attribute_braces_survive(self, tmp_path, composer_factory):
        doc = _doc(tmp_path, body="## Install {#install}\n\ntext\n")
        out = composer_factory().compose(doc)
        assert "Install {#install}</h2>" in out
        assert "<p>text</p>" in out


class TestErrors:
    def test_bad_body_syntax(self, tmp_path, composer_factory):
        doc = _doc(tmp_path, body="{% if %}")
        with pytest.raises(TemplateRenderError, match="index.md"):
            composer_factory().compose(doc)

    def test_bad_layout_syntax_fails_on_construction(self, composer_factory):
        with pytest.raises(TemplateRenderError, match="_layout.html"):
            composer_factory(layout="{{ .Content ")

    def test_bad_snippet_syntax_fails_in_second_pass(self, tmp_path, composer_factory):
        composer = composer_factory(head="{% for %}")
        with pytest.raises(TemplateRenderError):
            composer.compose(_doc(tmp_path, body="x"))


class TestFlush:
    def test_writes_target_name_under_out_dir(self, tmp_path, composer_factory):
        doc = _doc(tmp_path, name="blog/post.md", body="hello")
        target = composer_factory().flush(doc)
        assert target == tmp_path / "out" / "blog" / "post.html"
        assert target.read_text() == "<p>hello</p>"

    def test_overridden_target_name(self, tmp_path, composer_factory):
        doc = _doc(tmp_path, body="hello")
        doc.target_name = "elsewhere/renamed.html"
        target = composer_factory().flush(doc)
        assert target == tmp_path / "out" / "elsewhere" / "renamed.html"
        assert target.exists()

    def test_rewrites_existing_file(self, tmp_path, composer_factory):
        out = tmp_path / "out" / "index.html"
        out.parent.mkdir(parents=True)
        out.write_text("x" * 1000)
        composer_factory().flush(_doc(tmp_path, body="short"))
        assert out.read_text() == "<p>short</p>"

    def test_absolute_target_name_stays_under_out_dir(self, tmp_path, composer_factory):
        doc = _doc(tmp_path, body="x")
        doc.target_name = "/abs/page.html"
        assert composer_factory().flush(doc) == tmp_path / "out" / "abs" / "page.html"

    def test_target_name_leaving_out_dir_is_rejected(self, tmp_path, composer_factory):
        doc = _doc(tmp_path, body="x")
        doc.target_name = "../escaped.html"
        with pytest.raises(SourceError, match="outside the output directory"):
            composer_factory().flush(doc)
        assert not (tmp_path / "escaped.html").exists()
