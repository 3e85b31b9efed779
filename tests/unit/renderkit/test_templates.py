"""Unit tests for template compilation."""

import pytest

from renderkit.config import Delims, Options, prepare_options
from renderkit.exceptions import NoLayoutError, TemplateCompileError, TemplateRenderError
from renderkit.templates import PLACEHOLDER_BODY, Helper, compile_templates, get_ext, helpers


def compile_dir(directory, **kwargs):
    return compile_templates(prepare_options(Options(directory=str(directory), **kwargs)))


class TestGetExt:
    """Tests for compound extension detection."""

    def test_simple_extension(self):
        assert get_ext("index.tmpl") == ".tmpl"

    def test_compound_extension(self):
        assert get_ext("page.html.tmpl") == ".html.tmpl"

    def test_no_extension(self):
        assert get_ext("README") == ""


class TestCompileTemplates:
    """Tests for compile_templates."""

    def test_names_are_relative_paths_without_extension(self, template_dir):
        """Test nested files are named with forward slashes and no extension."""
        templates = compile_dir(template_dir)

        assert "content" in templates
        assert "admin/index" in templates
        assert "admin/index.tmpl" not in templates

    def test_only_matching_extensions_are_loaded(self, tmp_path, write_templates):
        """Test files whose compound extension differs are skipped."""
        write_templates(tmp_path, {"page": "page"}, ext=".tmpl")
        write_templates(tmp_path, {"notes": "notes"}, ext=".txt")
        write_templates(tmp_path, {"fancy": "fancy"}, ext=".html.tmpl")

        templates = compile_dir(tmp_path)

        assert "page" in templates
        assert "notes" not in templates
        assert "fancy" not in templates
        assert "fancy.html" not in templates

    def test_multiple_extensions(self, tmp_path, write_templates):
        """Test every configured extension is stripped from its files."""
        write_templates(tmp_path, {"page": "page"}, ext=".html.tmpl")
        write_templates(tmp_path, {"mail": "mail"}, ext=".txt")

        templates = compile_dir(tmp_path, extensions=[".html.tmpl", ".txt"])

        assert {"page", "mail"} <= templates.names

    def test_missing_directory_is_tolerated(self, tmp_path):
        """Test a missing directory yields only the placeholder template."""
        missing = tmp_path / "missing"

        templates = compile_dir(missing)

        assert len(templates) == 1
        assert templates.get(str(missing)).render() == PLACEHOLDER_BODY

    def test_file_as_directory_is_tolerated(self, tmp_path):
        """Test a directory option naming a regular file compiles like a missing one."""
        path = tmp_path / "templates.tmpl"
        path.write_text("not a directory", encoding="utf-8")

        templates = compile_dir(path)

        assert len(templates) == 1
        assert templates.get(str(path)).render() == PLACEHOLDER_BODY

    def test_placeholder_registered_in_both_trees(self, template_dir):
        """Test the placeholder exists even when real templates do too."""
        templates = compile_dir(template_dir)

        assert templates.get(str(template_dir), escaping=True).render() == PLACEHOLDER_BODY
        assert templates.get(str(template_dir), escaping=False).render() == PLACEHOLDER_BODY

    def test_parse_error_is_fatal(self, tmp_path, write_templates):
        """Test malformed template syntax aborts compilation."""
        write_templates(tmp_path, {"good": "ok", "bad": "{% if %}"})

        with pytest.raises(TemplateCompileError) as exc_info:
            compile_dir(tmp_path)

        assert "bad" in exc_info.value.message
        assert exc_info.value.details["template"] == "bad"

    def test_unreadable_file_is_fatal(self, tmp_path):
        """Test a file that cannot be decoded aborts compilation."""
        (tmp_path / "binary.tmpl").write_bytes(b"\xff\xfe\xfa")

        with pytest.raises(TemplateCompileError):
            compile_dir(tmp_path)

    def test_escaping_and_plain_trees(self, template_dir):
        """Test the markup tree escapes and the plain tree does not."""
        templates = compile_dir(template_dir)

        assert templates.get("field", escaping=True).render(Field="<b>") == "&lt;b&gt;"
        assert templates.get("field", escaping=False).render(Field="<b>") == "<b>"

    def test_keeps_trailing_newline(self, tmp_path, write_templates):
        """Test file contents are rendered verbatim, trailing newline included."""
        write_templates(tmp_path, {"line": "line\n"})

        templates = compile_dir(tmp_path)

        assert templates.get("line").render() == "line\n"

    def test_custom_delimiters(self, tmp_path, write_templates):
        """Test configured delimiters replace the default ones."""
        write_templates(tmp_path, {"delims": "[[ name ]] {{ name }}"})

        templates = compile_dir(tmp_path, delims=Delims(left="[[", right="]]"))

        assert templates.get("delims").render(name="x") == "x {{ name }}"

    def test_funcs_per_tree(self, tmp_path, write_templates):
        """Test html and text function maps are installed on their own tree."""
        write_templates(tmp_path, {"shout": "{{ shout('hi') }}"})

        templates = compile_dir(
            tmp_path,
            html_funcs=[{"shout": lambda s: s.upper()}],
            text_funcs=[{"shout": lambda s: s.upper() + "!"}],
        )

        assert templates.get("shout", escaping=True).render() == "HI"
        assert templates.get("shout", escaping=False).render() == "HI!"

    def test_reserved_helpers_override_user_funcs(self, template_dir):
        """Test user maps cannot replace the yield and current placeholders."""
        templates = compile_dir(template_dir, html_funcs=[{"current": lambda: "mine"}])

        assert str(templates.html.globals["current"]) == ""

    def test_yield_placeholder_raises(self, template_dir):
        """Test yield outside of a layout fails with NoLayoutError."""
        templates = compile_dir(template_dir)

        with pytest.raises(NoLayoutError):
            templates.get("no_layout").render()

    def test_unknown_template(self, template_dir):
        """Test looking up an unknown name raises TemplateRenderError."""
        templates = compile_dir(template_dir)

        with pytest.raises(TemplateRenderError) as exc_info:
            templates.get("nope")

        assert exc_info.value.message == 'template "nope" is undefined'

    def test_extends_resolves_within_set(self, tmp_path, write_templates):
        """Test Jinja2 inheritance finds other templates by name."""
        write_templates(
            tmp_path,
            {
                "base": "<{% block body %}{% endblock %}>",
                "child": '{% extends "base" %}{% block body %}child{% endblock %}',
            },
        )

        templates = compile_dir(tmp_path)

        assert templates.get("child").render() == "<child>"


class TestHelpers:
    """Tests for the yield/current helper objects."""

    def test_helper_call_and_str(self):
        helper = Helper(lambda: "value")

        assert helper() == "value"
        assert str(helper) == "value"

    def test_helper_html_escapes_plain_strings(self):
        helper = Helper(lambda: "<i>")

        assert helper.__html__() == "&lt;i&gt;"

    def test_helpers_bind_current(self):
        bound = helpers(lambda: "inner", current="content")

        assert bound["yield"]() == "inner"
        assert bound["current"]() == "content"
