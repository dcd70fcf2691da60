"""Field renderer tests"""

import dataclasses

import pytest

from settingspage.enums import FieldType
from settingspage.errors import SettingsPageException, UnknownFieldTypeError
from settingspage.fields import FieldRenderer
from settingspage.host import Host
from settingspage.options import MemoryOptionStore
from settingspage.registration import build_field_args
from settingspage.schema import FieldSpec


@pytest.fixture
def store():
    return MemoryOptionStore()


@pytest.fixture
def host(store):
    return Host(store, secret_key="test-secret")


@pytest.fixture
def renderer(host):
    return FieldRenderer(host, editor=host.editor)


def make_args(section="general", **spec):
    return build_field_args(section, FieldSpec(**spec))


def test_text_renders_stored_value(store, renderer):
    store.add("general", {"site_name": "My <site>"})

    html = renderer.render(make_args(id="site_name", name="Site name"))

    assert 'type="text"' in html
    assert 'name="general[site_name]"' in html
    assert 'id="general[site_name]"' in html
    assert 'class="regular-text"' in html
    assert 'value="My &lt;site&gt;"' in html


def test_text_falls_back_to_default(renderer):
    html = renderer.render(make_args(id="site_name", default="Title", placeholder="Your site"))

    assert 'value="Title"' in html
    assert 'placeholder="Your site"' in html


@pytest.mark.parametrize("field_type", ["url", "email", "number"])
def test_text_variants_share_renderer(renderer, field_type):
    html = renderer.render(make_args(id="value", type=field_type, size="small"))

    assert f'type="{field_type}"' in html
    assert 'class="small-text"' in html


def test_description_is_escaped(renderer):
    html = renderer.render(make_args(id="x", desc="Use <b>bold</b>"))

    assert '<p class="description">Use &lt;b&gt;bold&lt;/b&gt;</p>' in html


def test_dynamic_description_is_raw(renderer):
    html = renderer.render(make_args(id="x", desc=lambda: "<em>live</em>"))

    assert '<p class="description"><em>live</em></p>' in html


def test_checkbox_checked_when_on(store, renderer):
    store.add("general", {"enabled": "on"})

    html = renderer.render(make_args(id="enabled", type="checkbox", desc="Enable it"))

    assert '<input type="hidden" name="general[enabled]" value="off" />' in html
    assert 'id="settingspage-general[enabled]"' in html
    assert 'checked="checked"' in html
    assert "Enable it</label>" in html
    assert '<p class="description">' not in html


def test_checkbox_label_escapes_description(renderer):
    html = renderer.render(make_args(id="enabled", type="checkbox", desc="Use <b>"))

    assert "Use &lt;b&gt;</label>" in html


def test_checkbox_unchecked_by_default(renderer):
    html = renderer.render(make_args(id="enabled", type="checkbox"))

    assert 'checked="checked"' not in html


def test_multicheck_marks_stored_keys(store, renderer):
    store.add("general", {"colors": {"red": True}})

    html = renderer.render(
        make_args(id="colors", type="multicheck", options={"red": "Red", "blue": "Blue"})
    )

    assert 'name="general[colors][red]" value="red" checked="checked"' in html
    assert 'name="general[colors][blue]" value="blue" />' in html


def test_radio_marks_current_value(renderer):
    html = renderer.render(
        make_args(id="answer", type="radio", default="no", options={"yes": "Yes", "no": "No"})
    )

    assert 'value="no" checked="checked"' in html
    assert 'value="yes" />' in html


def test_select_marks_current_value(store, renderer):
    store.add("general", {"answer": "yes"})

    html = renderer.render(
        make_args(id="answer", type="select", default="no", options={"yes": "Yes", "no": "No"})
    )

    assert '<select class="regular" name="general[answer]" id="general[answer]">' in html
    assert '<option value="yes" selected="selected">Yes</option>' in html
    assert '<option value="no">No</option>' in html


def test_select_with_numeric_option_keys(store, renderer):
    store.add("general", {"level": "2"})

    html = renderer.render(make_args(id="level", type="select", options={1: "One", 2: "Two"}))

    assert '<option value="1">One</option>' in html
    assert '<option value="2" selected="selected">Two</option>' in html


def test_textarea(store, renderer):
    store.add("general", {"bio": "Line </textarea>"})

    html = renderer.render(make_args(id="bio", type="textarea"))

    assert '<textarea rows="5" cols="55" class="regular-text"' in html
    assert "Line &lt;/textarea&gt;" in html


def test_html_field_renders_description_only(renderer):
    html = renderer.render(
        make_args(id="notice", type="html", desc={"text": "<strong>Heads up</strong>", "markup": True})
    )

    assert html == '<p class="description"><strong>Heads up</strong></p>'


def test_wysiwyg_uses_host_editor(store, renderer):
    store.add("general", {"body": "<p>Hello</p>"})

    html = renderer.render(make_args(id="body", type="wysiwyg"))

    assert '<div style="max-width: 500px;">' in html
    assert 'id="wp-general-body-wrap"' in html
    assert 'rows="10"' in html
    assert 'name="general[body]"' in html
    assert "&lt;p&gt;Hello&lt;/p&gt;" in html


def test_wysiwyg_without_editor_raises(host):
    renderer = FieldRenderer(host)

    with pytest.raises(SettingsPageException):
        renderer.render(make_args(id="body", type="wysiwyg"))


def test_file_field(renderer):
    html = renderer.render(make_args(id="logo", type="file"))

    assert 'class="regular-text settingspage-url"' in html
    assert 'value="Choose File"' in html
    assert "settingspage-image-preview" not in html


def test_file_field_custom_button_label(renderer):
    html = renderer.render(make_args(id="logo", type="file", options={"button_label": "Pick"}))

    assert 'value="Pick"' in html


def test_image_field_has_preview(store, renderer):
    store.add("general", {"logo": "https://example.com/logo.png"})

    html = renderer.render(make_args(id="logo", type="image"))

    assert 'value="Choose Image"' in html
    assert '<img src="https://example.com/logo.png" alt=""/>' in html


def test_password_field(renderer):
    html = renderer.render(make_args(id="secret", type="password"))

    assert 'type="password"' in html
    assert 'name="general[secret]"' in html


def test_color_field(renderer):
    html = renderer.render(make_args(id="color", type="color", default="#ffffff"))

    assert "color-picker" in html
    assert 'data-default-color="#ffffff"' in html
    assert 'value="#ffffff"' in html


def test_separator_renders_divider_only(renderer):
    html = renderer.render(make_args(id="sep", type="separator"))

    assert "<input" not in html
    assert "name=" not in html
    assert html == '<div class="settingspage-settings-separator"></div>'


def test_title_renders_nothing(renderer):
    assert renderer.render(make_args(id="heading", type="title")) == ""


def test_unknown_type_raises(renderer):
    args = dataclasses.replace(make_args(id="x"), type="slider")

    with pytest.raises(UnknownFieldTypeError):
        renderer.render(args)


def test_every_field_type_has_a_renderer(renderer):
    for field_type in FieldType:
        if field_type is FieldType.WYSIWYG:
            continue
        renderer.render(make_args(id="x", type=field_type))


def test_get_option_ignores_stored_null(store, renderer):
    store.add("general", {"x": None})

    assert renderer.get_option("x", "general", "d") == "d"
