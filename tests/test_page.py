"""Tabbed page rendering tests"""

import re

import pytest

from settingspage.builder import SettingsBuilder
from settingspage.host import Host
from settingspage.options import MemoryOptionStore
from settingspage.page import TabState


@pytest.fixture
def host():
    return Host(MemoryOptionStore(), secret_key="test-secret")


@pytest.fixture
def builder(host):
    builder = SettingsBuilder("Settings API", "Settings API", "manage_options", "settings_api_test", host)
    builder.set_sections(
        [
            {"id": "general", "title": "General", "desc": "General options"},
            {"id": "advanced", "title": "Advanced", "label_submit": "Save Advanced", "submit_type": "secondary"},
        ]
    )
    builder.set_fields(
        {
            "general": [{"id": "site_name", "name": "Site name"}],
            "advanced": [{"id": "sep", "type": "separator"}],
        }
    )
    host.do_action("admin_init")
    return builder


# ========== TabState ==========


def test_tab_state_defaults_to_first_section():
    assert TabState().initial(["general", "advanced"]) == "general"


def test_tab_state_after_selecting_tab():
    state = TabState().select("advanced")

    assert state.active_tab == "advanced"
    assert state.initial(["general", "advanced"]) == "advanced"


def test_tab_state_ignores_stale_tab():
    assert TabState("removed").initial(["general", "advanced"]) == "general"


def test_tab_state_without_sections():
    assert TabState("general").initial([]) is None


def test_tab_state_from_cookies():
    assert TabState.from_cookies({"activetab": "advanced"}).active_tab == "advanced"
    assert TabState.from_cookies({"activetab": ""}).active_tab is None
    assert TabState.from_cookies({}).active_tab is None


# ========== Page ==========


def test_navigation_has_one_tab_per_section(builder):
    html = builder.show_navigation()

    assert '<h2 class="nav-tab-wrapper">' in html
    assert '<a href="#general" class="nav-tab nav-tab-active" id="general-tab">General</a>' in html
    assert '<a href="#advanced" class="nav-tab" id="advanced-tab">Advanced</a>' in html


def test_first_form_visible_without_stored_tab(builder):
    html = builder.show_forms()

    assert '<div id="general" class="group">' in html
    assert '<div id="advanced" class="group" style="display: none;">' in html


def test_stored_tab_visible_first_after_reload(builder):
    state = TabState().select("advanced")

    html = builder.plugin_page(tab_state=TabState.from_cookies({"activetab": state.active_tab}))

    assert '<div id="general" class="group" style="display: none;">' in html
    assert '<div id="advanced" class="group">' in html
    assert 'class="nav-tab nav-tab-active" id="advanced-tab"' in html


def test_one_form_per_section_posting_to_options_endpoint(builder):
    html = builder.show_forms()

    assert html.count('<form method="post" action="/wp-admin/options.php">') == 2
    assert '<input type="hidden" name="option_page" value="general" />' in html
    assert '<input type="hidden" name="option_page" value="advanced" />' in html
    assert '<input type="hidden" name="action" value="update" />' in html


def test_form_nonces_verify_for_their_section(host, builder):
    html = builder.show_forms()

    nonces = re.findall(r'name="_wpnonce" value="([^"]+)"', html)
    assert len(nonces) == 2
    host.verify_nonce(nonces[0], "general-options")
    host.verify_nonce(nonces[1], "advanced-options")


def test_form_referer(builder):
    html = builder.show_forms(referer="/wp-admin/options-general.php?page=settings_api_test")

    assert 'name="_wp_http_referer" value="/wp-admin/options-general.php?page=settings_api_test"' in html


def test_section_rows_and_description(builder):
    html = builder.show_forms()

    assert "<h2>General</h2>" in html
    assert '<div class="inside">General options</div>' in html
    assert '<th scope="row"><label for="general[site_name]">Site name</label></th>' in html


def test_submit_buttons(builder):
    html = builder.show_forms()

    assert 'name="submit_general" id="submit_general" class="button button-primary" value="Save Changes"' in html
    assert 'name="submit_advanced" id="submit_advanced" class="button" value="Save Advanced"' in html


def test_form_hooks_render_inside_form(host, builder):
    host.add_action("settingspage_form_top_general", lambda section: f"<p>Top of {section.id}</p>")
    host.add_action("settingspage_form_bottom_advanced", lambda section: "<p>Bottom</p>")

    html = builder.show_forms()

    general = html[html.index('<div id="general"'):html.index('<div id="advanced"')]
    advanced = html[html.index('<div id="advanced"'):]
    assert "<p>Top of general</p>" in general
    assert "<p>Bottom</p>" in advanced
    assert "<p>Bottom</p>" not in general


def test_script_persists_active_tab(builder):
    script = builder.script()

    assert "key: 'activetab'" in script
    assert "tabState.write(" in script
    assert ".iris()" in script


def test_plugin_page_layout(builder):
    html = builder.plugin_page()

    assert html.index('class="nav-tab-wrapper"') < html.index('class="metabox-holder"')
    assert html.index('class="metabox-holder"') < html.index("<script>")
    assert "Settings API" in html
