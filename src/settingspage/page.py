"""Tabbed settings page renderer."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from .consts import (
    ACTION_FORM_BOTTOM,
    ACTION_FORM_TOP,
    ACTIVE_TAB_KEY,
    FORM_DEFAULTS,
    TEMPLATE_PAGE,
)
from .fields import FieldRenderer
from .i18n import gettext as _
from .registry import Registry
from .schema import Section
from .utils import parse_args

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TabState:
    """Client session state: which tab was last active, if any.

    Read point: the ``activetab`` cookie sent with the page request.
    Write point: the tab click handler in the page script.
    """

    active_tab: Optional[str] = None

    @classmethod
    def from_cookies(cls, cookies: Mapping[str, str]) -> "TabState":
        return cls(cookies.get(ACTIVE_TAB_KEY) or None)

    def initial(self, section_ids: Sequence[str]) -> Optional[str]:
        """Tab shown first: the stored one when it still exists, else the first."""
        if self.active_tab and self.active_tab in section_ids:
            return self.active_tab
        return section_ids[0] if section_ids else None

    def select(self, tab_id: str) -> "TabState":
        return replace(self, active_tab=tab_id)


class PageRenderer:
    def __init__(self, page_title: str, host, field_renderer: FieldRenderer):
        self.page_title = page_title
        self._host = host
        self._field_renderer = field_renderer

        template_dir = Path(__file__).parent / "templates"
        self.jinja_env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html.j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.jinja_env.globals["_"] = _
        self._macros = self.jinja_env.get_template(TEMPLATE_PAGE).module

    def show_navigation(self, sections: Sequence[Section], tab_state: TabState) -> Markup:
        active = tab_state.initial([s.id for s in sections])
        tabs = [{"id": s.id, "title": s.title, "active": s.id == active} for s in sections]
        return self._macros.navigation(tabs=tabs)

    def show_forms(
        self,
        sections: Sequence[Section],
        registry: Registry,
        tab_state: TabState,
        referer: str = "",
    ) -> Markup:
        active = tab_state.initial([s.id for s in sections])
        groups = []
        for section in sections:
            form = parse_args(
                section.model_dump(include=set(FORM_DEFAULTS), exclude_none=True),
                FORM_DEFAULTS,
            )
            groups.append(
                {
                    "id": section.id,
                    "active": section.id == active,
                    "top": self._hook_output(ACTION_FORM_TOP + section.id, section),
                    "settings_fields": self._host.settings_fields(section.id, referer),
                    "sections": self._host.do_settings_sections(
                        section.id, registry, self._field_renderer.render
                    ),
                    "bottom": self._hook_output(ACTION_FORM_BOTTOM + section.id, section),
                    "submit": self._host.submit_button(
                        form["label_submit"],
                        form["submit_type"],
                        f"submit_{section.id}",
                        form["wrap"],
                        form["attributes"],
                    ),
                }
            )
        return self._macros.forms(groups=groups, action=self._host.options_update_url())

    def script(self) -> Markup:
        return self._macros.script(tab_key=ACTIVE_TAB_KEY)

    def plugin_page(
        self,
        sections: Sequence[Section],
        registry: Registry,
        tab_state: Optional[TabState] = None,
        referer: str = "",
    ) -> Markup:
        tab_state = tab_state or TabState()
        return self._macros.page(
            page_title=self.page_title,
            navigation=self.show_navigation(sections, tab_state),
            forms=self.show_forms(sections, registry, tab_state, referer),
            script=self.script(),
        )

    def _hook_output(self, action: str, section: Section) -> Markup:
        return Markup("").join(Markup(out) for out in self._host.do_action(action, section))
