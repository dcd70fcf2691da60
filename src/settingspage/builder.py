"""Settings page builder.

Collects sections and fields, publishes them to the host on ``admin_init``,
renders the tabbed page and sanitizes submitted option records.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Optional

from pydantic import ValidationError

from .consts import (
    ACTION_ADMIN_ENQUEUE_SCRIPTS,
    ACTION_ADMIN_INIT,
    ACTION_ADMIN_MENU,
    FIELD_DEFAULTS,
)
from .errors import SchemaException, SettingsPageException
from .fields import FieldRenderer
from .page import PageRenderer, TabState
from .registration import run_registration_pass
from .registry import FieldArgs, Registry
from .sanitizers import SectionSanitizer
from .schema import FieldSpec, Section
from .utils import parse_args

logger = logging.getLogger(__name__)


def _format_errors(e: ValidationError) -> str:
    parts = []
    for error in e.errors():
        loc = " -> ".join(str(item) for item in error.get("loc", []))
        parts.append(f"{loc}: {error.get('msg', '')}" if loc else error.get("msg", ""))
    return "; ".join(parts)


def _to_section(section: Any) -> Optional[Section]:
    if isinstance(section, Section):
        return section
    if not isinstance(section, Mapping):
        return None
    try:
        return Section.model_validate(dict(section))
    except ValidationError as e:
        raise SchemaException(f"Invalid section: {_format_errors(e)}") from e


def _to_field(field: Any, defaults: Optional[Mapping[str, Any]] = None) -> Optional[FieldSpec]:
    if isinstance(field, FieldSpec):
        if defaults is not None and field.name is None:
            return field.model_copy(update={"name": defaults.get("name", "")})
        return field
    if not isinstance(field, Mapping):
        return None
    data = parse_args(field, defaults) if defaults is not None else dict(field)
    try:
        return FieldSpec.model_validate(data)
    except ValidationError as e:
        raise SchemaException(f"Invalid field: {_format_errors(e)}") from e


class SettingsBuilder:
    """Build one tabbed settings page from sections and fields.

    Setters return the builder so calls chain, or ``False`` when the argument
    is not a collection of records (nothing is changed in that case). A record
    that is a mapping but fails validation, such as a field with an unknown
    type, raises :class:`~settingspage.errors.SchemaException`.
    """

    def __init__(self, page_title: str, menu_title: str, capability: str, slug: str, host):
        self.page_title = page_title
        self.menu_title = menu_title
        self.capability = capability
        self.slug = slug

        self._host = host
        self._sections: list[Section] = []
        self._fields: dict[str, list[FieldSpec]] = {}
        self.registry: Optional[Registry] = None

        self.field_renderer = FieldRenderer(host, editor=host.editor)
        self.page_renderer = PageRenderer(page_title, host, self.field_renderer)

        host.add_action(ACTION_ADMIN_ENQUEUE_SCRIPTS, self.admin_scripts)
        host.add_action(ACTION_ADMIN_INIT, self.admin_init)
        host.add_action(ACTION_ADMIN_MENU, self.admin_menu)

    @classmethod
    def from_config(cls, config, host) -> "SettingsBuilder":
        builder = cls(
            config.page.page_title,
            config.page.menu_title,
            config.page.capability,
            config.page.slug,
            host,
        )
        builder.set_sections(config.sections)
        builder.set_fields(config.fields)
        return builder

    @property
    def host(self):
        return self._host

    @property
    def sections(self) -> list[Section]:
        return list(self._sections)

    @property
    def fields(self) -> dict[str, list[FieldSpec]]:
        return {section: list(specs) for section, specs in self._fields.items()}

    def _check_mutable(self) -> None:
        if self.registry is not None:
            logger.warning(
                "Settings schema changed after admin_init; the page will not reflect it "
                "until the next registration pass"
            )

    # ==================== Schema ====================

    def set_sections(self, sections: Sequence[Any]):
        if not isinstance(sections, (list, tuple)):
            return False
        converted = [_to_section(section) for section in sections]
        if any(section is None for section in converted):
            return False

        self._check_mutable()
        self._sections = converted
        return self

    def add_section(self, section: Any):
        converted = _to_section(section)
        if converted is None:
            return False

        self._check_mutable()
        self._sections.append(converted)
        return self

    def set_fields(self, fields: Mapping[str, Sequence[Any]]):
        if not isinstance(fields, Mapping):
            return False
        converted: dict[str, list[FieldSpec]] = {}
        for section_id, specs in fields.items():
            if not isinstance(specs, (list, tuple)):
                return False
            converted[section_id] = [_to_field(spec) for spec in specs]
            if any(spec is None for spec in converted[section_id]):
                return False

        self._check_mutable()
        self._fields = converted
        return self

    def add_field(self, section: str, field: Any):
        converted = _to_field(field, FIELD_DEFAULTS)
        if converted is None:
            return False

        self._check_mutable()
        self._fields.setdefault(section, []).append(converted)
        return self

    # ==================== Lifecycle ====================

    def admin_scripts(self, hook: Optional[str] = None) -> None:
        self._host.enqueue_script("jquery")
        self._host.enqueue_script(
            "iris",
            self._host.admin_url("js/iris.min.js"),
            ["jquery-ui-draggable", "jquery-ui-slider", "jquery-touch-punch"],
            False,
            True,
        )
        self._host.enqueue_media()

    def admin_init(self) -> Registry:
        """Publish sections, fields and settings to the host."""
        self.registry = run_registration_pass(self._sections, self._fields, self._host)
        logger.info(f"Settings registered for page: {self.slug}")
        return self.registry

    def admin_menu(self) -> str:
        return self._host.add_options_page(
            self.page_title,
            self.menu_title,
            self.capability,
            self.slug,
            self.plugin_page,
        )

    # ==================== Sanitizing ====================

    def get_sanitize_callback(self, slug: str = "", section: Optional[str] = None) -> Optional[Callable[[Any], Any]]:
        """Find the sanitizer for a field id, searching all sections unless one is given."""
        if not slug:
            return None
        section_ids = [section] if section is not None else list(self._fields)
        for section_id in section_ids:
            callback = SectionSanitizer(
                section_id, tuple(self._fields.get(section_id, ()))
            ).get_sanitize_callback(slug)
            if callback is not None:
                return callback
        return None

    def sanitize_fields(self, section: str, fields: Any) -> Any:
        return SectionSanitizer(section, tuple(self._fields.get(section, ())))(fields)

    # ==================== Rendering ====================

    def get_option(self, option: str, section: str, default: Any = "") -> Any:
        return self.field_renderer.get_option(option, section, default)

    def render_field(self, args: FieldArgs):
        return self.field_renderer.render(args)

    def _require_registry(self) -> Registry:
        if self.registry is None:
            raise SettingsPageException(
                f"Settings for '{self.slug}' are not registered; admin_init has not run"
            )
        return self.registry

    def show_navigation(self, tab_state: Optional[TabState] = None):
        return self.page_renderer.show_navigation(self._sections, tab_state or TabState())

    def show_forms(self, tab_state: Optional[TabState] = None, referer: str = ""):
        return self.page_renderer.show_forms(
            self._sections, self._require_registry(), tab_state or TabState(), referer
        )

    def script(self):
        return self.page_renderer.script()

    def plugin_page(self, tab_state: Optional[TabState] = None, referer: str = ""):
        return self.page_renderer.plugin_page(
            self._sections, self._require_registry(), tab_state, referer
        )
