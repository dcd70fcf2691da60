"""Explicit registration tables produced by the registration pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .enums import FieldType
from .schema import DynamicDescription, StaticDescription


@dataclass(frozen=True, slots=True)
class FieldArgs:
    """Merged field record handed to a field renderer."""

    id: str
    type: FieldType
    name: str
    label_for: str
    desc: Optional[StaticDescription | DynamicDescription]
    section: str
    size: Optional[str]
    options: dict[str, Any]
    std: Any
    placeholder: str
    sanitize_callback: Optional[Callable[[Any], Any]]


@dataclass(frozen=True, slots=True)
class SectionRegistration:
    id: str
    title: str
    callback: Optional[Callable[[], str]]
    page: str


@dataclass(frozen=True, slots=True)
class FieldRegistration:
    id: str
    title: str
    renderer_key: str
    page: str
    section: str
    args: FieldArgs


@dataclass(frozen=True, slots=True)
class SettingRegistration:
    group: str
    option_name: str
    sanitize_callback: Callable[[Any], Any]


@dataclass
class Registry:
    """Sections, fields and settings published for one or more admin pages.

    Entries are keyed by id, so registering the same schema twice replaces
    entries instead of duplicating them. Dicts keep insertion order, which
    is the on-page order.
    """

    sections: dict[str, dict[str, SectionRegistration]] = field(default_factory=dict)
    fields: dict[str, dict[str, dict[str, FieldRegistration]]] = field(default_factory=dict)
    settings: dict[str, SettingRegistration] = field(default_factory=dict)

    def add_section(self, registration: SectionRegistration) -> None:
        self.sections.setdefault(registration.page, {})[registration.id] = registration

    def add_field(self, registration: FieldRegistration) -> None:
        page_fields = self.fields.setdefault(registration.page, {})
        page_fields.setdefault(registration.section, {})[registration.id] = registration

    def register_setting(self, registration: SettingRegistration) -> None:
        self.settings[registration.option_name] = registration

    def sections_for(self, page: str) -> list[SectionRegistration]:
        return list(self.sections.get(page, {}).values())

    def fields_for(self, page: str, section: str) -> list[FieldRegistration]:
        return list(self.fields.get(page, {}).get(section, {}).values())

    def setting_for(self, option_name: str) -> Optional[SettingRegistration]:
        return self.settings.get(option_name)

    def is_allowed_option(self, group: str, option_name: str) -> bool:
        setting = self.settings.get(option_name)
        return setting is not None and setting.group == group
