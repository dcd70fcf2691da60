"""Registration pass: publish a section/field schema to the host.

The pass is a transformation from the integrator's schema into a
:class:`~settingspage.registry.Registry`. The only side effect outside the
returned registry is creating an empty option record for every section that
has none yet.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from markupsafe import Markup

from .consts import FIELD_NAME_FALLBACK
from .errors import SchemaException
from .i18n import gettext as _
from .registry import (
    FieldArgs,
    FieldRegistration,
    Registry,
    SectionRegistration,
    SettingRegistration,
)
from .sanitizers import SectionSanitizer
from .schema import FieldSpec, Section, StaticDescription
from .utils import storage_key

logger = logging.getLogger(__name__)


class OptionsBackend(Protocol):
    def get_option(self, name: str, default: Any = False) -> Any: ...

    def add_option(self, name: str, value: Any = "") -> bool: ...


@dataclass(frozen=True)
class SectionDescription:
    """Section callback that prints the section description in a container."""

    section: Section

    def __call__(self) -> str:
        description = self.section.description
        text = description.render()
        if isinstance(description, StaticDescription) and not description.markup:
            return Markup('<div class="inside">{}</div>').format(text)
        return Markup('<div class="inside">{}</div>').format(Markup(text))


def build_section_callback(section: Section):
    if section.description is not None:
        return SectionDescription(section)
    if section.callback is not None:
        return section.callback
    return None


def build_field_args(section_id: str, spec: FieldSpec) -> FieldArgs:
    if not spec.id:
        raise SchemaException(f"Field in section '{section_id}' has no id")

    return FieldArgs(
        id=spec.id,
        type=spec.type,
        name=spec.name if spec.name is not None else _(FIELD_NAME_FALLBACK),
        label_for=storage_key(section_id, spec.id),
        desc=spec.desc,
        section=section_id,
        size=spec.size,
        options=dict(spec.options),
        std=spec.default if spec.default is not None else "",
        placeholder=spec.placeholder or "",
        sanitize_callback=spec.sanitize_callback,
    )


def build_field_registration(section_id: str, spec: FieldSpec) -> FieldRegistration:
    args = build_field_args(section_id, spec)
    return FieldRegistration(
        id=args.label_for,
        title=args.name,
        renderer_key=args.type.renderer_key,
        page=section_id,
        section=section_id,
        args=args,
    )


def run_registration_pass(
    sections: Sequence[Section],
    fields: Mapping[str, Sequence[FieldSpec]],
    options: OptionsBackend,
    registry: Optional[Registry] = None,
) -> Registry:
    """Register sections, fields and per-section settings.

    Args:
        sections: Ordered sections; each becomes one page scope and one option record
        fields: Ordered field specs keyed by section id
        options: Host option API used to create missing option records
        registry: Registry to publish into (a new one when omitted)

    Returns:
        The populated registry
    """
    registry = registry if registry is not None else Registry()

    for section in sections:
        if options.get_option(section.id) is False:
            options.add_option(section.id, {})
            logger.info(f"Created option record: {section.id}")

        registry.add_section(
            SectionRegistration(
                id=section.id,
                title=section.title,
                callback=build_section_callback(section),
                page=section.id,
            )
        )

    for section_id, field_specs in fields.items():
        seen: set[str] = set()
        for spec in field_specs:
            try:
                registration = build_field_registration(section_id, spec)
            except SchemaException as e:
                logger.warning(f"Skipping field registration: {e}")
                continue

            if registration.args.id in seen:
                logger.warning(f"Skipping duplicate field id: {registration.id}")
                continue
            seen.add(registration.args.id)
            registry.add_field(registration)

    for section in sections:
        registry.register_setting(
            SettingRegistration(
                group=section.id,
                option_name=section.id,
                sanitize_callback=SectionSanitizer(
                    section.id, tuple(fields.get(section.id, ()))
                ),
            )
        )

    logger.debug(
        f"Registration pass complete: {len(sections)} sections, "
        f"{sum(len(v) for v in fields.values())} fields"
    )
    return registry
