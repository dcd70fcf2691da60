"""Field renderers, one per field type."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

from .consts import FIELD_SIZE_DEFAULT, TEMPLATE_FIELDS, WYSIWYG_SIZE_DEFAULT, WYSIWYG_TEXTAREA_ROWS
from .enums import FieldType
from .errors import SettingsPageException, UnknownFieldTypeError
from .i18n import gettext as _
from .registry import FieldArgs
from .schema import DynamicDescription
from .utils import storage_key

logger = logging.getLogger(__name__)

EditorWidget = Callable[[Any, str, dict[str, Any]], str]


def _is_checked(value: Any) -> bool:
    return value not in (None, False, "", "0", "off")


class FieldRenderer:
    """Render settings fields as form controls bound to ``section[id]``.

    Current values are read from the host option store; a missing record or
    key falls back to the field default.
    """

    def __init__(self, options, editor: Optional[EditorWidget] = None):
        self._options = options
        self._editor = editor

        template_dir = Path(__file__).parent / "templates"
        self.jinja_env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html.j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.jinja_env.globals["_"] = _
        self._macros = self.jinja_env.get_template(TEMPLATE_FIELDS).module

    def get_option(self, option: str, section: str, default: Any = "") -> Any:
        """Get the value of a settings field.

        Args:
            option: Field id
            section: Section id the field belongs to
            default: Value returned when nothing is stored

        Returns:
            Stored value or ``default``
        """
        record = self._options.get_option(section)
        if isinstance(record, Mapping) and record.get(option) is not None:
            return record[option]
        return default

    def get_field_label(self, args: FieldArgs) -> Markup:
        """Description as inline text, for controls that wrap it in their label."""
        if args.desc is None:
            return Markup("")
        if isinstance(args.desc, DynamicDescription) or args.desc.markup:
            return Markup(args.desc.render())
        return escape(args.desc.render())

    def get_field_description(self, args: FieldArgs) -> Markup:
        label = self.get_field_label(args)
        if not label:
            return label
        return Markup('<p class="description">{}</p>').format(label)

    def render(self, args: FieldArgs) -> Markup:
        match args.type:
            case FieldType.TITLE:
                return self.callback_title(args)
            case FieldType.TEXT | FieldType.URL | FieldType.EMAIL | FieldType.NUMBER:
                return self.callback_text(args)
            case FieldType.CHECKBOX:
                return self.callback_checkbox(args)
            case FieldType.MULTICHECK:
                return self.callback_multicheck(args)
            case FieldType.RADIO:
                return self.callback_radio(args)
            case FieldType.SELECT:
                return self.callback_select(args)
            case FieldType.TEXTAREA:
                return self.callback_textarea(args)
            case FieldType.HTML:
                return self.callback_html(args)
            case FieldType.WYSIWYG:
                return self.callback_wysiwyg(args)
            case FieldType.FILE:
                return self.callback_file(args)
            case FieldType.IMAGE:
                return self.callback_image(args)
            case FieldType.PASSWORD:
                return self.callback_password(args)
            case FieldType.COLOR:
                return self.callback_color(args)
            case FieldType.SEPARATOR:
                return self.callback_separator(args)
            case _:
                raise UnknownFieldTypeError(f"No renderer for field type: {args.type!r}")

    def _value(self, args: FieldArgs) -> Any:
        return self.get_option(args.id, args.section, args.std)

    def _choices(self, args: FieldArgs, checked: Callable[[str], bool]) -> list[dict[str, Any]]:
        return [
            {"key": key, "label": label, "checked": checked(str(key))}
            for key, label in args.options.items()
        ]

    def callback_title(self, args: FieldArgs) -> Markup:
        # The row label is the whole control.
        return Markup("")

    def callback_text(self, args: FieldArgs) -> Markup:
        return self._macros.text(
            type=args.type.value,
            size=args.size or FIELD_SIZE_DEFAULT,
            name=args.label_for,
            value=self._value(args),
            placeholder=args.placeholder,
            description=self.get_field_description(args),
        )

    def callback_checkbox(self, args: FieldArgs) -> Markup:
        return self._macros.checkbox(
            name=args.label_for,
            value=self._value(args),
            description=self.get_field_label(args),
        )

    def callback_multicheck(self, args: FieldArgs) -> Markup:
        value = self._value(args)
        if not isinstance(value, Mapping):
            value = {}
        return self._macros.multicheck(
            name=args.label_for,
            choices=self._choices(args, lambda key: _is_checked(value.get(key))),
            description=self.get_field_description(args),
        )

    def callback_radio(self, args: FieldArgs) -> Markup:
        value = str(self._value(args))
        return self._macros.radio(
            name=args.label_for,
            choices=self._choices(args, lambda key: key == value),
            description=self.get_field_description(args),
        )

    def callback_select(self, args: FieldArgs) -> Markup:
        value = str(self._value(args))
        return self._macros.select(
            size=args.size or FIELD_SIZE_DEFAULT,
            name=args.label_for,
            choices=self._choices(args, lambda key: key == value),
            description=self.get_field_description(args),
        )

    def callback_textarea(self, args: FieldArgs) -> Markup:
        return self._macros.textarea(
            size=args.size or FIELD_SIZE_DEFAULT,
            name=args.label_for,
            value=self._value(args),
            placeholder=args.placeholder,
            description=self.get_field_description(args),
        )

    def callback_html(self, args: FieldArgs) -> Markup:
        return self.get_field_description(args)

    def callback_wysiwyg(self, args: FieldArgs) -> Markup:
        settings: dict[str, Any] = {
            "teeny": True,
            "textarea_name": args.label_for,
            "textarea_rows": WYSIWYG_TEXTAREA_ROWS,
        }
        settings.update(args.options)

        editor_id = f"{args.section}-{args.id}"
        if self._editor is None:
            raise SettingsPageException("wysiwyg fields need a host editor widget")
        editor = Markup(self._editor(self._value(args), editor_id, settings))

        return self._macros.wysiwyg(
            size=args.size or WYSIWYG_SIZE_DEFAULT,
            editor=editor,
            description=self.get_field_description(args),
        )

    def _upload(self, args: FieldArgs, default_label: str, preview: bool) -> Markup:
        return self._macros.file(
            size=args.size or FIELD_SIZE_DEFAULT,
            name=storage_key(args.section, args.id),
            value=self._value(args),
            button_label=args.options.get("button_label") or _(default_label),
            description=self.get_field_description(args),
            preview=preview,
        )

    def callback_file(self, args: FieldArgs) -> Markup:
        return self._upload(args, "Choose File", preview=False)

    def callback_image(self, args: FieldArgs) -> Markup:
        return self._upload(args, "Choose Image", preview=True)

    def callback_password(self, args: FieldArgs) -> Markup:
        return self._macros.password(
            size=args.size or FIELD_SIZE_DEFAULT,
            name=args.label_for,
            value=self._value(args),
            description=self.get_field_description(args),
        )

    def callback_color(self, args: FieldArgs) -> Markup:
        return self._macros.color(
            size=args.size or FIELD_SIZE_DEFAULT,
            name=args.label_for,
            value=self._value(args),
            default_color=args.std,
            placeholder=args.placeholder,
            description=self.get_field_description(args),
        )

    def callback_separator(self, args: FieldArgs) -> Markup:
        return self._macros.separator()
