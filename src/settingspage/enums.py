"""Enumeration type definitions"""

from enum import Enum


class FieldType(str, Enum):
    """Closed set of field types a settings page can render."""

    TITLE = "title"
    TEXT = "text"
    URL = "url"
    EMAIL = "email"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    MULTICHECK = "multicheck"
    RADIO = "radio"
    SELECT = "select"
    TEXTAREA = "textarea"
    HTML = "html"
    WYSIWYG = "wysiwyg"
    FILE = "file"
    IMAGE = "image"
    PASSWORD = "password"
    COLOR = "color"
    SEPARATOR = "separator"

    @property
    def renderer_key(self) -> str:
        return f"callback_{self.value}"


class SubmitType(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    DELETE = "delete"
    SMALL = "small"
