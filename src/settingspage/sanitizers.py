"""Per-type sanitizers applied to submitted option records."""

from __future__ import annotations

import html as html_module
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

from lxml import etree
from lxml import html

from .consts import POST_ALLOWED_TAGS, POST_STRIPPED_ELEMENTS, URL_PROTOCOLS
from .enums import FieldType
from .schema import FieldSpec
from .utils import is_numeric

logger = logging.getLogger(__name__)

OCTET_RE = re.compile(r"%[a-f0-9]{2}", re.IGNORECASE)
WHITESPACE_RE = re.compile(r"\s+")
URL_STRIP_RE = re.compile(r"[^a-z0-9\-~+_.?#=!&;,/:%@$|*'()\[\]\x80-\uffff]", re.IGNORECASE)
EMAIL_LOCAL_STRIP_RE = re.compile(r"[^a-zA-Z0-9!#$%&'*+/=?^_`{|}~.\-]")
EMAIL_SUB_STRIP_RE = re.compile(r"[^a-z0-9\-]+", re.IGNORECASE)

UNCHECKED_VALUES = ("", "0", "off", "false", None, False)


def _fragment(value: str) -> html.HtmlElement:
    return html.fragment_fromstring(value, create_parent="div")


def _strip_elements(root: html.HtmlElement, tags) -> None:
    for el in list(root.iterdescendants()):
        if not isinstance(el.tag, str) or el.tag in tags:
            if el.getparent() is not None:
                el.drop_tree()


def strip_all_tags(value: str) -> str:
    if not value:
        return ""
    root = _fragment(value)
    _strip_elements(root, POST_STRIPPED_ELEMENTS)
    return root.text_content()


def sanitize_text_field(value: Any) -> str:
    """Reduce a submitted value to a single line of plain text.

    Tags are removed (script and style content included), percent-encoded
    octets are dropped and whitespace runs collapse to one space.

    Examples:
        >>> sanitize_text_field("  <b>Hello</b>\\n  world ")
        'Hello world'
    """
    if value is None:
        return ""
    text = str(value)
    if "<" in text:
        text = strip_all_tags(text)
    text = OCTET_RE.sub("", text)
    return WHITESPACE_RE.sub(" ", text).strip()


def sanitize_email(value: Any) -> str:
    """Strip characters not allowed in an email address.

    Returns an empty string when what is left cannot be an address.
    """
    email = str(value or "").strip()
    if len(email) < 6 or "@" not in email[1:]:
        return ""

    local, domain = email.split("@", 1)
    local = EMAIL_LOCAL_STRIP_RE.sub("", local)
    if not local:
        return ""

    if ".." in domain:
        return ""
    domain = domain.strip(" \t\n\r\0\x0b.")
    if not domain:
        return ""

    subs = []
    for sub in domain.split("."):
        sub = EMAIL_SUB_STRIP_RE.sub("", sub.strip(" \t\n\r\0\x0b-"))
        if sub:
            subs.append(sub)
    if len(subs) < 2:
        return ""

    return f"{local}@{'.'.join(subs)}"


def esc_url_raw(value: Any, protocols: tuple[str, ...] = URL_PROTOCOLS) -> str:
    """Clean a URL for storage.

    Unsafe characters are removed, a missing scheme defaults to ``http://``
    and URLs with a scheme outside ``protocols`` are rejected.

    Examples:
        >>> esc_url_raw("example.com/a b")
        'http://example.com/a%20b'
        >>> esc_url_raw("javascript:alert(1)")
        ''
    """
    url = str(value or "").strip()
    if not url:
        return ""

    url = URL_STRIP_RE.sub("", url.replace(" ", "%20"))
    url = url.replace(";//", "://")
    if not url:
        return ""

    if ":" not in url and not url.startswith(("/", "#", "?")):
        url = f"http://{url}"

    scheme = urlsplit(url).scheme.lower()
    if scheme and scheme not in protocols:
        logger.debug(f"Rejected URL with disallowed scheme: {scheme}")
        return ""
    return url


def kses_post(value: Any) -> str:
    """Filter HTML down to the tags and attributes allowed in post content."""
    if value is None:
        return ""
    text = str(value)
    if "<" not in text:
        return text

    root = _fragment(text)
    _strip_elements(root, POST_STRIPPED_ELEMENTS)

    for el in list(root.iterdescendants()):
        allowed = POST_ALLOWED_TAGS.get(el.tag)
        if allowed is None:
            el.drop_tag()
            continue
        for attr in list(el.attrib):
            if attr.lower() not in allowed:
                del el.attrib[attr]
            elif attr.lower() in ("href", "src", "cite") and not esc_url_raw(el.attrib[attr]):
                del el.attrib[attr]

    content = html_module.escape(root.text or "", quote=False)
    content += "".join(
        etree.tostring(child, encoding="unicode", method="html") for child in root
    )
    return content


def sanitize_checkbox(value: Any) -> str:
    return "on" if value == "on" else "off"


def sanitize_number(value: Any) -> Any:
    return value if is_numeric(value) else 0


def sanitize_multicheck(value: Any, options: Optional[Mapping[str, Any]] = None) -> dict[str, bool]:
    if not isinstance(value, Mapping):
        return {}
    checked = {}
    for key, flag in value.items():
        if options and key not in options:
            continue
        if flag not in UNCHECKED_VALUES:
            checked[str(key)] = True
    return checked


def sanitize_field(
    value: Any,
    field_type: FieldType,
    options: Optional[Mapping[str, Any]] = None,
) -> Any:
    """Sanitize one submitted value according to its field type."""
    match field_type:
        case FieldType.CHECKBOX:
            return sanitize_checkbox(value)
        case FieldType.NUMBER:
            return sanitize_number(value)
        case FieldType.TEXTAREA | FieldType.WYSIWYG:
            return kses_post(value)
        case FieldType.EMAIL:
            return sanitize_email(value)
        case FieldType.URL | FieldType.FILE | FieldType.IMAGE:
            return esc_url_raw(value)
        case FieldType.MULTICHECK:
            return sanitize_multicheck(value, options)
        case _:
            return sanitize_text_field(value) if value else ""


@dataclass(frozen=True)
class SectionSanitizer:
    """Sanitize callback registered for one section's option record.

    Submitted keys are matched against field ids of the owning section.
    Keys with no matching field are stored unchanged.
    """

    section: str
    fields: tuple[FieldSpec, ...]

    def get_sanitize_callback(self, slug: str) -> Optional[Callable[[Any], Any]]:
        if not slug:
            return None
        for spec in self.fields:
            if spec.id != slug:
                continue
            if spec.sanitize_callback is not None:
                return spec.sanitize_callback
            return partial(sanitize_field, field_type=spec.type, options=spec.options)
        return None

    def __call__(self, submitted: Any) -> Any:
        if submitted is None:
            return {}
        if not isinstance(submitted, Mapping):
            logger.warning(f"Ignoring non-mapping submission for section {self.section}")
            return submitted

        sanitized = dict(submitted)
        for slug, value in submitted.items():
            callback = self.get_sanitize_callback(slug)
            if callback is None:
                logger.debug(f"No sanitizer for {self.section}[{slug}], storing as submitted")
                continue
            sanitized[slug] = callback(value)
        return sanitized
