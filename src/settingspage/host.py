"""In-process admin host: hooks, menu, assets, options and the settings API.

The builder only talks to the host through this class, so the same builder
code runs against the Flask admin shell in :mod:`settingspage.web` and against
a bare host in tests.
"""

from __future__ import annotations

import itertools
import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from .consts import (
    ADMIN_URL_DEFAULT,
    NONCE_FIELD,
    NONCE_MAX_AGE,
    NONCE_SALT,
    OPTIONS_UPDATE_ENDPOINT,
    TEMPLATE_ADMIN,
    TEMPLATE_HOST,
)
from .enums import SubmitType
from .errors import NonceException
from .i18n import gettext as _
from .options import OptionStore
from .registry import Registry

logger = logging.getLogger(__name__)

# Scripts the host ships; integrators enqueue them by handle only.
BUILTIN_SCRIPTS = {
    "jquery": ("js/jquery/jquery.min.js", ()),
    "jquery-ui-core": ("js/jquery/ui/core.min.js", ("jquery",)),
    "jquery-ui-mouse": ("js/jquery/ui/mouse.min.js", ("jquery-ui-core",)),
    "jquery-ui-draggable": ("js/jquery/ui/draggable.min.js", ("jquery-ui-mouse",)),
    "jquery-ui-slider": ("js/jquery/ui/slider.min.js", ("jquery-ui-mouse",)),
    "jquery-touch-punch": ("js/jquery/jquery.ui.touch-punch.js", ("jquery-ui-mouse",)),
    "media-editor": ("js/media-editor.min.js", ("jquery",)),
}


@dataclass(frozen=True, slots=True)
class MenuPage:
    page_title: str
    menu_title: str
    capability: str
    menu_slug: str
    callback: Callable[..., str]

    @property
    def hookname(self) -> str:
        return f"settings_page_{self.menu_slug}"


@dataclass(frozen=True, slots=True)
class Script:
    handle: str
    src: Optional[str]
    deps: tuple[str, ...] = ()
    ver: str | bool = False
    in_footer: bool = False


class Host:
    """Admin host the settings builder registers against."""

    def __init__(
        self,
        options: OptionStore,
        secret_key: str,
        admin_url: str = ADMIN_URL_DEFAULT,
        capabilities: Iterable[str] = ("manage_options",),
        language: str = "en",
    ):
        self._options = options
        self._admin_url = admin_url.rstrip("/") + "/"
        self._capabilities = set(capabilities)
        self.language = language

        self._actions: dict[str, list[tuple[int, int, Callable[..., Any]]]] = defaultdict(list)
        self._counter = itertools.count()
        self._menu_pages: dict[str, MenuPage] = {}
        self._scripts: dict[str, Script] = {}
        self.media_enqueued = False

        self._serializer = URLSafeTimedSerializer(secret_key, salt=NONCE_SALT)

        template_dir = Path(__file__).parent / "templates"
        self.jinja_env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html.j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.jinja_env.globals["_"] = _
        self._macros = self.jinja_env.get_template(TEMPLATE_HOST).module

    # ==================== Hooks ====================

    def add_action(self, name: str, callback: Callable[..., Any], priority: int = 10) -> None:
        self._actions[name].append((priority, next(self._counter), callback))

    def has_action(self, name: str) -> bool:
        return bool(self._actions.get(name))

    def do_action(self, name: str, *args: Any) -> list[Any]:
        """Run every callback hooked on ``name`` in priority order.

        Returns:
            Non-``None`` callback results, in call order
        """
        results = []
        for _priority, _order, callback in sorted(self._actions.get(name, []), key=lambda a: a[:2]):
            result = callback(*args)
            if result is not None:
                results.append(result)
        return results

    # ==================== Options ====================

    def get_option(self, name: str, default: Any = False) -> Any:
        value = self._options.get(name)
        return default if value is None else value

    def add_option(self, name: str, value: Any = "") -> bool:
        return self._options.add(name, value)

    def update_option(self, name: str, value: Any) -> bool:
        """Store ``value`` for ``name``.

        Returns:
            False when the stored value is already equal to ``value``
        """
        if self._options.get(name) == value:
            return False
        self._options.update(name, value)
        logger.info(f"Option updated: {name}")
        return True

    def all_options(self) -> dict[str, Any]:
        return self._options.all()

    # ==================== Menu ====================

    def add_options_page(
        self,
        page_title: str,
        menu_title: str,
        capability: str,
        menu_slug: str,
        callback: Callable[..., str],
    ) -> str:
        page = MenuPage(page_title, menu_title, capability, menu_slug, callback)
        self._menu_pages[menu_slug] = page
        logger.debug(f"Registered options page: {menu_slug}")
        return page.hookname

    def get_page(self, slug: str) -> Optional[MenuPage]:
        return self._menu_pages.get(slug)

    @property
    def menu_pages(self) -> list[MenuPage]:
        return list(self._menu_pages.values())

    def current_user_can(self, capability: str) -> bool:
        return capability in self._capabilities

    def admin_url(self, path: str = "") -> str:
        return self._admin_url + path.lstrip("/")

    # ==================== Assets ====================

    def enqueue_script(
        self,
        handle: str,
        src: Optional[str] = None,
        deps: Iterable[str] = (),
        ver: str | bool = False,
        in_footer: bool = False,
    ) -> None:
        if handle in self._scripts:
            return
        if src is None and handle in BUILTIN_SCRIPTS:
            builtin_src, builtin_deps = BUILTIN_SCRIPTS[handle]
            src = self.admin_url(builtin_src)
            deps = tuple(deps) or builtin_deps
        self._scripts[handle] = Script(handle, src, tuple(deps), ver, in_footer)

    def enqueue_media(self) -> None:
        self.media_enqueued = True
        self.enqueue_script("media-editor")

    @property
    def enqueued_scripts(self) -> list[Script]:
        return list(self._scripts.values())

    def script_queue(self, in_footer: bool) -> list[Script]:
        """Resolve enqueued scripts and their dependencies in load order."""
        ordered: list[Script] = []
        seen: set[str] = set()

        def visit(handle: str) -> None:
            if handle in seen:
                return
            seen.add(handle)
            script = self._scripts.get(handle)
            if script is None and handle in BUILTIN_SCRIPTS:
                src, deps = BUILTIN_SCRIPTS[handle]
                script = Script(handle, self.admin_url(src), deps)
            if script is None:
                logger.warning(f"Unknown script dependency: {handle}")
                return
            for dep in script.deps:
                visit(dep)
            ordered.append(script)

        for handle in self._scripts:
            visit(handle)

        # Dependencies nobody enqueued explicitly load in the head.
        return [
            s for s in ordered
            if s.src and self._scripts.get(s.handle, s).in_footer == in_footer
        ]

    # ==================== Nonces ====================

    def create_nonce(self, action: str) -> str:
        return self._serializer.dumps(action)

    def verify_nonce(self, token: Optional[str], action: str, max_age: int = NONCE_MAX_AGE) -> None:
        if not token:
            raise NonceException("Missing form token")
        try:
            signed_action = self._serializer.loads(token, max_age=max_age)
        except SignatureExpired as e:
            raise NonceException("The link you followed has expired") from e
        except BadSignature as e:
            raise NonceException("Invalid form token") from e
        if signed_action != action:
            raise NonceException(f"Form token does not match action: {action}")

    # ==================== Settings API ====================

    def settings_fields(self, group: str, referer: str = "") -> Markup:
        return self._macros.settings_fields(
            group=group,
            action="update",
            nonce_field=NONCE_FIELD,
            nonce=self.create_nonce(f"{group}-options"),
            referer=referer,
        )

    def do_settings_sections(
        self,
        page: str,
        registry: Registry,
        render_field: Callable[[Any], Markup],
    ) -> Markup:
        sections = []
        for section in registry.sections_for(page):
            rows = []
            for field in registry.fields_for(page, section.id):
                rows.append(
                    {
                        "title": field.title,
                        "label_for": field.args.label_for,
                        "css_class": "",
                        "control": render_field(field.args),
                    }
                )
            description = Markup(section.callback()) if section.callback else Markup("")
            sections.append({"title": section.title, "description": description, "rows": rows})
        return self._macros.settings_sections(sections=sections)

    def submit_button(
        self,
        text: Optional[str] = None,
        submit_type: str = SubmitType.PRIMARY.value,
        name: str = "submit",
        wrap: bool = True,
        other_attributes: Optional[dict[str, str]] = None,
    ) -> Markup:
        match submit_type:
            case SubmitType.PRIMARY:
                classes = "button button-primary"
            case SubmitType.SECONDARY:
                classes = "button"
            case SubmitType.DELETE:
                classes = "button delete"
            case SubmitType.SMALL:
                classes = "button button-small"
            case _:
                classes = f"button {submit_type}"
        return self._macros.submit_button(
            text=text or _("Save Changes"),
            classes=classes,
            name=name,
            wrap=wrap,
            attributes=other_attributes or {},
        )

    def editor(self, content: Any, editor_id: str, settings: dict[str, Any]) -> Markup:
        """Rich-text editor widget, rendered as a plain editor textarea."""
        return self._macros.editor(
            editor_id=editor_id,
            textarea_name=settings.get("textarea_name", editor_id),
            rows=settings.get("textarea_rows", 20),
            teeny=settings.get("teeny", False),
            content=content or "",
        )

    def options_update_url(self) -> str:
        return self.admin_url(OPTIONS_UPDATE_ENDPOINT)

    # ==================== Admin shell ====================

    def render_admin_page(self, page: MenuPage, body: str, notice: Optional[str] = None) -> str:
        template = self.jinja_env.get_template(TEMPLATE_ADMIN)
        return template.render(
            language=self.language,
            page=page,
            body=Markup(body),
            notice=notice,
            head_scripts=self.script_queue(in_footer=False),
            footer_scripts=self.script_queue(in_footer=True),
        )
