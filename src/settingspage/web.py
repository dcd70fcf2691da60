"""Flask admin shell hosting the settings page and the options endpoint."""

import logging
import os
import re
from typing import Any
from urllib.parse import urlencode, urlsplit, urlunsplit, parse_qsl

from flask import (
    Blueprint,
    Flask,
    abort,
    current_app,
    redirect,
    request,
    send_from_directory,
    url_for,
)
from werkzeug.datastructures import MultiDict

from .builder import SettingsBuilder
from .consts import (
    ACTION_ADMIN_ENQUEUE_SCRIPTS,
    ACTION_ADMIN_INIT,
    ACTION_ADMIN_MENU,
    NONCE_FIELD,
)
from .errors import NonceException, OptionNotRegisteredError
from .host import Host
from .i18n import gettext as _
from .i18n import initialize
from .page import TabState

logger = logging.getLogger(__name__)

bp = Blueprint("settingspage", __name__)

FORM_KEY_RE = re.compile(r"^(?P<root>[^\[\]]+)(?P<path>(\[[^\[\]]*\])*)$")


def create_app(config=None, builder: SettingsBuilder | None = None):
    """Create and configure Flask application.

    Args:
        config: Application configuration (loaded from ``CONFIG_FILE`` when omitted)
        builder: Ready-made builder; its host is used as is

    Returns:
        Configured Flask application
    """
    from .config import Config
    from .db import close_db, create_tables, init_db
    from .options import DBOptionStore

    if builder is None:
        if config is None:
            config_file = os.environ.get("CONFIG_FILE", "config.toml")
            config = Config.load_from_file(config_file)

        init_db(config.database_path)
        create_tables()

        host = Host(
            DBOptionStore(),
            secret_key=config.web.secret_key,
            language=config.language,
        )
        builder = SettingsBuilder.from_config(config, host)

    app = Flask(__name__)
    app.config["builder"] = builder
    app.config["host"] = builder.host
    if config is not None:
        initialize(ui_language=config.language)
        app.config["config"] = config
        app.config["SECRET_KEY"] = config.web.secret_key
        app.config["static_dir"] = config.web.static_dir

    host = app.config["host"]
    host.do_action(ACTION_ADMIN_MENU)
    host.do_action(ACTION_ADMIN_INIT)

    app.register_blueprint(bp)

    @app.teardown_appcontext
    def shutdown_db_session(exception=None):
        """Close database connection after each request."""
        close_db()

    return app


def parse_form(form: MultiDict) -> dict[str, Any]:
    """Nest bracketed form names into dicts.

    ``general[colors][red]=red`` becomes ``{"general": {"colors": {"red": "red"}}}``.
    For repeated names the last value wins.
    """
    parsed: dict[str, Any] = {}
    for key, value in form.items(multi=True):
        match = FORM_KEY_RE.match(key)
        if not match:
            parsed[key] = value
            continue

        parts = [match.group("root")] + re.findall(r"\[([^\[\]]*)\]", match.group("path"))
        target = parsed
        for part in parts[:-1]:
            child = target.get(part)
            if not isinstance(child, dict):
                child = {}
                target[part] = child
            target = child
        target[parts[-1]] = value
    return parsed


def _safe_referer(referer: str | None, fallback: str) -> str:
    if not referer or not referer.startswith("/") or referer.startswith("//"):
        return fallback
    return referer


def _with_query(url: str, **params: str) -> str:
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query))
    query.update(params)
    return urlunsplit(parts._replace(query=urlencode(query)))


@bp.route("/")
def index():
    """Redirect to the first registered settings page."""
    host = current_app.config["host"]
    pages = host.menu_pages
    if not pages:
        abort(404)
    return redirect(url_for(".options_general", page=pages[0].menu_slug))


@bp.route("/wp-admin/options-general.php")
def options_general():
    """Render a registered settings page."""
    host = current_app.config["host"]
    slug = request.args.get("page", "")

    page = host.get_page(slug)
    if page is None:
        abort(404)
    if not host.current_user_can(page.capability):
        abort(403)

    host.do_action(ACTION_ADMIN_ENQUEUE_SCRIPTS, page.hookname)

    body = page.callback(
        tab_state=TabState.from_cookies(request.cookies),
        referer=request.full_path.rstrip("?"),
    )
    notice = _("Settings saved.") if request.args.get("settings-updated") == "true" else None
    return host.render_admin_page(page, body, notice=notice)


@bp.route("/wp-admin/options.php", methods=["POST"])
def options_update():
    """Sanitize and store one section's submitted option record."""
    builder = current_app.config["builder"]
    host = current_app.config["host"]

    option_page = request.form.get("option_page", "")
    if request.form.get("action") != "update" or not option_page:
        abort(400)

    try:
        host.verify_nonce(request.form.get(NONCE_FIELD), f"{option_page}-options")
    except NonceException as e:
        logger.warning(f"Rejected options update for {option_page}: {e}")
        abort(403)

    registry = builder.registry
    setting = registry.setting_for(option_page) if registry else None
    if setting is None or not registry.is_allowed_option(option_page, option_page):
        raise OptionNotRegisteredError(f"Options page {option_page} not found in the allowed options list")

    submitted = parse_form(request.form).get(setting.option_name, {})
    value = setting.sanitize_callback(submitted)
    host.update_option(setting.option_name, value)
    logger.info(f"Settings saved for section: {option_page}")

    fallback = url_for(".options_general", page=builder.slug)
    referer = _safe_referer(request.form.get("_wp_http_referer"), fallback)
    return redirect(_with_query(referer, **{"settings-updated": "true"}))


@bp.route("/wp-admin/js/<path:filename>")
def admin_js(filename):
    """Serve host scripts from the configured static directory."""
    static_dir = current_app.config.get("static_dir")
    if not static_dir:
        abort(404)
    return send_from_directory(os.path.join(static_dir, "js"), filename)


@bp.app_errorhandler(OptionNotRegisteredError)
def option_not_registered(e):
    logger.warning(str(e))
    return str(e), 404
