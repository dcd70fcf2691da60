"""Constants for the settings page builder"""

# ==================== File Paths ====================
DATA_DIR_DEFAULT = "data"
DATABASE_PATH = "data/settingspage.db"
LOG_FILENAME = "settingspage.log"
LOG_FILE = f"{DATA_DIR_DEFAULT}/{LOG_FILENAME}"

# ==================== Host Endpoints ====================
ADMIN_URL_DEFAULT = "/wp-admin/"
OPTIONS_UPDATE_ENDPOINT = "options.php"

# ==================== Lifecycle Events ====================
ACTION_ADMIN_ENQUEUE_SCRIPTS = "admin_enqueue_scripts"
ACTION_ADMIN_INIT = "admin_init"
ACTION_ADMIN_MENU = "admin_menu"
ACTION_FORM_TOP = "settingspage_form_top_"
ACTION_FORM_BOTTOM = "settingspage_form_bottom_"

# ==================== Field Defaults ====================
FIELD_DEFAULTS = {
    "id": "",
    "name": "",
    "desc": "",
    "type": "text",
}
FIELD_NAME_FALLBACK = "No Name Added"
FIELD_SIZE_DEFAULT = "regular"
WYSIWYG_SIZE_DEFAULT = "500px"
WYSIWYG_TEXTAREA_ROWS = 10

# ==================== Form Defaults ====================
FORM_DEFAULTS = {
    "label_submit": None,
    "submit_type": "primary",
    "wrap": True,
    "attributes": None,
}

# ==================== Client-side State ====================
ACTIVE_TAB_KEY = "activetab"

# ==================== Nonces ====================
NONCE_FIELD = "_wpnonce"
NONCE_MAX_AGE = 24 * 60 * 60  # 1 day
NONCE_SALT = "settingspage-options"

# ==================== Template Names ====================
TEMPLATE_FIELDS = "fields.html.j2"
TEMPLATE_PAGE = "page.html.j2"
TEMPLATE_ADMIN = "admin.html.j2"
TEMPLATE_HOST = "host.html.j2"

# ==================== Database Configuration ====================
DB_MAX_CONNECTIONS = 8
DB_STALE_TIMEOUT = 300  # 5 minutes
DB_PRAGMAS = {
    "journal_mode": "wal",
    "synchronous": "NORMAL",
    "busy_timeout": 5000,
    "foreign_keys": 1,
}

# ==================== Sanitizer Allowlists ====================
URL_PROTOCOLS = (
    "http",
    "https",
    "ftp",
    "ftps",
    "mailto",
    "news",
    "irc",
    "gopher",
    "nntp",
    "feed",
    "telnet",
    "mms",
    "rtsp",
    "sms",
    "svn",
    "tel",
    "fax",
    "xmpp",
    "webcal",
    "urn",
)

POST_ALLOWED_TAGS = {
    "a": {"href", "title", "rel", "target", "name"},
    "abbr": {"title"},
    "b": set(),
    "blockquote": {"cite"},
    "br": set(),
    "caption": set(),
    "cite": set(),
    "code": set(),
    "del": {"datetime"},
    "div": {"class", "style"},
    "em": set(),
    "h1": set(),
    "h2": set(),
    "h3": set(),
    "h4": set(),
    "h5": set(),
    "h6": set(),
    "hr": set(),
    "i": set(),
    "img": {"src", "alt", "title", "width", "height", "class"},
    "ins": {"datetime"},
    "li": set(),
    "ol": set(),
    "p": {"class", "style"},
    "pre": set(),
    "q": {"cite"},
    "s": set(),
    "span": {"class", "style"},
    "strong": set(),
    "sub": set(),
    "sup": set(),
    "table": {"class"},
    "tbody": set(),
    "td": {"colspan", "rowspan"},
    "th": {"colspan", "rowspan", "scope"},
    "thead": set(),
    "tr": set(),
    "u": set(),
    "ul": set(),
}

# Elements dropped together with their content.
POST_STRIPPED_ELEMENTS = ("script", "style", "iframe", "object", "embed", "noscript")
