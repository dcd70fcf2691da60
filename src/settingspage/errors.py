"""Exception definitions for the settings page builder"""


class SettingsPageException(Exception):
    """Base exception for all settings page errors.

    All custom exceptions raised by the builder, the host adapter and the web
    layer inherit from this class.
    """

    pass


class ConfigException(SettingsPageException):
    """Raised when configuration validation or loading fails.

    Use this exception when:
    - The configuration file cannot be found
    - The TOML syntax is invalid
    - Configuration validation fails (missing required fields, invalid values)
    """

    pass


class SchemaException(SettingsPageException):
    """Raised when a section or field definition cannot be registered."""

    pass


class UnknownFieldTypeError(SettingsPageException):
    """Raised when a field is rendered with a type that has no renderer.

    This surfaces as a rendering failure to the operator; it is never caught
    by the page renderer.
    """

    pass


class OptionNotRegisteredError(SettingsPageException):
    """Raised when a form is posted for an option page with no registered setting."""

    pass


class NonceException(SettingsPageException):
    """Raised when a submitted form token is missing, expired or forged."""

    pass
