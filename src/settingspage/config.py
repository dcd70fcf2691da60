"""Configuration file loading and validation."""

import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from .consts import DATA_DIR_DEFAULT, DATABASE_PATH
from .errors import ConfigException
from .schema import FieldSpec, Section

logger = logging.getLogger(__name__)


class PageConfig(BaseModel):
    """Admin page placement."""

    page_title: str = Field(default="Settings")
    menu_title: str = Field(default="Settings")
    capability: str = Field(default="manage_options")
    slug: str = Field(default="settingspage", min_length=1)


class WebConfig(BaseModel):
    """Web service configuration."""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=5000, ge=1, le=65535)
    debug: bool = Field(default=False)
    secret_key: str = Field(default="change-me", min_length=1)
    static_dir: str | None = None


class Config(BaseSettings):
    """Application configuration."""

    language: str = Field(default="en")
    data_dir: str = Field(default=DATA_DIR_DEFAULT)
    database_path: str = Field(default=DATABASE_PATH)

    page: PageConfig = Field(default_factory=PageConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    sections: list[Section] = Field(default_factory=list)
    fields: dict[str, list[FieldSpec]] = Field(default_factory=dict)

    model_config = SettingsConfigDict(
        env_prefix="SETTINGSPAGE_",
        env_nested_delimiter="__",
    )

    @model_validator(mode="after")
    def validate_schema(self) -> "Config":
        section_ids = [section.id for section in self.sections]
        duplicates = {sid for sid in section_ids if section_ids.count(sid) > 1}
        if duplicates:
            raise ValueError(f"Duplicate section ids: {', '.join(sorted(duplicates))}")

        for section_id, specs in self.fields.items():
            if section_id not in section_ids:
                raise ValueError(f"Fields declared for unknown section: {section_id}")
            field_ids = [spec.id for spec in specs]
            if any(not fid for fid in field_ids):
                raise ValueError(f"Every field in section '{section_id}' needs an id")
            dup_fields = {fid for fid in field_ids if field_ids.count(fid) > 1}
            if dup_fields:
                raise ValueError(
                    f"Duplicate field ids in section '{section_id}': {', '.join(sorted(dup_fields))}"
                )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    @classmethod
    def load_from_file(cls, config_path: str) -> "Config":
        """Load configuration from specified path."""
        path = Path(config_path)
        if not path.exists():
            raise ConfigException(f"Configuration file not found: {config_path}")

        class _Config(cls):
            model_config = SettingsConfigDict(
                toml_file=str(path),
                env_prefix="SETTINGSPAGE_",
                env_nested_delimiter="__",
            )

        try:
            return _Config()
        except ValidationError as e:
            error_lines = ["Configuration validation failed:"]
            for error in e.errors():
                loc = " -> ".join(str(item) for item in error["loc"])
                error_lines.append(f"  - {loc}: {error['msg']}" if loc else f"  - {error['msg']}")
            raise ConfigException("\n".join(error_lines)) from e
        except ValueError as e:
            raise ConfigException(f"Invalid TOML syntax: {e}") from e
