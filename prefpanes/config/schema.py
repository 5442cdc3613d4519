"""Configuration schema for prefpanes."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaneDescriptor(BaseModel):
    """Registration-time description of one preference pane.

    On disk (pane manifests) keys are camelCase: ``rawLabel``,
    ``strictMarkup``, ``helpURL``, ``pluginID``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    id: str = Field(min_length=1)
    parent: str | None = None
    label: str | None = None
    raw_label: str | None = None
    image: str | None = None
    src: str = ""
    scripts: tuple[str, ...] = ()
    stylesheets: tuple[str, ...] = ()
    strict_markup: bool = True
    help_url: str | None = Field(default=None, alias="helpURL")
    plugin_id: str | None = Field(default=None, alias="pluginID")

    @model_validator(mode="before")
    @classmethod
    def _legacy_default_xul(cls, data: object) -> object:
        # Older manifests say ``defaultXUL: true`` for the permissive dialect
        if isinstance(data, dict) and "defaultXUL" in data and "strictMarkup" not in data:
            data = dict(data)
            data["strictMarkup"] = not bool(data.pop("defaultXUL"))
        return data

    @model_validator(mode="after")
    def _needs_label(self) -> "PaneDescriptor":
        if not self.parent and not (self.label or self.raw_label):
            raise ValueError(f"pane {self.id!r} needs a label or rawLabel unless it has a parent")
        return self


class PaneManifest(BaseModel):
    """Built-in and plugin panes, in registration order."""

    model_config = ConfigDict(extra="ignore")

    builtin: list[PaneDescriptor] = Field(default_factory=list)
    plugins: list[PaneDescriptor] = Field(default_factory=list)


class PathsConfig(BaseModel):
    """Where preferences, panes and strings live."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    store: str = "~/.prefpanes/prefs.json"
    manifest: str = "~/.prefpanes/panes.json"
    fragments: str = ""
    strings: list[str] = Field(default_factory=list)


class WindowConfig(BaseModel):
    """Preferences window behaviour and geometry."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    default_pane: str = "general"
    cite_pane: str = "cite"
    last_selected_key: str = "prefpanes.lastSelectedPrefPane"
    width: int = 980
    height: int = 680
    highlight_background: str = "#ffe900"
    highlight_background_dark: str = "#003eaa"


class LoggingConfig(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    level: str = "INFO"
    file: str = ""


class AppConfig(BaseSettings):
    """Root configuration for prefpanes."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    window: WindowConfig = Field(default_factory=WindowConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def store_path(self) -> Path:
        return Path(self.paths.store).expanduser()

    @property
    def manifest_path(self) -> Path:
        return Path(self.paths.manifest).expanduser()

    @property
    def fragments_dir(self) -> Path:
        """Base directory for relative pane URIs (defaults to the manifest's)."""
        if self.paths.fragments:
            return Path(self.paths.fragments).expanduser()
        return self.manifest_path.parent

    @property
    def string_paths(self) -> list[Path]:
        return [Path(p).expanduser() for p in self.paths.strings]

    model_config = SettingsConfigDict(
        env_prefix="PREFPANES_",
        env_nested_delimiter="__",
        extra="ignore",
    )
