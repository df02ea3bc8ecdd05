"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    StorageSchema      → storage.yaml
    LoggingSchema      → logging.yaml
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class EditorSchema(_StrictBase):
    untitled_title: str
    preview_placeholder: str
    empty_list_message: str


class DefaultsSchema(_StrictBase):
    theme: Literal["light", "dark"]
    view: Literal["grid", "list"]
    filter: Literal["all", "pinned", "archived"]


class MarkdownSchema(_StrictBase):
    extensions: list[str]
    hard_line_breaks: bool
    escape_raw_html: bool


class ExportSchema(_StrictBase):
    filename: str
    indent: int = Field(ge=0)


class NoticesSchema(_StrictBase):
    timeout_seconds: float = Field(gt=0)


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    editor: EditorSchema
    defaults: DefaultsSchema
    markdown: MarkdownSchema
    export: ExportSchema
    notices: NoticesSchema


# =============================================================================
# storage.yaml
# =============================================================================


class StorageSchema(_StrictBase):
    backend: Literal["file", "memory"]
    directory: str
    notes_key: str
    theme_key: str
    sync_poll_seconds: float = Field(gt=0)


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: Literal["json", "console"]
    handlers: HandlersSchema
