"""
Notekeep.

- core/: Configuration, logging, exceptions, shared utilities
- schemas/: Pydantic models for note records and UI enums
- repositories/: Key-value stores, note store adapter, note repository
- services/: Markdown renderer, application state, view controller
- views/: Declarative view models for the note list and preview
- tui/: Textual terminal interface
"""

__version__ = "0.1.0"
