"""Formatter lifecycle contract shared by every renderer.

A formatter is opened once, receives zero or more GeoEvents and is closed
again. Subclasses override the ``on_open`` / ``on_entry`` / ``on_close``
hooks; ``open`` / ``process_entry`` / ``close`` handle the state bookkeeping.

Formatters are context managers so the trailer is written on every exit path:

    with formatter:
        for event in events:
            formatter.process_entry(event)
"""
from __future__ import annotations

import sys
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, TextIO

from geotrail.exceptions import FormatterStateError

if TYPE_CHECKING:
    from geotrail.config.settings import Settings
    from geotrail.services.logparser.schemas import GeoEvent


logger = logging.getLogger(__name__)


class Formatter(ABC):
    """Base class for GeoEvent renderers."""

    #: Registry key, also used in log messages
    name: str = "formatter"
    #: Output is a complete document that nothing else may be interleaved with
    standalone_document: bool = False

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.is_open: bool = False
        self.entries: int = 0

    @classmethod
    def from_settings(cls, settings: "Settings", stream: TextIO | None = None) -> Formatter:
        """Build the formatter from application settings."""
        return cls(stream=stream)

    def __enter__(self) -> Formatter:
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def open(self) -> None:
        """Enter the Open state and emit any header."""
        if self.is_open:
            raise FormatterStateError(f"{self.name} formatter is already open")
        self.entries = 0
        self.on_open()
        self.is_open = True
        logger.debug("Opened %s formatter", self.name)

    def process_entry(self, event: "GeoEvent") -> None:
        """Render one event, or fold it into the formatter's state."""
        if not self.is_open:
            raise FormatterStateError(f"{self.name} formatter is not open")
        self.on_entry(event)
        self.entries += 1

    def close(self) -> None:
        """Emit any trailer and return to the Closed state. No-op when closed."""
        if not self.is_open:
            return
        try:
            self.on_close()
        finally:
            self.is_open = False
            logger.debug("Closed %s formatter after %d entries", self.name, self.entries)

    def write(self, text: str) -> None:
        self.stream.write(text)

    def on_open(self) -> None:
        pass

    @abstractmethod
    def on_entry(self, event: "GeoEvent") -> None: ...

    def on_close(self) -> None:
        pass
