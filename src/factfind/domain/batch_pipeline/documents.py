"""Input documents for batch runs."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path


@runtime_checkable
class Document(Protocol):
    """A named piece of transcript text, read lazily."""

    @property
    def name(self) -> str: ...

    async def read_text(self) -> str: ...


@dataclass(frozen=True, slots=True)
class TextDocument:
    name: str
    text: str

    async def read_text(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class FileDocument:
    path: Path
    encoding: str = "utf-8"

    @property
    def name(self) -> str:
        return self.path.name

    async def read_text(self) -> str:
        return await asyncio.to_thread(self.path.read_text, encoding=self.encoding)
