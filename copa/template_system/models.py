"""Template system data models"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class PlaceholderType(Enum):
    """What a placeholder expands into"""

    FILE = "file"
    DIRECTORY = "dir"
    EVAL = "eval"
    WEB = "web"


@dataclass(frozen=True)
class PlaceholderOptions:
    """Normalised placeholder options.

    ``DIRECTORY`` and ``EVAL`` placeholders never carry ``clean`` or
    ``remove_imports``.
    """

    type: PlaceholderType = PlaceholderType.FILE
    clean: bool = False
    remove_imports: bool = False
    ignore_patterns: tuple[str, ...] = ()
    include_patterns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.type in (PlaceholderType.DIRECTORY, PlaceholderType.EVAL) and (
            self.clean or self.remove_imports
        ):
            raise ValueError(f"{self.type.value} placeholders take no content modifiers")


@dataclass(frozen=True)
class TextNode:
    """Literal template text"""

    content: str


@dataclass(frozen=True)
class PlaceholderNode:
    """A ``{{@...}}`` directive"""

    original: str
    resource: str
    options: PlaceholderOptions = field(default_factory=PlaceholderOptions)


@dataclass(frozen=True)
class FenceNode:
    """A ``{{{ ... }}}`` region rendered inside a Markdown code fence"""

    children: tuple["TemplateNode", ...]


TemplateNode = TextNode | PlaceholderNode | FenceNode


@dataclass(frozen=True)
class ResolvedFile:
    """A selected file with its decoded content"""

    relative_path: str
    absolute_path: Path
    content: str


class ProcessResult(BaseModel):
    """Expanded template with diagnostics"""

    content: str
    warnings: list[str] = Field(default_factory=list)
    included_files: dict[str, int] = Field(default_factory=dict)
    total_tokens: int = 0
