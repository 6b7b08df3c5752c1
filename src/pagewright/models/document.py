"""
Document and render result models

A Document is created once per source file and never mutated. Rendering
produces a RenderedDocument; batch rendering wraps each outcome (success or
failure) in a RenderResult so one bad post does not hide the others.
"""

from datetime import date
from dataclasses import dataclass, field
from typing import Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..lib.errors import RenderError


@dataclass(frozen=True)
class Document:
    """
    A parsed source document

    Attributes:
        title: Post title from front matter ("" if absent)
        date: Publication date from front matter (None if absent)
        body: Text following the front-matter block, unrendered
        metadata: Full front-matter mapping (includes title and date as written)
        source_name: Name the document was loaded from (for error reporting)
        body_line: Source line number of the first body line
    """
    title: str
    date: Optional[date]
    body: str
    metadata: Dict[str, str] = field(default_factory=dict)
    source_name: str = "<string>"
    body_line: int = 1


@dataclass(frozen=True)
class RenderedDocument:
    """
    A document with all directives expanded

    Attributes:
        document: The parsed source document
        text: Rendered body, ready for markdown-to-HTML conversion
    """
    document: Document
    text: str

    @property
    def title(self) -> str:
        return self.document.title

    @property
    def date(self) -> Optional[date]:
        return self.document.date


@dataclass
class RenderResult:
    """
    Outcome of rendering one document in a batch

    Exactly one of rendered / error is set.
    """
    source_name: str
    rendered: Optional[RenderedDocument] = None
    error: Optional["RenderError"] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.rendered is not None
