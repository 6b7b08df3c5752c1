"""
Renderer for post bodies

Expands directives in a parsed document and returns text ready for
markdown-to-HTML conversion.
"""

from collections.abc import Mapping
from typing import Iterable, List, Optional, Tuple, Union

from ..config import appsettings
from ..models.directives import ImageTag, Partial
from ..models.document import RenderedDocument, RenderResult
from .errors import MissingPartialError, PartialCycleError, RenderError
from .frontmatter import document_parse
from .helpers import AssetResolver, AssetRewrite, imageTag_build
from .log import LOG
from .parser import DirectiveParser
from .partials import PartialCollection


class Renderer:
    """
    Renders documents with partial and image_tag directives expanded

    Responsibilities:
    - Split front matter from the body
    - Expand partials (recursively rendered, cycle-checked)
    - Expand image tags through the asset rewrite rule
    - Pass fenced code through verbatim
    - Render batches with per-document failure isolation

    A Renderer holds only read-only collaborators, so one instance can
    render any number of documents.
    """

    def __init__(
        self,
        partials: Optional[Mapping] = None,
        asset_rewrite: Optional[AssetRewrite] = None,
        strict: Optional[bool] = None,
        max_include_depth: Optional[int] = None,
    ) -> None:
        """
        Initialize renderer

        Args:
            partials: Partial name → source text (a PartialCollection or any mapping)
            asset_rewrite: Image path rewrite rule (defaults to AssetResolver())
            strict: Raise on unsupported directives (defaults to appsettings.strict_mode)
            max_include_depth: Partial nesting limit (defaults to appsettings.max_include_depth)
        """
        if isinstance(partials, PartialCollection):
            self.partials = partials
        else:
            self.partials = PartialCollection(partials or {})
        self.asset_rewrite: AssetRewrite = asset_rewrite or AssetResolver()
        self.strict = appsettings.strict_mode if strict is None else strict
        self.max_include_depth = (
            appsettings.max_include_depth if max_include_depth is None else max_include_depth
        )

    def document_render(self, text: str, source_name: str = "<string>") -> RenderedDocument:
        """
        Parse and render one document

        Args:
            text: Raw file contents, front matter included
            source_name: Name used in error messages

        Returns:
            RenderedDocument with metadata and the rendered body

        Raises:
            RenderError: Any parse or expansion failure in this document
        """
        LOG(f"Rendering {source_name}", level=2)
        document = document_parse(text, source_name)
        rendered = self.body_render(document.body, source_name, document.body_line)
        return RenderedDocument(document=document, text=rendered)

    def body_render(
        self,
        body: str,
        source_name: str = "<string>",
        first_line: int = 1,
        include_chain: Tuple[str, ...] = (),
    ) -> str:
        """
        Expand every directive in a body

        Literal text is restored (escapes and fenced blocks put back) segment
        by segment; directive output is never rescanned.

        Args:
            body: Body text without front matter
            source_name: Name used in error messages
            first_line: Source line of the first body line
            include_chain: Partials currently being rendered (outermost first)

        Returns:
            Rendered text
        """
        parser = DirectiveParser(body, source_name, first_line, strict=self.strict)
        scanned = parser.scan()

        parts: List[str] = []
        for segment in scanned.segments:
            if isinstance(segment, str):
                parts.append(parser.segment_restore(segment))
            elif isinstance(segment, Partial):
                parts.append(self.partial_render(segment, source_name, include_chain))
            elif isinstance(segment, ImageTag):
                parts.append(imageTag_build(segment, self.asset_rewrite))
                LOG(f"image_tag {segment.path} at line {segment.line_number}", level=3)

        return ''.join(parts)

    def partial_render(
        self,
        directive: Partial,
        source_name: str,
        include_chain: Tuple[str, ...] = (),
    ) -> str:
        """
        Render the partial a directive names

        Raises:
            MissingPartialError: The collection has no such partial
            PartialCycleError: The partial is already being rendered
            RenderError: Include nesting exceeds max_include_depth
        """
        key = self.partials.resolve(directive.name)
        if key is None:
            raise MissingPartialError(directive.name, source_name, directive.line_number)

        if key in include_chain:
            raise PartialCycleError(
                [*include_chain, key], source_name, directive.line_number
            )

        if len(include_chain) >= self.max_include_depth:
            raise RenderError(
                f"Partials nested deeper than {self.max_include_depth} levels",
                source_name,
                directive.line_number,
            )

        LOG(f"Including partial '{key}' at line {directive.line_number}", level=2)
        return self.body_render(
            self.partials[key],
            source_name=f"{source_name} > {key}",
            first_line=1,
            include_chain=(*include_chain, key),
        )

    def documents_render(
        self, sources: Union[Mapping, Iterable[Tuple[str, str]]]
    ) -> List[RenderResult]:
        """
        Render a batch of independent documents

        A RenderError in one document is recorded in its RenderResult and
        does not stop the others.

        Args:
            sources: Mapping or iterable of (source_name, raw text)

        Returns:
            One RenderResult per source, in input order
        """
        items = sources.items() if isinstance(sources, Mapping) else sources
        results: List[RenderResult] = []

        for source_name, text in items:
            try:
                rendered = self.document_render(text, source_name)
            except RenderError as e:
                LOG(f"Failed to render {source_name}: {e}", level=1)
                results.append(RenderResult(source_name=source_name, error=e))
                continue
            results.append(RenderResult(source_name=source_name, rendered=rendered))

        failed = sum(1 for r in results if not r.ok)
        LOG(f"Rendered {len(results) - failed}/{len(results)} documents", level=2)
        return results
