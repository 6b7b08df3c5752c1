"""
Parser-specific data models

Type-safe structures for parser operations and return values.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Union

from .directives import Directive


@dataclass
class DirectiveMatch:
    """
    Result of finding an ERB output tag in body text

    Returned by DirectiveParser.directive_find() when a <%= ... %> tag is
    located outside protected fenced code.

    Attributes:
        helper: Helper name at the start of the tag (e.g., "partial", "image_tag")
        arguments: Raw argument text following the helper name
        start: Character position where the tag opens
        end: Character position just past the closing %>
        line_number: Source line where the tag opens

    Example:
        For body "x <%= partial 'banner' %>":
        DirectiveMatch(helper="partial", arguments="'banner'", start=2, end=25, line_number=1)
    """
    helper: str
    arguments: str
    start: int
    end: int
    line_number: int


@dataclass
class ProtectedBody:
    """
    Result of protecting fenced code blocks in body text

    Returned by DirectiveParser.codefences_protect().

    Attributes:
        text: Body with every fenced block replaced by a placeholder
              (e.g., "Intro\n\x00FENCE_0\x00Outro")
        fences: Verbatim fenced blocks, indexed to match placeholders
                (FENCE_0 → fences[0]), including the fence lines themselves
    """
    text: str
    fences: Dict[int, str] = field(default_factory=dict)


@dataclass
class ParsedArguments:
    """
    Result of tokenizing a directive's argument list

    Attributes:
        positional: Positional values in order (e.g., ["foo.png"])
        keywords: Keyword values in source order (e.g., {"alt": "Foo"})

    Example:
        Input: "'foo.png', alt: 'Foo', :class => 'wide'"
        Result: ParsedArguments(positional=["foo.png"], keywords={"alt": "Foo", "class": "wide"})
    """
    positional: List[str] = field(default_factory=list)
    keywords: Dict[str, str] = field(default_factory=dict)


# A body segment is literal text or a directive to expand
Segment = Union[str, Directive]


@dataclass
class ScannedBody:
    """
    Body split into literal text and directives

    Attributes:
        segments: Literal strings and Directive objects in source order
        fences: Protected fenced blocks still referenced by placeholders in
                the literal segments
    """
    segments: List[Segment]
    fences: Dict[int, str] = field(default_factory=dict)

    def directives(self) -> List[Directive]:
        return [s for s in self.segments if not isinstance(s, str)]


@dataclass
class FrontMatter:
    """
    Result of splitting a front-matter block from raw document text

    Attributes:
        metadata: Header mapping of key to string value
        body: Text after the closing delimiter line, verbatim
        present: Whether a front-matter block was found
        body_line: Source line number where the body starts
    """
    metadata: Dict[str, str]
    body: str
    present: bool = False
    body_line: int = 1
