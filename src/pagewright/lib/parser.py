"""
Parser for ERB-style directives in post bodies

Splits a post body into literal text and directives.

The parser operates in three phases:
1. Protection: Replace fenced code blocks and <%% escapes with placeholders
2. Scanning: Locate <%= helper args %> tags in the remaining text
3. Classification: Turn each tag into a Partial or ImageTag directive

Key features:
- Fenced code (``` ... ```) is never scanned, so example directives shown
  inside code listings survive verbatim
- Ruby-flavoured argument lists ('x', alt: 'Foo', :class => "wide")
- The abstract form (partial name, image path alt=Foo) inside the same tag
- Line number tracking for error reporting

Example:
    >>> parser = DirectiveParser("Intro\\n<%= partial 'banner' %>\\n")
    >>> scanned = parser.scan()
    >>> scanned.directives()[0].name
    'banner'
"""

import re
from typing import Dict, List, Optional

from ..config import appsettings
from ..models.directives import Directive, DirectiveKind, ImageTag, Partial, kind_lookup
from ..models.parser import DirectiveMatch, ParsedArguments, ProtectedBody, ScannedBody, Segment
from .errors import DirectiveSyntaxError, MissingAttributeError, UnsupportedDirectiveError
from .log import LOG, WARN

FENCE_OPEN = re.compile(r'^[ \t]*(`{3,})')
FENCE_CLOSE = re.compile(r'^[ \t]*(`{3,})[ \t]*$')
ERB_TAG = re.compile(r'<%=((?:(?!<%).)*?)(-?)%>', re.DOTALL)
ESCAPE_PLACEHOLDER = re.compile(r'\x00ESCAPE_(\d+)\x00')
HELPER_NAME = re.compile(r'([A-Za-z_][\w.]*[?!]?)(.*)$', re.DOTALL)

ARGUMENT_TOKEN = re.compile(
    r"""
    (?P<kwarg>[A-Za-z_][\w-]*):(?=[\s'"]|$)        # alt: 'Foo'
    | :(?P<symkey>[A-Za-z_][\w-]*)\s*=>             # :alt => 'Foo'
    | (?P<strkey>"[^"]*"|'[^']*')\s*=>              # "alt" => 'Foo'
    | (?P<eqkey>[A-Za-z_][\w-]*)=(?!>)              # alt=Foo
    | (?P<dq>"(?:[^"\\]|\\.)*")                     # "double quoted"
    | (?P<sq>'(?:[^'\\]|\\.)*')                     # 'single quoted'
    | :(?P<sym>[A-Za-z_]\w*[?!]?)                   # :symbol
    | (?P<bare>[^\s,'"=(){}\[\]]+)                  # bare word or number
    """,
    re.VERBOSE,
)

_DQ_ESCAPES = {'n': '\n', 't': '\t', '"': '"', '\\': '\\'}


def string_unescape(literal: str) -> str:
    """Unquote a Ruby string literal, handling the common backslash escapes"""
    quote, body = literal[0], literal[1:-1]
    if quote == "'":
        return re.sub(r"\\([\\'])", r'\1', body)
    return re.sub(r'\\(.)', lambda m: _DQ_ESCAPES.get(m.group(1), m.group(1)), body)


class DirectiveParser:
    r"""
    Parser for <%= helper args %> directives in a post body

    Handles:
    - Fenced code protection (verbatim pass-through)
    - <%% escapes (literal <% in output)
    - partial / image_tag classification
    - Error reporting with line numbers
    """

    def __init__(
        self,
        source: str,
        source_name: str = "<string>",
        first_line: int = 1,
        strict: Optional[bool] = None,
    ):
        """
        Initialize parser with body text

        Args:
            source: Body text (front matter already removed)
            source_name: Document name used in error messages
            first_line: Source line number of the first body line
            strict: Raise on unsupported directives (defaults to appsettings.strict_mode)

        Attributes:
            source: Body text being scanned (placeholders substituted after protection)
            fences: Dict mapping placeholder IDs to verbatim fenced blocks
            escaped_sequences: Dict mapping placeholder IDs to escaped literals
        """
        self.source = source
        self.source_name = source_name
        self.first_line = first_line
        self.strict = appsettings.strict_mode if strict is None else strict
        self.fences: Dict[int, str] = {}
        self.escaped_sequences: Dict[int, str] = {}

    def codefences_protect(self, source: str) -> ProtectedBody:
        """
        Replace fenced code blocks with placeholders

        A fence opens on a line starting (after optional indent) with three or
        more backticks and closes on a line holding only at least as many
        backticks. An unclosed fence runs to the end of the text.

        Returns:
            ProtectedBody with placeholder text and the verbatim blocks

        Example:
            Input: "Text\n```\n<%= partial 'x' %>\n```\nMore"
            Output text: "Text\n\x00FENCE_0\x00More"
            Stores: fences[0] = "```\n<%= partial 'x' %>\n```\n"
        """
        lines = source.splitlines(keepends=True)
        result: List[str] = []
        fences: Dict[int, str] = {}
        i = 0

        while i < len(lines):
            opening = FENCE_OPEN.match(lines[i])
            if not opening:
                result.append(lines[i])
                i += 1
                continue

            ticks = len(opening.group(1))
            j = i + 1
            while j < len(lines):
                closing = FENCE_CLOSE.match(lines[j].rstrip('\r\n'))
                if closing and len(closing.group(1)) >= ticks:
                    break
                j += 1

            if j >= len(lines):
                LOG(f"{self.source_name}: unclosed code fence at body line {i + 1}", level=2)

            fence_id = len(fences)
            fences[fence_id] = ''.join(lines[i:j + 1])
            result.append(appsettings.placeHolder_make(fence_id))
            i = j + 1

        LOG(f"{self.source_name}: protected {len(fences)} fenced blocks", level=3)
        return ProtectedBody(text=''.join(result), fences=fences)

    def escapes_protect(self, source: str) -> str:
        """
        Replace <%% escapes with placeholders

        ERB writes <%% to mean a literal <%. Protecting it keeps the escaped
        tag from being scanned as a directive.

        Example:
            Input: "Write <%%= partial 'x' %> to include"
            Output: "Write \x00ESCAPE_0\x00= partial 'x' %> to include"
            Stores: escaped_sequences[0] = "<%"
        """
        result = []
        pos = 0
        while True:
            found = source.find('<%%', pos)
            if found == -1:
                result.append(source[pos:])
                break
            escape_id = len(self.escaped_sequences)
            self.escaped_sequences[escape_id] = '<%'
            result.append(source[pos:found])
            result.append(f'\x00ESCAPE_{escape_id}\x00')
            pos = found + 3
        return ''.join(result)

    def escapes_expand(self, content: str) -> str:
        """Expand escape placeholders back to their literal text"""

        def expand_escape_placeholder(match: re.Match[str]) -> str:
            escape_id = int(match.group(1))
            return self.escaped_sequences.get(escape_id, match.group(0))

        return ESCAPE_PLACEHOLDER.sub(expand_escape_placeholder, content)

    def line_at(self, position: int) -> int:
        """
        Source line number of a position in the protected text

        Newlines hidden inside fence placeholders are counted back in.
        """
        prefix = self.source[:position]
        newlines = prefix.count('\n')
        for fence_id, block in self.fences.items():
            if appsettings.placeHolder_make(fence_id) in prefix:
                newlines += block.count('\n')
        return self.first_line + newlines

    def directive_find(self, position: int) -> Optional[DirectiveMatch]:
        """
        Find the next <%= ... %> tag at or after a position

        Returns:
            DirectiveMatch with helper name and raw arguments, or None if no
            more tags. Tags whose content does not start with a helper name
            (e.g., <%= @title %>) get an empty helper name. A tag closed
            with -%> also consumes the newline right after it.
        """
        match = ERB_TAG.search(self.source, position)
        if not match:
            return None

        end = match.end()
        if match.group(2) == '-':
            for newline in ('\r\n', '\n'):
                if self.source.startswith(newline, end):
                    end += len(newline)
                    break

        inside = match.group(1).strip()
        name_match = HELPER_NAME.match(inside)
        if name_match:
            helper, arguments = name_match.group(1), name_match.group(2).strip()
        else:
            helper, arguments = '', inside

        return DirectiveMatch(
            helper=helper,
            arguments=arguments,
            start=match.start(),
            end=end,
            line_number=self.line_at(match.start()),
        )

    def arguments_parse(self, arguments: str, line_number: int) -> ParsedArguments:
        """
        Tokenize a directive argument list

        Accepts comma- or whitespace-separated values, keyword pairs in
        Ruby 1.9 (alt: 'x'), hash-rocket (:alt => 'x') or abstract (alt=x)
        form, and an optional pair of enclosing parentheses.

        Raises:
            DirectiveSyntaxError: Unrecognised text or a key with no value

        Example:
            Input: "'foo.png', alt: 'Foo', :class => 'wide'"
            Output: ParsedArguments(positional=['foo.png'],
                                    keywords={'alt': 'Foo', 'class': 'wide'})
        """
        text = arguments.strip()
        if text.startswith('(') and text.endswith(')'):
            text = text[1:-1].strip()

        parsed = ParsedArguments()
        pos = 0
        pending_key: Optional[str] = None

        while True:
            while pos < len(text) and (text[pos].isspace() or (text[pos] == ',' and pending_key is None)):
                pos += 1
            if pos >= len(text):
                break

            token = ARGUMENT_TOKEN.match(text, pos)
            if not token or token.end() == pos:
                raise DirectiveSyntaxError(
                    f"Cannot parse directive arguments near {text[pos:pos + 20]!r}",
                    self.source_name,
                    line_number,
                )
            pos = token.end()
            kind = token.lastgroup
            raw = token.group(kind)

            if kind in ('kwarg', 'symkey', 'strkey', 'eqkey'):
                if pending_key is not None:
                    raise DirectiveSyntaxError(
                        f"Keyword '{pending_key}' has no value", self.source_name, line_number
                    )
                pending_key = string_unescape(raw) if kind == 'strkey' else raw
                continue

            if kind in ('dq', 'sq'):
                value = string_unescape(raw)
            else:
                value = raw

            if pending_key is not None:
                parsed.keywords[pending_key] = value
                pending_key = None
            else:
                parsed.positional.append(value)

        if pending_key is not None:
            raise DirectiveSyntaxError(
                f"Keyword '{pending_key}' has no value", self.source_name, line_number
            )
        return parsed

    def directive_build(self, match: DirectiveMatch) -> Optional[Directive]:
        """
        Classify a found tag into a Partial or ImageTag

        Returns:
            The directive, or None when the helper is unsupported and strict
            mode is off (the tag then stays in the output verbatim)

        Raises:
            UnsupportedDirectiveError: Unsupported helper in strict mode
            MissingAttributeError: partial without a name, image_tag without a path
            DirectiveSyntaxError: Malformed argument list
        """
        raw = self.escapes_expand(self.source[match.start:match.end])
        kind = kind_lookup(match.helper)

        if kind is None:
            if self.strict:
                raise UnsupportedDirectiveError(
                    match.helper or raw, self.source_name, match.line_number
                )
            WARN(f"{self.source_name}:{match.line_number}: leaving unsupported directive {raw!r}")
            return None

        arguments = self.arguments_parse(match.arguments, match.line_number)

        if len(arguments.positional) > 1:
            raise DirectiveSyntaxError(
                f"'{match.helper}' takes one positional argument, got {len(arguments.positional)}",
                self.source_name,
                match.line_number,
            )
        first = arguments.positional[0] if arguments.positional else ''

        if kind is DirectiveKind.PARTIAL:
            if not first:
                raise MissingAttributeError('partial', 'name', self.source_name, match.line_number)
            if arguments.keywords:
                LOG(f"Ignoring partial options {list(arguments.keywords)} at line {match.line_number}", level=2)
            return Partial(
                name=first, raw=raw, position=match.start, line_number=match.line_number
            )

        if not first:
            raise MissingAttributeError('image_tag', 'path', self.source_name, match.line_number)
        attributes = {k: v for k, v in arguments.keywords.items() if v != 'nil'}
        return ImageTag(
            path=first,
            attributes=attributes,
            raw=raw,
            position=match.start,
            line_number=match.line_number,
        )

    def scan(self) -> ScannedBody:
        """
        Split the body into literal text and directives

        Main entry point. Protects fenced code and escapes, then walks the
        remaining text tag by tag.

        Returns:
            ScannedBody whose literal segments still hold fence and escape
            placeholders; use segment_restore() on each literal segment.
        """
        protected = self.codefences_protect(self.source)
        self.fences = protected.fences
        self.source = self.escapes_protect(protected.text)

        segments: List[Segment] = []
        position = 0
        literal_start = 0

        while position < len(self.source):
            match = self.directive_find(position)
            if match is None:
                break

            directive = self.directive_build(match)
            if directive is not None:
                if match.start > literal_start:
                    segments.append(self.source[literal_start:match.start])
                segments.append(directive)
                literal_start = match.end
            position = match.end

        if literal_start < len(self.source):
            segments.append(self.source[literal_start:])

        LOG(
            f"{self.source_name}: {sum(1 for s in segments if not isinstance(s, str))} directives found",
            level=2,
        )
        return ScannedBody(segments=segments, fences=self.fences)

    def segment_restore(self, segment: str) -> str:
        """Put escaped literals and fenced blocks back into a literal segment"""
        restored = self.escapes_expand(segment)

        def expand_fence_placeholder(match: re.Match[str]) -> str:
            fence_id = appsettings.fenceIndex_extract(match.group(0))
            if fence_id is None or fence_id not in self.fences:
                return match.group(0)
            return self.fences[fence_id]

        pattern = re.escape(appsettings.placeholder_prefix) + r'\d+' + re.escape(appsettings.placeholder_suffix)
        return re.sub(pattern, expand_fence_placeholder, restored)
