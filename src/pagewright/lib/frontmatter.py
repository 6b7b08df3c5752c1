"""
Front-matter parsing

A document may open with a metadata block:

    ---
    title: Adding a feature with a client-side MVC framework
    date: 2014-05-20
    ---
    Body text...

Only flat `key: value` lines are supported. The body after the closing
delimiter is returned exactly as it appears in the source.
"""

import re
from datetime import date
from typing import Dict, List, Optional

from ..config import appsettings
from ..models.document import Document
from ..models.parser import FrontMatter
from .errors import ParseError
from .log import LOG

_QUOTES = ('"', "'")
_DATE_PREFIX = re.compile(r'^(\d{4})-(\d{2})-(\d{2})(?:$|[T\s])')


def delimiter_is(line: str, delimiter: Optional[str] = None) -> bool:
    """Check whether a line (with or without its newline) is a delimiter line"""
    delimiter = delimiter or appsettings.front_matter_delimiter
    return line.rstrip() == delimiter


def value_unquote(value: str) -> str:
    """Strip one pair of matching surrounding quotes, if present"""
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def line_parse(line: str, line_number: int, source_name: Optional[str] = None) -> Optional[tuple]:
    """
    Parse one header line into (key, value)

    Returns None for blank and comment lines.

    Raises:
        ParseError: Line has no colon or an empty key
    """
    stripped = line.strip()
    if not stripped or stripped.startswith('#'):
        return None

    key, sep, value = stripped.partition(':')
    key = key.strip()
    if not sep:
        raise ParseError(
            f"Front-matter line is not 'key: value': {stripped!r}", source_name, line_number
        )
    if not key:
        raise ParseError(
            f"Front-matter line has an empty key: {stripped!r}", source_name, line_number
        )
    return key, value_unquote(value.strip())


def frontmatter_split(text: str, source_name: Optional[str] = None) -> FrontMatter:
    """
    Split a front-matter block from the start of raw document text

    Args:
        text: Raw file contents
        source_name: Name used in error messages

    Returns:
        FrontMatter with the metadata mapping and the remaining body.
        If the text does not open with a delimiter line, the mapping is
        empty and body is the original text unchanged.

    Raises:
        ParseError: Opening delimiter present but never closed, or a
                    header line is malformed
    """
    lines: List[str] = text.splitlines(keepends=True)
    if not lines or not delimiter_is(lines[0]):
        return FrontMatter(metadata={}, body=text, present=False, body_line=1)

    closing = next((i for i in range(1, len(lines)) if delimiter_is(lines[i])), None)
    if closing is None:
        raise ParseError("Front-matter block is not closed", source_name, 1)

    metadata: Dict[str, str] = {}
    for index in range(1, closing):
        parsed = line_parse(lines[index], index + 1, source_name)
        if parsed is not None:
            key, value = parsed
            metadata[key] = value

    body = ''.join(lines[closing + 1:])
    LOG(f"Front matter: {len(metadata)} keys, body starts at line {closing + 2}", level=3)
    return FrontMatter(metadata=metadata, body=body, present=True, body_line=closing + 2)


def value_quote(value: str) -> str:
    """Quote a value whose text would otherwise change when reparsed"""
    needs_quotes = (
        value != value.strip()
        or (len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0])
    )
    if needs_quotes:
        return f'"{value}"'
    return value


def frontmatter_serialize(metadata: Dict[str, str], delimiter: Optional[str] = None) -> str:
    """
    Write a metadata mapping back out as a front-matter block

    Reparsing the result with frontmatter_split() yields the same mapping.

    Example:
        >>> frontmatter_serialize({"title": "Hello", "date": "2014-05-20"})
        '---\\ntitle: Hello\\ndate: 2014-05-20\\n---\\n'
    """
    delimiter = delimiter or appsettings.front_matter_delimiter
    lines = [delimiter]
    for key, value in metadata.items():
        bad_key = not key or key != key.strip() or ':' in key or key.startswith('#')
        if bad_key or len(f"{key}: {value}".splitlines()) != 1:
            raise ValueError(f"Cannot serialize front-matter key {key!r}")
        lines.append(f"{key}: {value_quote(str(value))}")
    lines.append(delimiter)
    return '\n'.join(lines) + '\n'


def date_parse(value: str, source_name: Optional[str] = None, line_number: int = 1) -> date:
    """
    Parse a front-matter date

    Accepts "2014-05-20" as well as Middleman-style "2014-05-20 10:00 UTC";
    only the calendar date is kept.

    Raises:
        ParseError: Value does not start with a valid YYYY-MM-DD date
    """
    match = _DATE_PREFIX.match(value.strip())
    if not match:
        raise ParseError(f"Invalid date {value!r} (expected YYYY-MM-DD)", source_name, line_number)
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError as e:
        raise ParseError(f"Invalid date {value!r}: {e}", source_name, line_number) from e


def document_parse(text: str, source_name: str = "<string>") -> Document:
    """
    Build a Document from raw file text

    Args:
        text: Raw file contents
        source_name: Name used for error messages and results

    Returns:
        Immutable Document with title, date, body and the full metadata mapping

    Raises:
        ParseError: Malformed front matter or an invalid date
    """
    front = frontmatter_split(text, source_name)
    metadata = front.metadata

    parsed_date = None
    if metadata.get('date'):
        parsed_date = date_parse(metadata['date'], source_name)

    return Document(
        title=metadata.get('title', ''),
        date=parsed_date,
        body=front.body,
        metadata=dict(metadata),
        source_name=source_name,
        body_line=front.body_line,
    )
