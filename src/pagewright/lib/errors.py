"""
Exceptions raised while parsing and rendering documents.

All render failures derive from RenderError so a batch driver can catch one
type per document. Each error knows which source and line it came from.
"""

from typing import List, Optional


class RenderError(Exception):
    """Base class for a failed render of a single document"""

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        line_number: Optional[int] = None,
    ) -> None:
        self.message = message
        self.source_name = source_name
        self.line_number = line_number
        super().__init__(message)

    def location_describe(self) -> str:
        """Return "name:line", "name", "line N" or "" depending on what is known"""
        if self.source_name and self.line_number is not None:
            return f"{self.source_name}:{self.line_number}"
        if self.source_name:
            return self.source_name
        if self.line_number is not None:
            return f"line {self.line_number}"
        return ""

    def __str__(self) -> str:
        location = self.location_describe()
        if location:
            return f"{location}: {self.message}"
        return self.message


class ParseError(RenderError):
    """Malformed or unterminated front-matter block"""
    pass


class MissingPartialError(RenderError):
    """A partial directive names a partial the collection does not have"""

    def __init__(
        self,
        name: str,
        source_name: Optional[str] = None,
        line_number: Optional[int] = None,
    ) -> None:
        self.name = name
        super().__init__(f"Partial '{name}' not found", source_name, line_number)


class MissingAttributeError(RenderError):
    """A helper directive is missing a required argument"""

    def __init__(
        self,
        helper: str,
        attribute: str,
        source_name: Optional[str] = None,
        line_number: Optional[int] = None,
    ) -> None:
        self.helper = helper
        self.attribute = attribute
        super().__init__(
            f"'{helper}' requires a {attribute} argument", source_name, line_number
        )


class DirectiveSyntaxError(RenderError):
    """A directive's argument list cannot be parsed"""
    pass


class UnsupportedDirectiveError(RenderError):
    """A directive names a helper outside the supported set (strict mode only)"""

    def __init__(
        self,
        helper: str,
        source_name: Optional[str] = None,
        line_number: Optional[int] = None,
    ) -> None:
        self.helper = helper
        super().__init__(f"Unsupported directive '{helper}'", source_name, line_number)


class PartialCycleError(RenderError):
    """A partial includes itself, directly or through other partials"""

    def __init__(
        self,
        chain: List[str],
        source_name: Optional[str] = None,
        line_number: Optional[int] = None,
    ) -> None:
        self.chain = list(chain)
        super().__init__(
            f"Partial include cycle: {' -> '.join(self.chain)}", source_name, line_number
        )


class SiteConfigError(Exception):
    """Raised when site.yaml cannot be loaded or validated"""
    pass
