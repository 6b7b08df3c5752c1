"""
Directive variant models

Defines the closed set of directive kinds pagewright knows how to expand.
Every directive found in a body is one of these dataclasses; the renderer
dispatches on the class, not on an open-ended name registry.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Optional, Union


class DirectiveKind(Enum):
    """
    Kinds of pagewright directives

    The set is fixed. Names not listed in DIRECTIVE_NAMES are unsupported.
    """
    PARTIAL = "partial"         # <%= partial 'tutorial_series' %>
    IMAGE_TAG = "image_tag"     # <%= image_tag 'foo.png', alt: 'Foo' %>


@dataclass(frozen=True)
class Partial:
    """
    Include directive for a named partial

    Attributes:
        name: Partial name as written in the source (e.g., "tutorial_series")
        raw: Original directive text, including the <%= %> delimiters
        position: Character offset of the directive in the scanned text
        line_number: Source line of the directive (for error reporting)
    """
    name: str
    raw: str = ""
    position: int = 0
    line_number: int = 1

    @property
    def kind(self) -> DirectiveKind:
        return DirectiveKind.PARTIAL


@dataclass(frozen=True)
class ImageTag:
    """
    Image helper directive

    Attributes:
        path: Relative (or absolute) image path as written in the source
        attributes: HTML attributes in source order (e.g., {"alt": "Foo"})
        raw: Original directive text, including the <%= %> delimiters
        position: Character offset of the directive in the scanned text
        line_number: Source line of the directive (for error reporting)
    """
    path: str
    attributes: Dict[str, str] = field(default_factory=dict)
    raw: str = ""
    position: int = 0
    line_number: int = 1

    @property
    def kind(self) -> DirectiveKind:
        return DirectiveKind.IMAGE_TAG


Directive = Union[Partial, ImageTag]


# Helper names accepted in source, mapped to their kind
DIRECTIVE_NAMES: Dict[str, DirectiveKind] = {
    'partial': DirectiveKind.PARTIAL,
    'image_tag': DirectiveKind.IMAGE_TAG,
    'image': DirectiveKind.IMAGE_TAG,
}


def kind_lookup(helper_name: str) -> Optional[DirectiveKind]:
    """Return the directive kind for a helper name, or None if unsupported"""
    return DIRECTIVE_NAMES.get(helper_name)
