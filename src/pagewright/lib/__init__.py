"""
pagewright - Blog post directive renderer

Renders front matter, partial includes and image tags in static-site posts.
"""

__version__ = "1.0.0"

from .parser import DirectiveParser
from .renderer import Renderer
from .partials import PartialCollection
from .helpers import AssetResolver, imageTag_build
from .frontmatter import frontmatter_split, frontmatter_serialize, document_parse
from .errors import (
    RenderError,
    ParseError,
    MissingPartialError,
    MissingAttributeError,
    DirectiveSyntaxError,
    UnsupportedDirectiveError,
    PartialCycleError,
    SiteConfigError,
)
from .site import Site
from .log import LOG, state_connectToLogger

__all__ = [
    "DirectiveParser",
    "Renderer",
    "PartialCollection",
    "AssetResolver",
    "imageTag_build",
    "frontmatter_split",
    "frontmatter_serialize",
    "document_parse",
    "RenderError",
    "ParseError",
    "MissingPartialError",
    "MissingAttributeError",
    "DirectiveSyntaxError",
    "UnsupportedDirectiveError",
    "PartialCycleError",
    "SiteConfigError",
    "Site",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
