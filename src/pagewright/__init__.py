"""
pagewright - Blog post directive renderer

Splits front matter from a post, expands <%= partial %> and <%= image_tag %>
directives, and leaves fenced code listings untouched.
"""

__version__ = "1.0.0"

from .lib import (
    DirectiveParser,
    Renderer,
    PartialCollection,
    AssetResolver,
    Site,
    RenderError,
    ParseError,
    MissingPartialError,
    MissingAttributeError,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "DirectiveParser",
    "Renderer",
    "PartialCollection",
    "AssetResolver",
    "Site",
    "RenderError",
    "ParseError",
    "MissingPartialError",
    "MissingAttributeError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
