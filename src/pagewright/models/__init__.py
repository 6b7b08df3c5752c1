"""
Models package for pagewright

Contains data structures and type definitions for the rendering pipeline.
"""

from .state import ProgramState, pipeline
from .directives import Directive, DirectiveKind, Partial, ImageTag, DIRECTIVE_NAMES, kind_lookup
from .document import Document, RenderedDocument, RenderResult
from .parser import DirectiveMatch, ProtectedBody, ParsedArguments, ScannedBody, FrontMatter

__all__ = [
    "ProgramState",
    "pipeline",
    "Directive",
    "DirectiveKind",
    "Partial",
    "ImageTag",
    "DIRECTIVE_NAMES",
    "kind_lookup",
    "Document",
    "RenderedDocument",
    "RenderResult",
    "DirectiveMatch",
    "ProtectedBody",
    "ParsedArguments",
    "ScannedBody",
    "FrontMatter",
]
