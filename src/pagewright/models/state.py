"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

import dataclasses
from functools import reduce
from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the batch rendering pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as rendering progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputGlob, partialsDir, siteConfig, strict
        - env_check: sourceFiles, partialsInputdir, siteConfigFile, envOK
        - site_load: site
        - partials_load: partials
        - documents_render: renderResults, renderSummary
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing post sources
        outputdir: Base output directory for rendered posts
        verbosity: Logging verbosity level (1-3)
        inputGlob: Glob (relative to inputdir) selecting post sources
        partialsDir: Partials directory (relative to inputdir unless absolute)
        siteConfig: Site configuration file (relative to inputdir unless absolute)
        strict: Treat unsupported directives as errors
        envOK: Environment validation passed
        sourceFiles: Resolved post source paths, sorted
        partialsInputdir: Resolved partials directory (None if absent)
        siteConfigFile: Resolved site.yaml path (None if absent)
        site: Loaded Site configuration
        partials: Loaded PartialCollection
        renderResults: One RenderResult per source file
        renderSummary: Counts and manifest path written by documents_render
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputGlob: str = field(default="**/*.md.erb")
    partialsDir: Optional[str] = field(default=None)
    siteConfig: str = field(default="site.yaml")
    strict: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    sourceFiles: List[Path] = field(default_factory=list)
    partialsInputdir: Optional[Path] = field(default=None)
    siteConfigFile: Optional[Path] = field(default=None)
    site: Optional[Any] = field(default=None)  # Site at runtime
    partials: Optional[Any] = field(default=None)  # PartialCollection at runtime
    renderResults: List[Any] = field(default_factory=list)  # List[RenderResult] at runtime
    renderSummary: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments (inputGlob, partialsDir, etc.)
            inputdir: Directory containing source files
            outputdir: Directory for rendered output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        # Only keep options that are ProgramState fields
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        # Explicit directories override anything from the namespace
        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}

        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            site_load,
            partials_load,
            documents_render,
            results_report
        )

    This is equivalent to:
        results_report(documents_render(partials_load(site_load(env_check(initial_state)))))
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
