#!/usr/bin/env python3
"""
pagewright - Blog post directive renderer

Renders a directory of static-site blog posts: front matter is split from
each post, <%= partial %> and <%= image_tag %> directives are expanded, and
fenced code listings pass through untouched. The rendered bodies are ready
for a markdown-to-HTML step.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Usage:
    pagewright inputdir/ outputdir/ [--inputGlob '**/*.md.erb']

    Each post is written to outputdir/ under its relative path with the
    trailing .erb removed, and outputdir/manifest.yaml lists title, date
    and status for every post.

Examples:
    # Render every post under source/
    pagewright source/ build/

    # Custom partials directory and strict directive checking
    pagewright source/ build/ --partialsDir shared/partials --strict

    # Verbose output
    pagewright source/ build/ -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter
from typing import Any, Dict, List, Optional

import yaml
from chris_plugin import chris_plugin

from .config import appsettings
from .lib import (
    Renderer, PartialCollection, Site, SiteConfigError, ParseError, __version__, LOG, state_connectToLogger,
)
from .models import ProgramState, RenderResult, pipeline


DISPLAY_TITLE = r"""
                                        _       _     _
  _ __   __ _  __ _  _____      ___ __(_) __ _| |__ | |_
 | '_ \ / _` |/ _` |/ _ \ \ /\ / / '__| |/ _` | '_ \| __|
 | |_) | (_| | (_| |  __/\ V  V /| |  | | (_| | | | | |_
 | .__/ \__,_|\__, |\___| \_/\_/ |_|  |_|\__, |_| |_|\__|
 |_|          |___/                      |___/

  Blog post directive renderer
"""

# Define CLI arguments
parser = ArgumentParser(
    description="pagewright - render partial and image_tag directives in blog posts",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputGlob",
    default="**/*.md.erb",
    type=str,
    help="Glob (relative to inputdir) selecting post sources",
)

parser.add_argument(
    "--partialsDir",
    default=None,
    type=str,
    help="Partials directory, relative to inputdir. Defaults to site.yaml partials.dir or 'partials'",
)

parser.add_argument(
    "--siteConfig",
    default="site.yaml",
    type=str,
    help="Site configuration file, relative to inputdir (optional)",
)

parser.add_argument(
    "--strict",
    default=False,
    action="store_true",
    help="Fail a post that uses an unsupported directive instead of leaving it verbatim",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def path_resolve(base: Path, value: str) -> Path:
    """Resolve a CLI path relative to base unless it is absolute"""
    path = Path(value)
    return path if path.is_absolute() else base / path


def output_pathFor(source: Path, inputdir: Path, outputdir: Path) -> Path:
    """Output location of a rendered post: same relative path, trailing .erb dropped"""
    relative = source.relative_to(inputdir)
    if relative.suffix == '.erb':
        relative = relative.with_suffix('')
    return outputdir / relative


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - sourceFiles: Post sources matched by inputGlob
            - siteConfigFile: Resolved site.yaml (None if absent)
            - envOK: True if environment is valid

    Exits:
        1 if the input directory is missing or no posts match
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if not state.inputdir or not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.sourceFiles = sorted(p for p in state.inputdir.glob(state.inputGlob) if p.is_file())
    if not state.sourceFiles:
        print(f"Error: No posts match '{state.inputGlob}' in {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)
    LOG(f"Found {len(state.sourceFiles)} posts", level=2)

    site_config = path_resolve(state.inputdir, state.siteConfig)
    state.siteConfigFile = site_config if site_config.is_file() else None
    LOG(f"Site configuration: {state.siteConfigFile or 'defaults'}", level=2)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def site_load(inputstate: ProgramState) -> ProgramState:
    """
    Load site configuration.

    Returns:
        ProgramState with added field:
            - site: Site built from site.yaml (or defaults)

    Exits:
        1 if site.yaml exists but cannot be parsed
    """

    state = inputstate.copy()

    try:
        state.site = Site(state.siteConfigFile)
    except SiteConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if state.site.strict_get():
        state.strict = True
    return state


def partials_load(inputstate: ProgramState) -> ProgramState:
    """
    Load the partials collection shared by every post.

    The partials directory comes from --partialsDir, then site.yaml, then
    AppSettings. A missing directory yields an empty collection; posts that
    include a partial will then fail individually.

    Returns:
        ProgramState with added fields:
            - partialsInputdir: Resolved partials directory (None if absent)
            - partials: PartialCollection
    """

    state = inputstate.copy()

    partials_dir = state.partialsDir or state.site.partialsDir_get()
    directory = path_resolve(state.inputdir, partials_dir)

    if directory.is_dir():
        state.partialsInputdir = directory
        state.partials = PartialCollection.directory_load(directory)
        LOG(f"Loaded {len(state.partials)} partials from {directory}", level=1)
    else:
        LOG(f"No partials directory at {directory}", level=2)
        state.partials = PartialCollection({}, partials_prefix=Path(partials_dir).name)

    # Partials are never rendered as posts in their own right
    if state.partialsInputdir is not None:
        state.sourceFiles = [
            p for p in state.sourceFiles if state.partialsInputdir not in p.parents
        ]
    return state


def manifest_entry(result: RenderResult, source: Path, output: Optional[Path]) -> Dict[str, Any]:
    """One manifest record for a rendered (or failed) post"""
    entry: Dict[str, Any] = {"source": str(source)}
    if result.ok:
        entry["title"] = result.rendered.title
        entry["date"] = result.rendered.date.isoformat() if result.rendered.date else None
        entry["output"] = str(output)
    else:
        entry["error"] = str(result.error)
    return entry


def documents_render(inputstate: ProgramState) -> ProgramState:
    """
    Render every post and write the results.

    Each post is rendered independently: a failing post is recorded in the
    manifest and the rest still render. A post that cannot be read as
    UTF-8 fails with a ParseError.

    Returns:
        ProgramState with added fields:
            - renderResults: One RenderResult per post
            - renderSummary: Dict with rendered, failed and manifest
    """

    state = inputstate.copy()

    LOG(f"Rendering {len(state.sourceFiles)} posts...", level=1)

    renderer = Renderer(
        partials=state.partials,
        asset_rewrite=state.site.assetResolver_make(),
        strict=state.strict,
    )

    results: List[Optional[RenderResult]] = []
    sources = []
    for source in state.sourceFiles:
        name = str(source.relative_to(state.inputdir))
        try:
            text = source.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            LOG(f"Failed to read {name}: {e}", level=1)
            results.append(RenderResult(source_name=name, error=ParseError(f"Cannot read post: {e}", name)))
            continue
        results.append(None)
        sources.append((name, text))

    rendered = iter(renderer.documents_render(sources))
    state.renderResults = [r if r is not None else next(rendered) for r in results]

    manifest: List[Dict[str, Any]] = []
    for source, result in zip(state.sourceFiles, state.renderResults):
        output = None
        if result.ok:
            output = output_pathFor(source, state.inputdir, state.outputdir)
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(result.rendered.text, encoding="utf-8")
            LOG(f"Wrote {output}", level=2)
        manifest.append(manifest_entry(result, source.relative_to(state.inputdir), output))

    manifest_file = state.outputdir / appsettings.output_manifest
    with open(manifest_file, "w", encoding="utf-8") as f:
        yaml.safe_dump({"posts": manifest}, f, sort_keys=False, allow_unicode=True)

    failed = sum(1 for r in state.renderResults if not r.ok)
    state.renderSummary = {
        "rendered": len(state.renderResults) - failed,
        "failed": failed,
        "manifest": str(manifest_file),
    }
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display rendering results.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if any post failed to render
    """
    state: ProgramState = inputstate.copy()
    if not state.renderSummary:
        print("Error: Rendering did not run", file=sys.stderr)
        sys.exit(1)

    for result in state.renderResults:
        if not result.ok:
            print(f"Render error: {result.error}", file=sys.stderr)

    LOG(f"  Rendered: {state.renderSummary['rendered']}", level=1)
    LOG(f"  Failed:   {state.renderSummary['failed']}", level=1)
    LOG(f"  Manifest: {state.renderSummary['manifest']}", level=1)

    if state.renderSummary["failed"]:
        sys.exit(1)
    return state


@chris_plugin(
    parser=parser,
    title="pagewright - Blog post directive renderer",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - render every post under inputdir into outputdir.

    Orchestrates the rendering pipeline:
        1. env_check: Validate paths, collect posts
        2. site_load: Read site.yaml
        3. partials_load: Build the shared partials collection
        4. documents_render: Render posts, write outputs and manifest
        5. results_report: Summarize, exit non-zero on failures

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, site_load, partials_load, documents_render, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
