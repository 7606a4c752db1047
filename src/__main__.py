#!/usr/bin/env python3
"""
docweave - documentation site builder

Builds a tree of markup documents with cross-references into a static HTML
site, or into a tree of normalized markup.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Philosophy:
    - Text-first: Sources are plain Markdown-flavoured files, readable as is
    - Links that cannot break: every [[reference]] is checked at build time
    - Deterministic: the same input always produces the same bytes
    - One page per source: a/b.md becomes a/b.html

Key Features:
    - Headings with stable anchors, nested lists, tables, admonitions
    - Cross-references between documents, resolved to relative links
    - Pygments syntax highlighting with theme-selected styles
    - Concurrent parse and render (--jobs)
    - Build manifest with SHA-256 per output file

Usage:
    docweave inputdir/ outputdir/

    Every .md file under inputdir/ is built into outputdir/ at the same
    relative path.

Examples:
    # Basic build
    docweave docs/ site/

    # Plain theme, four worker threads
    docweave docs/ site/ --theme plain --jobs 4

    # Normalize the sources instead of rendering HTML
    docweave docs/ normalized/ --format markup

    # Verbose output
    docweave docs/ site/ -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import Resolver, Theme, __version__, LOG, state_connectToLogger
from .lib.errors import SourceIOError, UnresolvedReferenceError
from .lib import site
from .lib.theme import theme_validate, themes_listAvailable
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
     _
  __| | ___   _____      _____  __ ___   _____
 / _` |/ _ \ / __\ \ /\ / / _ \/ _` \ \ / / _ \
| (_| | (_) | (__ \ V  V /  __/ (_| |\ V /  __/
 \__,_|\___/ \___| \_/\_/ \___|\__,_| \_/ \___|

  Cross-referenced documentation builder
"""

# Define CLI arguments
parser = ArgumentParser(
    description="docweave - documentation site builder with checked cross-references",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--theme",
    default="",
    type=str,
    help="Theme name (directory under the themes dir). Defaults to DOCWEAVE_DEFAULT_THEME",
)

parser.add_argument(
    "--jobs",
    default=0,
    type=int,
    help="Worker threads for parsing and rendering (0 = automatic, 1 = sequential)",
)

parser.add_argument(
    "--format",
    default="html",
    choices=list(site.FORMATS),
    help="Output format: standalone HTML pages or normalized markup",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment: source root, theme and worker count.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - themeObj: Loaded Theme
            - workers: Worker thread count
            - envOK: True if environment is valid

    Exits:
        1 if the source root is missing, or the theme cannot be loaded or
        names an unknown code style
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if not state.inputdir or not Path(state.inputdir).is_dir():
        print(f"Error: Source directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    theme_name = state.theme or appsettings.default_theme
    ok, message = theme_validate(theme_name)
    if not ok:
        print(f"Error: {message}", file=sys.stderr)
        print(f"Available themes: {', '.join(themes_listAvailable()) or '(none)'}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)
    state.themeObj = Theme(theme_name)
    LOG(message, level=2)

    state.workers = site.jobs_resolve(state.jobs)
    LOG(f"Worker threads: {state.workers}", level=2)

    state.envOK = True
    return state


def sources_discover(inputstate: ProgramState) -> ProgramState:
    """
    Find all markup sources under the input directory.

    Returns:
        ProgramState with added field:
            - sourceFiles: SourceFile per doc id

    Exits:
        1 if the source root cannot be read
    """
    state = inputstate.copy()

    LOG("Discovering sources...", level=1)
    try:
        state.sourceFiles = site.sources_discover(Path(state.inputdir))
    except SourceIOError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not state.sourceFiles:
        LOG(f"No {appsettings.source_suffix} files found under {state.inputdir}", level=1)
    return state


def sources_parse(inputstate: ProgramState) -> ProgramState:
    """
    Read and parse every source into a Document.

    A ParseError fails its own document only; the remaining documents still
    build, and results_report exits 1 at the end.

    Returns:
        ProgramState with added fields:
            - parsedDocuments: Document per doc id
            - parseErrors: ParseError per doc id

    Exits:
        1 if a source file cannot be read
    """
    state = inputstate.copy()

    LOG(f"Parsing {len(state.sourceFiles)} documents...", level=1)
    try:
        outcomes = site.sources_parse(state.sourceFiles, state.workers)
    except SourceIOError as e:
        print(f"Error reading source: {e}", file=sys.stderr)
        sys.exit(1)

    state.parsedDocuments = {}
    state.parseErrors = {}
    for doc_id, outcome in outcomes.items():
        if outcome.ok:
            state.parsedDocuments[doc_id] = outcome.document
        else:
            state.parseErrors[doc_id] = outcome.error
            print(f"Parse error: {outcome.error.details()}", file=sys.stderr)

    LOG(f"Parsed {len(state.parsedDocuments)} documents, {len(state.parseErrors)} failed", level=2)
    return state


def references_resolve(inputstate: ProgramState) -> ProgramState:
    """
    Resolve every cross-reference across the parsed documents.

    An unresolved reference is fatal for the whole build: all of them are
    reported and nothing is written.

    Returns:
        ProgramState with added field:
            - resolvedDocuments: ResolvedDocument per doc id

    Exits:
        1 if any reference is unresolved
    """
    state = inputstate.copy()

    LOG("Resolving cross-references...", level=1)
    resolver = Resolver(state.parsedDocuments, known=state.sourceFiles.keys())
    try:
        state.resolvedDocuments = resolver.resolve()
    except UnresolvedReferenceError:
        for error in resolver.unresolved:
            print(f"Error: {error}", file=sys.stderr)
        print(
            f"Build failed: {len(resolver.unresolved)} unresolved reference(s); nothing written",
            file=sys.stderr,
        )
        sys.exit(1)
    return state


def documents_render(inputstate: ProgramState) -> ProgramState:
    """
    Render every resolved document in the selected output format.

    Returns:
        ProgramState with added field:
            - renderedPages: RenderedPage per doc id

    Exits:
        1 if resolvedDocuments is None or rendering fails
    """
    state = inputstate.copy()

    if state.resolvedDocuments is None:
        print("Error: No resolved documents available", file=sys.stderr)
        sys.exit(1)

    LOG(f"Rendering {len(state.resolvedDocuments)} documents as {state.format}...", level=1)
    try:
        state.renderedPages = site.pages_render(
            state.resolvedDocuments, state.themeObj, state.format, state.workers
        )
    except Exception as e:
        print(f"Render error: {e}", file=sys.stderr)
        if state.verbosity >= 3:
            import traceback

            traceback.print_exc()
        sys.exit(1)
    return state


def outputs_write(inputstate: ProgramState) -> ProgramState:
    """
    Write pages, theme CSS and the manifest to the output directory.

    Returns:
        ProgramState with added field:
            - buildResult: BuildResult summary

    Exits:
        1 if any output cannot be written
    """
    state = inputstate.copy()

    LOG(f"Writing outputs to {state.outputdir}...", level=1)
    try:
        state.buildResult = site.outputs_write(
            state.renderedPages or {}, Path(state.outputdir), state.themeObj, state.format
        )
    except SourceIOError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        sys.exit(1)
    state.buildResult.failed = sorted(state.parseErrors)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display build results to the user.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if the build produced no result or any document failed to parse
    """
    state: ProgramState = inputstate.copy()
    if state.buildResult is None:
        print("Error: Build failed", file=sys.stderr)
        sys.exit(1)

    pages = len(state.renderedPages or {})
    if state.parseErrors:
        print(
            f"Build incomplete: {len(state.parseErrors)} document(s) failed to parse: "
            f"{', '.join(state.buildResult.failed)}",
            file=sys.stderr,
        )
        LOG(f"  Wrote {pages} of {len(state.sourceFiles)} pages", level=1)
        sys.exit(1)

    LOG("\n✓ Build successful!", level=1)
    LOG(f"  Output:   {state.outputdir}", level=1)
    LOG(f"  Pages:    {pages}", level=1)
    LOG(f"  Manifest: {state.buildResult.manifest}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="docweave - documentation site builder",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - build the documentation tree under inputdir.

    Orchestrates the full build pipeline:
        1. env_check: Validate source root, theme and worker count
        2. sources_discover: Find .md sources
        3. sources_parse: Parse each source (concurrently)
        4. references_resolve: Bind cross-references (fatal if any dangle)
        5. documents_render: Render each document (concurrently)
        6. outputs_write: Write pages, CSS and manifest
        7. results_report: Summarize; exit 1 if any document failed

    Args:
        options: CLI arguments from argparse
            - theme: str - Theme name
            - jobs: int - Worker threads
            - format: str - "html" or "markup"
            - verbosity: int - Logging verbosity level (1-3)
        inputdir: Source root directory
        outputdir: Output root directory

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(
        state,
        env_check,
        sources_discover,
        sources_parse,
        references_resolve,
        documents_render,
        outputs_write,
        results_report,
    )


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
