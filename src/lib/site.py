"""
Site build helpers: discovery, concurrent parse/render, output writing

Every per-document task (parse, render) is independent, so these run on a
thread pool. Results are always gathered into dicts keyed by doc id and
consumed in sorted order, never in completion order, which keeps the output
and the reported errors identical between sequential and concurrent runs.

Example:
    >>> sources = sources_discover(Path("docs"))
    >>> outcomes = sources_parse(sources, jobs=4)
    >>> sorted(outcomes)
    ['guide/install', 'index']
"""

import contextvars
import hashlib
import json
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, Optional, TypeVar

from ..config import appsettings
from ..models.references import ResolvedDocument
from ..models.site import BuildResult, ParseOutcome, RenderedPage, SourceFile
from .compiler import Compiler, outputPath_make
from .elements import ElementRegistry
from .errors import ParseError, SourceIOError
from .formatter import document_format
from .log import LOG
from .parser import Parser
from .theme import Theme

T = TypeVar("T")
R = TypeVar("R")

FORMATS = ("html", "markup")


# ----------------------------------------------------------------------
# Discovery and reading
# ----------------------------------------------------------------------


def sources_discover(root: Path) -> Dict[str, SourceFile]:
    """
    Find every markup source under root

    Files need the configured source suffix; paths with a component starting
    with a skip prefix ("." or "_" by default) are ignored, and skipped
    directories are not descended into.

    Returns:
        SourceFile per doc id, in doc-id order

    Raises:
        SourceIOError: root does not exist or is not a directory, or a
                       directory below it cannot be listed
    """
    if not root.is_dir():
        raise SourceIOError(str(root), "source root is not a directory")

    def walk_error(error: OSError) -> None:
        raise SourceIOError(error.filename or str(root), error.strerror or str(error))

    suffix = appsettings.source_suffix
    sources: Dict[str, SourceFile] = {}
    for dirpath, dirnames, filenames in os.walk(root, onerror=walk_error):
        directory = Path(dirpath)
        relative_dir = directory.relative_to(root)
        dirnames[:] = sorted(
            name for name in dirnames if not appsettings.pathSkipped_check(relative_dir / name)
        )
        for filename in filenames:
            if not filename.endswith(suffix):
                continue
            path = directory / filename
            relative = path.relative_to(root)
            if not path.is_file() or appsettings.pathSkipped_check(relative):
                continue
            doc_id = relative.as_posix()[: -len(suffix)]
            sources[doc_id] = SourceFile(doc_id=doc_id, path=path, relative=relative.as_posix())

    LOG(f"Discovered {len(sources)} source files under {root}", level=2)
    return {doc_id: sources[doc_id] for doc_id in sorted(sources)}


def source_read(source: SourceFile) -> str:
    """
    Read a source file as UTF-8

    Raises:
        SourceIOError: The file cannot be read or is not valid UTF-8
    """
    try:
        return source.path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise SourceIOError(source.relative, f"not valid UTF-8 ({e.reason} at byte {e.start})")
    except OSError as e:
        raise SourceIOError(source.relative, e.strerror or str(e))


# ----------------------------------------------------------------------
# Concurrency
# ----------------------------------------------------------------------


def jobs_resolve(jobs: Optional[int]) -> int:
    """
    Number of worker threads to use

    0 or None falls back to DOCWEAVE_DEFAULT_JOBS, then to the CPU count.
    """
    if not jobs:
        jobs = appsettings.default_jobs or os.cpu_count() or 1
    return max(1, jobs)


def tasks_run(fn: Callable[[T], R], items: Dict[str, T], jobs: int = 1) -> Dict[str, R]:
    """
    Apply fn to every item, sequentially or on a thread pool

    Each task runs inside a copy of the caller's contextvars context, so the
    connected ProgramState (and with it LOG verbosity) is visible in workers.

    Args:
        fn: Task function
        items: Inputs keyed by doc id
        jobs: Worker threads; 1 runs everything in the calling thread

    Returns:
        fn's results keyed by doc id, in doc-id order

    Raises:
        Whatever fn raises; with several failures, the one for the first
        doc id in sorted order
    """
    keys = sorted(items)
    if jobs <= 1 or len(keys) <= 1:
        return {key: fn(items[key]) for key in keys}

    with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="docweave") as executor:
        futures = {
            key: executor.submit(contextvars.copy_context().run, fn, items[key]) for key in keys
        }
        return {key: futures[key].result() for key in keys}


# ----------------------------------------------------------------------
# Parse and render
# ----------------------------------------------------------------------


def document_parse(source: SourceFile, registry: Optional[ElementRegistry] = None) -> ParseOutcome:
    """
    Read and parse one source file

    A ParseError is captured in the outcome so other documents keep
    building; I/O failures propagate.
    """
    text = source_read(source)
    try:
        document = Parser(text, doc_id=source.doc_id, path=source.relative, registry=registry).parse()
    except ParseError as e:
        LOG(f"{source.relative}: parse failed", level=2)
        return ParseOutcome(doc_id=source.doc_id, error=e)
    LOG(f"{source.relative}: parsed {len(document.blocks)} blocks", level=3)
    return ParseOutcome(doc_id=source.doc_id, document=document)


def sources_parse(sources: Dict[str, SourceFile], jobs: int = 1) -> Dict[str, ParseOutcome]:
    """Parse every source; one ParseOutcome per doc id"""
    registry = ElementRegistry()
    return tasks_run(lambda source: document_parse(source, registry), sources, jobs)


def outputRelative_get(doc_id: str, output_format: str) -> str:
    """
    Output path of a document relative to the output root

    Example:
        >>> outputRelative_get("guide/install", "html")
        'guide/install.html'
        >>> outputRelative_get("guide/install", "markup")
        'guide/install.md'
    """
    if output_format == "markup":
        return outputPath_make(doc_id, appsettings.source_suffix)
    return outputPath_make(doc_id)


def page_render(
    resolved: ResolvedDocument,
    theme: Theme,
    output_format: str = "html",
    registry: Optional[ElementRegistry] = None,
) -> RenderedPage:
    """Render one resolved document in the requested output format"""
    doc_id = resolved.document.doc_id
    if output_format == "markup":
        content = document_format(resolved.document)
    elif output_format == "html":
        content = Compiler(resolved, theme, registry=registry).compile()
    else:
        raise ValueError(f"Unknown output format '{output_format}' (expected one of {', '.join(FORMATS)})")
    return RenderedPage(doc_id=doc_id, output_relative=outputRelative_get(doc_id, output_format), content=content)


def pages_render(
    resolved: Dict[str, ResolvedDocument], theme: Theme, output_format: str = "html", jobs: int = 1
) -> Dict[str, RenderedPage]:
    """Render every resolved document; one RenderedPage per doc id"""
    registry = ElementRegistry()
    return tasks_run(lambda doc: page_render(doc, theme, output_format, registry), resolved, jobs)


# ----------------------------------------------------------------------
# Output
# ----------------------------------------------------------------------


def file_write(path: Path, data: bytes) -> str:
    """
    Write bytes to path, creating parent directories

    Returns:
        SHA-256 hex digest of data

    Raises:
        SourceIOError: The file or its directory cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise SourceIOError(str(path), e.strerror or str(e))
    return hashlib.sha256(data).hexdigest()


def manifest_build(
    pages: Dict[str, RenderedPage], hashes: Dict[str, str], theme_name: str, output_format: str
) -> str:
    """
    Manifest text: every written file with its SHA-256

    Keys are sorted and nothing time-dependent is recorded, so identical
    builds produce identical manifests.
    """
    manifest = {
        "format": output_format,
        "theme": theme_name,
        "pages": [
            {
                "doc_id": doc_id,
                "output": pages[doc_id].output_relative,
                "sha256": hashes[pages[doc_id].output_relative],
            }
            for doc_id in sorted(pages)
        ],
        "static": [
            {"output": output, "sha256": hashes[output]}
            for output in sorted(hashes)
            if output.startswith(f"{appsettings.static_dir}/")
        ],
    }
    return json.dumps(manifest, indent=2, sort_keys=True) + "\n"


def outputs_write(
    pages: Dict[str, RenderedPage], outputdir: Path, theme: Theme, output_format: str = "html"
) -> BuildResult:
    """
    Write rendered pages, theme CSS and the manifest below outputdir

    Pages are written in doc-id order. The theme CSS is copied once to
    <outputdir>/_static/theme.css for HTML builds.

    Raises:
        SourceIOError: Any output cannot be written
    """
    result = BuildResult()
    hashes: Dict[str, str] = {}

    for doc_id in sorted(pages):
        page = pages[doc_id]
        path = outputdir / page.output_relative
        hashes[page.output_relative] = file_write(path, page.content.encode("utf-8"))
        result.written.append(path)
        LOG(f"Wrote {path}", level=3)

    css_path = theme.cssPath_get()
    if output_format == "html" and css_path is not None:
        relative = f"{appsettings.static_dir}/theme.css"
        try:
            data = css_path.read_bytes()
        except OSError as e:
            raise SourceIOError(str(css_path), e.strerror or str(e))
        hashes[relative] = file_write(outputdir / relative, data)
        result.written.append(outputdir / relative)

    manifest_path = outputdir / appsettings.manifest_name
    file_write(manifest_path, manifest_build(pages, hashes, theme.name, output_format).encode("utf-8"))
    result.manifest = manifest_path
    result.hashes = hashes
    return result
