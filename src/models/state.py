"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing build stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the build pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the build progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, theme, jobs, format
        - env_check: themeObj, workers, envOK
        - sources_discover: sourceFiles
        - sources_parse: parsedDocuments, parseErrors
        - references_resolve: resolvedDocuments
        - documents_render: renderedPages
        - outputs_write: buildResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Source root directory
        outputdir: Output root directory
        verbosity: Logging verbosity level (0-3)
        theme: Theme name (empty means the configured default)
        jobs: Worker threads requested (0 means automatic)
        format: Output format, "html" or "markup"
        envOK: Environment validation passed
        themeObj: Loaded Theme
        workers: Resolved worker thread count
        sourceFiles: SourceFile per doc id
        parsedDocuments: Document per doc id (successful parses only)
        parseErrors: ParseError per doc id
        resolvedDocuments: ResolvedDocument per doc id
        renderedPages: RenderedPage per doc id
        buildResult: Summary of written outputs
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    theme: str = field(default="")
    jobs: int = field(default=0)
    format: str = field(default="html")

    # Pipeline state
    envOK: bool = field(default=False)
    themeObj: Optional[Any] = field(default=None)  # Theme at runtime
    workers: int = field(default=1)
    sourceFiles: Dict[str, Any] = field(default_factory=dict)
    parsedDocuments: Dict[str, Any] = field(default_factory=dict)
    parseErrors: Dict[str, Any] = field(default_factory=dict)
    resolvedDocuments: Optional[Dict[str, Any]] = field(default=None)
    renderedPages: Optional[Dict[str, Any]] = field(default=None)
    buildResult: Optional[Any] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Merges CLI options with explicitly provided directories to create
        the initial program state for the build pipeline.

        Args:
            options: Parsed CLI arguments (theme, jobs, format, verbosity)
            inputdir: Source root directory
            outputdir: Output root directory

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        # Get the dictionary of all attributes from the Namespace
        options_dict = vars(options)

        # Get the set of valid field names for ProgramState
        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Filter options_dict to only include fields that exist in ProgramState
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        # Explicit directories override anything of the same name in options
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

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            sources_discover,
            sources_parse,
            results_report
        )

    This is equivalent to:
        results_report(sources_parse(sources_discover(env_check(initial_state))))

    But reads left-to-right instead of inside-out.
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
