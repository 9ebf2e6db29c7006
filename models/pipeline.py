"""Pipeline parsing and execution.

Grammar::

    line        := segment ('|' segment)* redirection?
    segment     := command_name argument*
    redirection := '>' path | '>>' path

Redirection is split off before pipes and binds to the whole pipeline. Both
splits ignore operators inside single or double quotes. Segments are then
tokenized with shell quoting rules.

A line runs entirely locally or is delegated entirely: if any segment names
a command the registry does not know, local output is discarded and the
unmodified line is handed to the AI fallback gateway.
"""

import logging
import shlex
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from models.commands import COMMAND_REGISTRY, CommandContext, ResultKind, dispatch, expand_home
from models.config import Settings
from models.filesystem import FileSystemEngine
from models.gateway import FallbackGateway, OfflineGateway, strip_code_fences
from models.windows import WindowManager

logger = logging.getLogger(__name__)


class PipelineSyntaxError(ValueError):
    """Raised when a line cannot be parsed into a pipeline."""


class Redirection(BaseModel):
    """Output redirection for a whole pipeline.

    Args:
        target: Path the final output is written to.
        append: True for ``>>``, False for ``>``.
    """

    target: str = Field(description="Target path")
    append: bool = Field(default=False, description="Append instead of overwrite")


class CommandInvocation(BaseModel):
    """One pipeline segment: a command name and its arguments."""

    name: str = Field(description="Command name")
    args: list[str] = Field(default_factory=list, description="Arguments")


class Pipeline(BaseModel):
    """A parsed command line.

    Args:
        commands: Segments in execution order.
        redirection: Optional redirection of the final output.
    """

    commands: list[CommandInvocation] = Field(description="Segments in execution order")
    redirection: Optional[Redirection] = Field(default=None, description="Output redirection")


def _unquoted_positions(text: str, operator: str) -> Iterable[int]:
    """Yield indices of ``operator`` characters outside quotes."""
    quote = None
    escaped = False
    for index, char in enumerate(text):
        if escaped:
            escaped = False
        elif char == "\\" and quote != "'":
            escaped = True
        elif quote:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == operator:
            yield index


def tokenize(segment: str) -> list[str]:
    """Split a segment into words with shell quoting rules.

    An unterminated quote falls back to plain whitespace splitting.
    """
    try:
        return shlex.split(segment)
    except ValueError:
        return segment.split()


def split_redirection(line: str) -> tuple[str, Optional[Redirection]]:
    """Split the redirection clause off a line.

    Raises:
        PipelineSyntaxError: If the redirection has no single target.
    """
    position = next(iter(_unquoted_positions(line, ">")), None)
    if position is None:
        return line, None

    append = line[position + 1:position + 2] == ">"
    target_text = line[position + (2 if append else 1):]
    words = tokenize(target_text)
    if not words:
        raise PipelineSyntaxError("syntax error near unexpected token `newline'")
    extra_operator = next(iter(_unquoted_positions(target_text, ">")), None) is not None
    if len(words) > 1 or extra_operator:
        unexpected = ">" if extra_operator else words[1]
        raise PipelineSyntaxError(f"syntax error near unexpected token `{unexpected}'")
    return line[:position], Redirection(target=words[0], append=append)


def split_pipes(text: str) -> list[str]:
    """Split on unquoted ``|`` characters."""
    segments = []
    start = 0
    for position in _unquoted_positions(text, "|"):
        segments.append(text[start:position])
        start = position + 1
    segments.append(text[start:])
    return segments


def parse_line(line: str) -> Pipeline:
    """Parse a command line into a Pipeline.

    Raises:
        PipelineSyntaxError: On an empty segment or redirection target.

    Example:
        >>> pipeline = parse_line("cat notes.txt | grep todo >> out.txt")
        >>> [c.name for c in pipeline.commands], pipeline.redirection.append
        (['cat', 'grep'], True)
    """
    body, redirection = split_redirection(line)
    commands = []
    for segment in split_pipes(body):
        words = tokenize(segment)
        if not words:
            raise PipelineSyntaxError("syntax error near unexpected token `|'")
        commands.append(CommandInvocation(name=words[0], args=words[1:]))
    return Pipeline(commands=commands, redirection=redirection)


class OutcomeKind(str, Enum):
    """How a submitted line finished."""

    RENDERED = "rendered"
    DELEGATED = "delegated"
    CLEARED = "cleared"


class PipelineOutcome(BaseModel):
    """Result of executing one line.

    Args:
        kind: How the line finished.
        output: Plain text to show in the session log.
        markup: Optional rich markup rendering of ``output``.
        new_cwd: Working directory to switch to (local lines only).
        redirection: Redirection parsed from the line, if any.
    """

    kind: OutcomeKind = Field(description="How the line finished")
    output: str = Field(default="", description="Plain text for the session log")
    markup: Optional[str] = Field(default=None, description="Rich markup for display")
    new_cwd: Optional[str] = Field(default=None, description="New working directory")
    redirection: Optional[Redirection] = Field(default=None, description="Parsed redirection")


class PipelineExecutor:
    """Runs command lines against a shared filesystem engine.

    Args:
        engine: Shared filesystem engine.
        gateway: AI fallback gateway for lines that cannot run locally.
        windows: Window manager consulted by ps and kill.
        settings: Simulator settings.
    """

    def __init__(
        self,
        engine: FileSystemEngine,
        gateway: FallbackGateway | None = None,
        windows: WindowManager | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.engine = engine
        self.gateway = gateway or OfflineGateway()
        self.windows = windows
        self.settings = settings or Settings()

    def run_local(self, line: str, cwd: str, history: list[str] | None = None) -> PipelineOutcome:
        """Execute a line with builtins only.

        Returns a DELEGATED outcome, with no output, when any segment cannot
        run locally. Unknown names are detected before the first segment
        runs, so a delegated line has no builtin side effects.

        Args:
            line: The submitted line.
            cwd: Working directory of the session.
            history: Session history for the ``history`` builtin.

        Returns:
            The outcome of the local run.
        """
        try:
            pipeline = parse_line(line)
        except PipelineSyntaxError as e:
            return PipelineOutcome(kind=OutcomeKind.RENDERED, output=f"des: {e}")

        if any(invocation.name not in COMMAND_REGISTRY for invocation in pipeline.commands):
            logger.info(f"Delegating line to gateway: {line!r}")
            return PipelineOutcome(kind=OutcomeKind.DELEGATED, redirection=pipeline.redirection)

        context = CommandContext(
            cwd=cwd,
            engine=self.engine,
            windows=self.windows,
            history=list(history or []),
            settings=self.settings,
        )

        stdin = ""
        markup = None
        new_cwd = None
        for invocation in pipeline.commands:
            context.stdin = stdin
            result = dispatch(invocation.name, invocation.args, context)

            if result.kind == ResultKind.DELEGATE:
                logger.info(f"Delegating line to gateway: {line!r}")
                return PipelineOutcome(kind=OutcomeKind.DELEGATED, redirection=pipeline.redirection)
            if result.kind == ResultKind.CLEAR:
                return PipelineOutcome(kind=OutcomeKind.CLEARED)
            if result.kind == ResultKind.CHANGE_DIRECTORY:
                new_cwd = result.new_cwd
                stdin, markup = "", None
            else:
                stdin, markup = result.output, result.markup

        if pipeline.redirection:
            error = self.write_redirect(pipeline.redirection, cwd, stdin)
            return PipelineOutcome(
                kind=OutcomeKind.RENDERED,
                output=error or "",
                new_cwd=new_cwd,
                redirection=pipeline.redirection,
            )

        return PipelineOutcome(
            kind=OutcomeKind.RENDERED, output=stdin, markup=markup, new_cwd=new_cwd
        )

    async def delegate(self, line: str, cwd: str, redirection: Redirection | None = None) -> PipelineOutcome:
        """Hand a line to the gateway and shape its answer as an outcome."""
        response = await self.gateway.respond(line, cwd, self.engine.get_summary())
        text = strip_code_fences(response)

        if redirection:
            error = self.write_redirect(redirection, cwd, text)
            return PipelineOutcome(
                kind=OutcomeKind.DELEGATED, output=error or "", redirection=redirection
            )
        return PipelineOutcome(kind=OutcomeKind.DELEGATED, output=text)

    async def execute(self, line: str, cwd: str, history: list[str] | None = None) -> PipelineOutcome:
        """Execute a line locally, falling back to the gateway."""
        outcome = self.run_local(line, cwd, history)
        if outcome.kind == OutcomeKind.DELEGATED:
            return await self.delegate(line, cwd, outcome.redirection)
        return outcome

    def write_redirect(self, redirection: Redirection, cwd: str, text: str) -> Optional[str]:
        """Write pipeline output to a redirection target.

        ``>>`` appends on a new line, or writes directly when the file is
        absent or empty.

        Returns:
            An error line if the write failed, otherwise None.
        """
        home = self.settings.home or f"/home/{self.settings.username}"
        path = self.engine.resolve_path(cwd, expand_home(redirection.target, home))

        if self.engine.is_directory(path):
            return f"des: {redirection.target}: Is a directory"

        content = text
        if redirection.append:
            existing = self.engine.read_file(path)
            if existing:
                content = existing + "\n" + text

        if not self.engine.write_file(path, content):
            return f"des: {redirection.target}: No such file or directory"
        return None
