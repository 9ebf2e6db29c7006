"""Builtin shell commands.

Every builtin is a handler ``(args, context) -> CommandResult`` registered by
name in ``COMMAND_REGISTRY``. Handlers never raise for bad user input; they
return Unix-style messages as ordinary output instead. A name missing from
the registry means the line has to be delegated to the AI fallback gateway.

Results carry plain text for pipes and redirection, plus optional rich
markup for display (directory colours, grep highlights).
"""

import logging
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, Field
from rich.markup import escape

from models.config import Settings
from models.filesystem import FileSystemEngine, FileSystemNode, VirtualPath, apply_mode
from models.windows import WindowManager

logger = logging.getLogger(__name__)

KERNEL_RELEASE = "6.8.0-des-amd64"
MACHINE = "x86_64"

HELP_TEXT = (
    "Available commands:\n"
    "Core: ls, cd, pwd, cat, echo, clear, history, date, uname, whoami\n"
    "File Ops: cp, mv, rm, mkdir, touch, chmod\n"
    "Process: ps, kill\n"
    "Text: grep, head, tail\n"
    "Features: Pipes (|), Redirection (>, >>), Tab completion\n"
    "Anything else (nmap, hydra, sqlmap ...) is simulated by the AI gateway"
)

# Fixed rows shown by ps around the window rows
PS_HEADER = "  PID TTY          TIME CMD"
PS_SYSTEM_ROWS = [(1, "?", "00:00:01", "systemd"), (10, "?", "00:00:00", "kthreadd")]
PS_SHELL_ROW = (500, "pts/0", "00:00:00", "bash")
WINDOW_PID_BASE = 1000

ARCHIVE_SUFFIXES = (".tar", ".zip", ".gz")
SCRIPT_SUFFIXES = (".sh", ".py")
IMAGE_SUFFIXES = (".jpg", ".png")


class ResultKind(str, Enum):
    """What the pipeline executor should do with a command result."""

    TEXT = "text"
    CHANGE_DIRECTORY = "change_directory"
    CLEAR = "clear"
    DELEGATE = "delegate"


class CommandResult(BaseModel):
    """Outcome of running one builtin.

    Args:
        kind: Result variant.
        output: Plain text output (piped to the next segment).
        markup: Optional rich markup rendering of ``output`` for display.
        new_cwd: Target directory (CHANGE_DIRECTORY only).
    """

    kind: ResultKind = Field(default=ResultKind.TEXT, description="Result variant")
    output: str = Field(default="", description="Plain text output")
    markup: Optional[str] = Field(default=None, description="Rich markup for display")
    new_cwd: Optional[str] = Field(default=None, description="New working directory")

    @classmethod
    def text(cls, output: str, markup: str | None = None) -> "CommandResult":
        return cls(kind=ResultKind.TEXT, output=output, markup=markup)

    @classmethod
    def change_directory(cls, path: str) -> "CommandResult":
        return cls(kind=ResultKind.CHANGE_DIRECTORY, new_cwd=path)

    @classmethod
    def clear(cls) -> "CommandResult":
        return cls(kind=ResultKind.CLEAR)

    @classmethod
    def delegate(cls) -> "CommandResult":
        return cls(kind=ResultKind.DELEGATE)


class CommandContext(BaseModel):
    """Everything a builtin may read or act on.

    Args:
        cwd: Working directory of the session.
        engine: Shared filesystem engine.
        stdin: Piped input from the previous pipeline segment.
        windows: Window manager consulted by ps and kill.
        history: Session command history, oldest first.
        settings: Simulator settings (user, host, home).
    """

    cwd: str = Field(description="Working directory")
    engine: FileSystemEngine = Field(description="Shared filesystem engine")
    stdin: str = Field(default="", description="Piped input")
    windows: Optional[WindowManager] = Field(default=None, description="Window manager")
    history: list[str] = Field(default_factory=list, description="Session command history")
    settings: Settings = Field(default_factory=Settings, description="Simulator settings")

    class Config:
        arbitrary_types_allowed = True

    @property
    def home(self) -> str:
        return self.settings.home or f"/home/{self.settings.username}"

    def resolve(self, arg: str) -> VirtualPath:
        """Resolve a command argument against the working directory."""
        return self.engine.resolve_path(self.cwd, expand_home(arg, self.home))


CommandHandler = Callable[[list[str], CommandContext], CommandResult]

COMMAND_REGISTRY: dict[str, CommandHandler] = {}


def command(name: str) -> Callable[[CommandHandler], CommandHandler]:
    """Register a handler under a command name."""

    def decorator(handler: CommandHandler) -> CommandHandler:
        COMMAND_REGISTRY[name] = handler
        return handler

    return decorator


def dispatch(name: str, args: list[str], context: CommandContext) -> CommandResult:
    """Run a command by name, delegating names the registry does not know."""
    handler = COMMAND_REGISTRY.get(name)
    if handler is None:
        logger.debug(f"No builtin named {name!r}, delegating")
        return CommandResult.delegate()
    return handler(args, context)


def expand_home(arg: str, home: str) -> str:
    """Expand a leading ``~`` to the home directory.

    Example:
        >>> expand_home("~/Documents", "/home/user")
        '/home/user/Documents'
    """
    if arg == "~":
        return home
    if arg.startswith("~/"):
        return home + arg[1:]
    return arg


def split_flags(args: list[str]) -> tuple[set[str], list[str]]:
    """Separate combinable single-letter flags from operands.

    ``-la`` yields ``{"l", "a"}``. A lone ``-`` and everything after ``--``
    are operands.
    """
    flags: set[str] = set()
    operands: list[str] = []
    for index, arg in enumerate(args):
        if arg == "--":
            operands.extend(args[index + 1:])
            break
        if arg.startswith("-") and len(arg) > 1:
            flags.update(arg[1:])
        else:
            operands.append(arg)
    return flags, operands


def _missing_message(name: str, arg: str, engine: FileSystemEngine, path: VirtualPath) -> str:
    if engine.is_directory(path):
        return f"{name}: {arg}: Is a directory"
    return f"{name}: {arg}: No such file or directory"


def _style_for(node: FileSystemNode) -> Optional[str]:
    """Display style for a listing entry."""
    if node.is_directory:
        return "bold blue"
    if node.name.endswith(ARCHIVE_SUFFIXES):
        return "bold red"
    if "x" in node.permissions or node.name.endswith(SCRIPT_SUFFIXES):
        return "bold green"
    if node.name.endswith(IMAGE_SUFFIXES):
        return "bold magenta"
    return None


def _styled(text: str, style: Optional[str]) -> str:
    if style is None:
        return escape(text)
    return f"[{style}]{escape(text)}[/{style}]"


# ===== Navigation & Listing =====


@command("ls")
def ls(args: list[str], context: CommandContext) -> CommandResult:
    flags, operands = split_flags(args)
    show_hidden = "a" in flags
    long_format = "l" in flags

    arg = operands[-1] if operands else ""
    target = context.resolve(arg) if arg else context.resolve(context.cwd)
    node = context.engine.get_node(target)
    if node is None:
        return CommandResult.text(f"ls: cannot access '{arg or context.cwd}': No such file or directory")

    if node.is_directory:
        entries = [
            child for child in node.children if show_hidden or not child.name.startswith(".")
        ]
    else:
        entries = [node]

    if not long_format:
        return CommandResult.text(
            "  ".join(entry.name for entry in entries),
            "  ".join(_styled(entry.name, _style_for(entry)) for entry in entries),
        )

    plain_lines = []
    markup_lines = []
    for entry in entries:
        prefix = (
            f"{entry.permissions} 1 {entry.owner} {entry.group} "
            f"{entry.size:>6} {entry.created_at.strftime('%b %d %H:%M')} "
        )
        plain_lines.append(prefix + entry.name)
        markup_lines.append(escape(prefix) + _styled(entry.name, _style_for(entry)))
    return CommandResult.text("\n".join(plain_lines), "\n".join(markup_lines))


@command("cd")
def cd(args: list[str], context: CommandContext) -> CommandResult:
    arg = args[0] if args else "~"
    target = context.resolve(arg)
    node = context.engine.get_node(target)
    if node is None:
        return CommandResult.text(f"cd: {arg}: No such file or directory")
    if not node.is_directory:
        return CommandResult.text(f"cd: {arg}: Not a directory")
    return CommandResult.change_directory(str(target))


@command("pwd")
def pwd(args: list[str], context: CommandContext) -> CommandResult:
    return CommandResult.text(context.cwd)


# ===== Text =====


@command("cat")
def cat(args: list[str], context: CommandContext) -> CommandResult:
    if not args:
        return CommandResult.text(context.stdin)

    pieces = []
    for arg in args:
        path = context.resolve(arg)
        content = context.engine.read_file(path)
        pieces.append(content if content is not None else _missing_message("cat", arg, context.engine, path))
    return CommandResult.text("\n".join(pieces))


@command("echo")
def echo(args: list[str], context: CommandContext) -> CommandResult:
    return CommandResult.text(" ".join(args))


def _highlight(line: str, pattern: str, ignore_case: bool) -> str:
    """Return rich markup for a line with every match of pattern highlighted."""
    flags = re.IGNORECASE if ignore_case else 0
    parts = []
    position = 0
    for match in re.finditer(re.escape(pattern), line, flags):
        parts.append(escape(line[position:match.start()]))
        parts.append(_styled(match.group(0), "bold red"))
        position = match.end()
    parts.append(escape(line[position:]))
    return "".join(parts)


@command("grep")
def grep(args: list[str], context: CommandContext) -> CommandResult:
    """Literal, line-by-line substring search over a file or piped input."""
    options: set[str] = set()
    rest = list(args)
    while rest and rest[0].startswith("-") and len(rest[0]) > 1:
        options.update(rest.pop(0)[1:])

    unknown = options - set("ivnc")
    if unknown:
        return CommandResult.text(f"grep: invalid option -- '{sorted(unknown)[0]}'")
    if not rest:
        return CommandResult.text("grep: usage: grep [-i] [-v] [-n] [-c] PATTERN [FILE]")

    pattern = rest[0]
    text = context.stdin
    if len(rest) > 1:
        path = context.resolve(rest[1])
        content = context.engine.read_file(path)
        if content is None:
            return CommandResult.text(_missing_message("grep", rest[1], context.engine, path))
        text = content

    ignore_case = "i" in options
    needle = pattern.lower() if ignore_case else pattern
    matches = []
    for number, line in enumerate(text.split("\n"), start=1):
        haystack = line.lower() if ignore_case else line
        if (needle in haystack) != ("v" in options):
            matches.append((number, line))

    if "c" in options:
        return CommandResult.text(str(len(matches)))

    prefix = "n" in options
    plain = [f"{number}:{line}" if prefix else line for number, line in matches]
    if "v" in options or not pattern:
        return CommandResult.text("\n".join(plain))

    markup = [
        (f"{number}:" if prefix else "") + _highlight(line, pattern, ignore_case)
        for number, line in matches
    ]
    return CommandResult.text("\n".join(plain), "\n".join(markup))


def _line_window(name: str, args: list[str], context: CommandContext) -> tuple[Optional[list[str]], int, str]:
    """Shared argument handling for head and tail.

    Returns:
        ``(lines, count, error)``; ``lines`` is None when ``error`` is set.
    """
    count = 10
    operands = []
    index = 0
    while index < len(args):
        arg = args[index]
        if arg == "-n" or (arg.startswith("-n") and len(arg) > 2):
            value = arg[2:] or (args[index + 1] if index + 1 < len(args) else None)
            if value is None:
                return None, 0, f"{name}: option requires an argument -- 'n'"
            if not value.isdigit():
                return None, 0, f"{name}: invalid number of lines: '{value}'"
            count = int(value)
            index += 1 if arg[2:] else 2
            continue
        if arg.startswith("-") and len(arg) > 1:
            # -N is shorthand for -n N; other options are ignored
            if arg[1:].isdigit():
                count = int(arg[1:])
        else:
            operands.append(arg)
        index += 1

    text = context.stdin
    if operands:
        path = context.resolve(operands[0])
        content = context.engine.read_file(path)
        if content is None:
            return None, 0, _missing_message(name, operands[0], context.engine, path)
        text = content

    return (text.split("\n") if text else []), count, ""


@command("head")
def head(args: list[str], context: CommandContext) -> CommandResult:
    lines, count, error = _line_window("head", args, context)
    if lines is None:
        return CommandResult.text(error)
    return CommandResult.text("\n".join(lines[:count]))


@command("tail")
def tail(args: list[str], context: CommandContext) -> CommandResult:
    lines, count, error = _line_window("tail", args, context)
    if lines is None:
        return CommandResult.text(error)
    return CommandResult.text("\n".join(lines[-count:] if count else []))


# ===== File Operations =====


@command("mkdir")
def mkdir(args: list[str], context: CommandContext) -> CommandResult:
    flags, operands = split_flags(args)
    if not operands:
        return CommandResult.text("mkdir: missing operand")

    engine = context.engine
    errors = []
    for arg in operands:
        target = context.resolve(arg)
        if "p" in flags:
            current = VirtualPath()
            for segment in target.segments:
                current = current.child(segment)
                if not engine.exists(current):
                    engine.make_directory(current)
            if not engine.is_directory(target):
                errors.append(f"mkdir: cannot create directory '{arg}': Not a directory")
            continue

        if engine.exists(target):
            errors.append(f"mkdir: cannot create directory '{arg}': File exists")
        elif not engine.make_directory(target):
            errors.append(f"mkdir: cannot create directory '{arg}': No such file or directory")
    return CommandResult.text("\n".join(errors))


@command("touch")
def touch(args: list[str], context: CommandContext) -> CommandResult:
    if not args:
        return CommandResult.text("touch: missing file operand")

    errors = []
    for arg in args:
        target = context.resolve(arg)
        if context.engine.exists(target):
            continue
        if not context.engine.write_file(target, ""):
            errors.append(f"touch: cannot touch '{arg}': No such file or directory")
    return CommandResult.text("\n".join(errors))


@command("rm")
def rm(args: list[str], context: CommandContext) -> CommandResult:
    flags, operands = split_flags(args)
    recursive = bool(flags & {"r", "R"})
    force = "f" in flags
    if not operands:
        return CommandResult.text("" if force else "rm: missing operand")

    errors = []
    for arg in operands:
        target = context.resolve(arg)
        node = context.engine.get_node(target)
        if target.is_root:
            errors.append("rm: it is dangerous to operate recursively on '/'")
        elif node is None:
            if not force:
                errors.append(f"rm: cannot remove '{arg}': No such file or directory")
        elif node.is_directory and not recursive:
            errors.append(f"rm: cannot remove '{arg}': Is a directory")
        elif not context.engine.delete_item(target):
            errors.append(f"rm: cannot remove '{arg}'")
    return CommandResult.text("\n".join(errors))


def _transfer(name: str, args: list[str], context: CommandContext) -> CommandResult:
    """Shared implementation of cp and mv."""
    flags, operands = split_flags(args)
    if not operands:
        return CommandResult.text(f"{name}: missing file operand")
    if len(operands) == 1:
        return CommandResult.text(f"{name}: missing destination file operand after '{operands[0]}'")

    engine = context.engine
    *sources, destination = operands
    dest_path = context.resolve(destination)
    if len(sources) > 1 and not engine.is_directory(dest_path):
        return CommandResult.text(f"{name}: target '{destination}' is not a directory")

    operation = engine.copy_item if name == "cp" else engine.move_item
    verb = "copy" if name == "cp" else "move"
    errors = []
    for source in sources:
        source_path = context.resolve(source)
        node = engine.get_node(source_path)
        if node is None:
            errors.append(f"{name}: cannot stat '{source}': No such file or directory")
        elif name == "cp" and node.is_directory and not flags & {"r", "R"}:
            errors.append(f"cp: -r not specified; omitting directory '{source}'")
        elif not operation(source_path, dest_path):
            errors.append(f"{name}: cannot {verb} '{source}' to '{destination}'")
    return CommandResult.text("\n".join(errors))


@command("cp")
def cp(args: list[str], context: CommandContext) -> CommandResult:
    return _transfer("cp", args, context)


@command("mv")
def mv(args: list[str], context: CommandContext) -> CommandResult:
    return _transfer("mv", args, context)


@command("chmod")
def chmod(args: list[str], context: CommandContext) -> CommandResult:
    # Modes such as -x look like flags, so arguments are taken positionally
    if len(args) < 2:
        return CommandResult.text("chmod: missing operand")

    mode, paths = args[0], args[1:]
    try:
        apply_mode("-rw-r--r--", mode)
    except ValueError:
        return CommandResult.text(f"chmod: invalid mode: '{mode}'")

    errors = []
    for arg in paths:
        if not context.engine.chmod(context.resolve(arg), mode):
            errors.append(f"chmod: cannot access '{arg}': No such file or directory")
    return CommandResult.text("\n".join(errors))


# ===== Processes =====


def _ps_row(pid: int, tty: str, time: str, name: str) -> str:
    return f"{pid:>5} {tty:<8} {time} {name}"


@command("ps")
def ps(args: list[str], context: CommandContext) -> CommandResult:
    windows = context.windows.list_windows() if context.windows else []
    rows = [PS_HEADER]
    rows.extend(_ps_row(*row) for row in PS_SYSTEM_ROWS)
    for index, window in enumerate(windows):
        rows.append(_ps_row(WINDOW_PID_BASE + index, "pts/0", "00:00:00", window.app_name.lower()))
    rows.append(_ps_row(*PS_SHELL_ROW))
    return CommandResult.text("\n".join(rows))


@command("kill")
def kill(args: list[str], context: CommandContext) -> CommandResult:
    # Signal arguments (-9, -KILL) are accepted and ignored
    operands = [arg for arg in args if not (arg.startswith("-") and len(arg) > 1)]
    if not operands:
        return CommandResult.text("kill: usage: kill PID")
    if not operands[0].isdigit():
        return CommandResult.text("kill: invalid pid")

    pid = int(operands[0])
    windows = context.windows.list_windows() if context.windows else []
    index = pid - WINDOW_PID_BASE
    if 0 <= index < len(windows):
        window = windows[index]
        context.windows.close(window.window_id)
        return CommandResult.text(f"[1]  + terminated  {window.app_name}")
    return CommandResult.text(f"kill: ({pid}) - No such process")


# ===== System Information =====


@command("whoami")
def whoami(args: list[str], context: CommandContext) -> CommandResult:
    return CommandResult.text(context.settings.username)


@command("date")
def date(args: list[str], context: CommandContext) -> CommandResult:
    return CommandResult.text(datetime.now(timezone.utc).strftime("%a %b %d %H:%M:%S UTC %Y"))


@command("uname")
def uname(args: list[str], context: CommandContext) -> CommandResult:
    flags, _ = split_flags(args)
    fields = {
        "s": "Linux",
        "n": context.settings.hostname,
        "r": KERNEL_RELEASE,
        "m": MACHINE,
    }
    if "a" in flags:
        return CommandResult.text(
            f"Linux {context.settings.hostname} {KERNEL_RELEASE} #1 SMP PREEMPT_DYNAMIC "
            f"{MACHINE} GNU/Linux"
        )
    selected = [fields[letter] for letter in "snrm" if letter in flags]
    return CommandResult.text(" ".join(selected) or "Linux")


@command("help")
def help_(args: list[str], context: CommandContext) -> CommandResult:
    return CommandResult.text(HELP_TEXT)


@command("history")
def history(args: list[str], context: CommandContext) -> CommandResult:
    return CommandResult.text(
        "\n".join(f"{number:>5}  {line}" for number, line in enumerate(context.history, start=1))
    )


@command("clear")
def clear(args: list[str], context: CommandContext) -> CommandResult:
    return CommandResult.clear()
