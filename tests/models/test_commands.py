"""Unit tests for the builtin shell commands.

Each builtin is called through ``dispatch`` with a CommandContext rooted at
the home directory of the default seed tree.
"""

import pytest

from models.commands import (
    COMMAND_REGISTRY,
    HELP_TEXT,
    KERNEL_RELEASE,
    PS_HEADER,
    CommandContext,
    ResultKind,
    dispatch,
    expand_home,
    split_flags,
)
from models.config import Settings

HOME = "/home/user"


def run(engine, line_args, cwd=HOME, stdin="", windows=None, history=None):
    """Run one builtin; ``line_args`` is the command name followed by its args."""
    name, *args = line_args
    context = CommandContext(
        cwd=cwd,
        engine=engine,
        stdin=stdin,
        windows=windows,
        history=history or [],
        settings=Settings(username="user", hostname="desktop"),
    )
    return dispatch(name, args, context)


def output(engine, line_args, **kwargs):
    return run(engine, line_args, **kwargs).output


class TestHelpers:
    """Test argument helpers."""

    def test_split_flags_combined(self):
        assert split_flags(["-la", "Documents"]) == ({"l", "a"}, ["Documents"])

    def test_split_flags_double_dash(self):
        assert split_flags(["--", "-file"]) == (set(), ["-file"])

    def test_split_flags_lone_dash_is_operand(self):
        assert split_flags(["-"]) == (set(), ["-"])

    def test_expand_home(self):
        assert expand_home("~", HOME) == HOME
        assert expand_home("~/Documents", HOME) == "/home/user/Documents"
        assert expand_home("a~b", HOME) == "a~b"

    def test_unknown_command_delegates(self, engine):
        assert run(engine, ["frobnicate"]).kind == ResultKind.DELEGATE

    def test_registry_contains_builtins(self):
        for name in ["ls", "cd", "pwd", "cat", "echo", "grep", "head", "tail", "mkdir",
                     "touch", "rm", "cp", "mv", "chmod", "ps", "kill", "whoami", "date",
                     "uname", "help", "history", "clear"]:
            assert name in COMMAND_REGISTRY


class TestLs:
    """Test ls."""

    def test_lists_home(self, engine):
        assert output(engine, ["ls"]) == "Documents  Tools  Downloads  Desktop"

    def test_hidden_excluded_by_default(self, engine_with_hidden):
        assert output(engine_with_hidden, ["ls", "/tmp"]) == "visible.txt"

    def test_all_shows_hidden(self, engine_with_hidden):
        assert output(engine_with_hidden, ["ls", "-a", "/tmp"]) == "visible.txt  .hidden"

    def test_long_format_file(self, engine):
        engine.write_file("/tmp/hello.txt", "hello")
        line = output(engine, ["ls", "-l", "/tmp/hello.txt"])
        assert line.startswith("-rw-r--r-- 1 user user      5 ")
        assert line.endswith(" hello.txt")

    def test_long_format_directory_entries(self, engine):
        lines = output(engine, ["ls", "-la"]).split("\n")
        assert len(lines) == 5
        assert lines[0].startswith("drwxr-xr-x 1 user user   4096 ")
        assert lines[-1].endswith(".bash_history")

    def test_missing(self, engine):
        assert output(engine, ["ls", "nope"]) == "ls: cannot access 'nope': No such file or directory"

    def test_markup_colours_directories(self, engine):
        result = run(engine, ["ls"])
        assert "[bold blue]Documents[/bold blue]" in result.markup
        assert "[" not in result.output

    def test_markup_colours_executables(self, engine):
        assert run(engine, ["ls", "Tools"]).markup == "[bold green]scan.py[/bold green]"

    def test_tilde(self, engine):
        assert output(engine, ["ls", "~/Desktop"], cwd="/") == "todo.md"


class TestCdAndPwd:
    """Test cd and pwd."""

    def test_cd_relative(self, engine):
        result = run(engine, ["cd", "Documents"])
        assert result.kind == ResultKind.CHANGE_DIRECTORY
        assert result.new_cwd == "/home/user/Documents"

    def test_cd_defaults_to_home(self, engine):
        assert run(engine, ["cd"], cwd="/etc").new_cwd == HOME

    def test_cd_tilde(self, engine):
        assert run(engine, ["cd", "~/Tools"], cwd="/").new_cwd == "/home/user/Tools"

    def test_cd_parent(self, engine):
        assert run(engine, ["cd", ".."]).new_cwd == "/home"

    def test_cd_missing(self, engine):
        result = run(engine, ["cd", "nope"])
        assert result.kind == ResultKind.TEXT
        assert result.output == "cd: nope: No such file or directory"

    def test_cd_file(self, engine):
        assert output(engine, ["cd", "/etc/passwd"]) == "cd: /etc/passwd: Not a directory"

    def test_pwd(self, engine):
        assert output(engine, ["pwd"], cwd="/tmp") == "/tmp"


class TestCatAndEcho:
    """Test cat and echo."""

    def test_cat_file(self, engine):
        assert output(engine, ["cat", "/etc/hostname"]) == "desktop"

    def test_cat_concatenates(self, engine):
        engine.write_file("/tmp/a", "A")
        engine.write_file("/tmp/b", "B")
        assert output(engine, ["cat", "/tmp/a", "/tmp/b"]) == "A\nB"

    def test_cat_stdin(self, engine):
        assert output(engine, ["cat"], stdin="piped") == "piped"

    def test_cat_missing(self, engine):
        assert output(engine, ["cat", "nope"]) == "cat: nope: No such file or directory"

    def test_cat_directory(self, engine):
        assert output(engine, ["cat", "Documents"]) == "cat: Documents: Is a directory"

    def test_echo(self, engine):
        assert output(engine, ["echo", "hello", "world"]) == "hello world"

    def test_echo_empty(self, engine):
        assert output(engine, ["echo"]) == ""


class TestGrep:
    """Test grep."""

    TEXT = "alpha\nbeta\nAlpha"

    def test_match(self, engine):
        assert output(engine, ["grep", "alpha"], stdin=self.TEXT) == "alpha"

    def test_ignore_case(self, engine):
        assert output(engine, ["grep", "-i", "alpha"], stdin=self.TEXT) == "alpha\nAlpha"

    def test_invert(self, engine):
        assert output(engine, ["grep", "-v", "alpha"], stdin=self.TEXT) == "beta\nAlpha"

    def test_line_numbers(self, engine):
        assert output(engine, ["grep", "-n", "a"], stdin="x\nab") == "2:ab"

    def test_count(self, engine):
        assert output(engine, ["grep", "-ic", "alpha"], stdin=self.TEXT) == "2"

    def test_no_match(self, engine):
        assert output(engine, ["grep", "gamma"], stdin=self.TEXT) == ""

    def test_literal_pattern(self, engine):
        assert output(engine, ["grep", "a.c"], stdin="abc\na.c") == "a.c"

    def test_file(self, engine):
        assert output(engine, ["grep", "root", "/etc/passwd"]) == "root:x:0:0:root:/root:/bin/bash"

    def test_missing_file(self, engine):
        assert output(engine, ["grep", "x", "nope"]) == "grep: nope: No such file or directory"

    def test_invalid_option(self, engine):
        assert output(engine, ["grep", "-z", "x"]) == "grep: invalid option -- 'z'"

    def test_usage(self, engine):
        assert output(engine, ["grep"]).startswith("grep: usage:")

    def test_markup_highlights_matches(self, engine):
        result = run(engine, ["grep", "ph"], stdin="alpha")
        assert result.output == "alpha"
        assert result.markup == "al[bold red]ph[/bold red]a"

    def test_markup_escapes_brackets(self, engine):
        result = run(engine, ["grep", "x"], stdin="[b]x")
        assert result.output == "[b]x"
        assert result.markup == "\\[b][bold red]x[/bold red]"


class TestHeadAndTail:
    """Test head and tail."""

    LINES = "\n".join(str(n) for n in range(1, 16))

    def test_head_default(self, engine):
        assert output(engine, ["head"], stdin=self.LINES) == "\n".join(str(n) for n in range(1, 11))

    def test_head_n(self, engine):
        assert output(engine, ["head", "-n", "3"], stdin=self.LINES) == "1\n2\n3"

    def test_head_attached_count(self, engine):
        assert output(engine, ["head", "-n2"], stdin=self.LINES) == "1\n2"

    def test_head_numeric_shorthand(self, engine):
        assert output(engine, ["head", "-3"], stdin=self.LINES) == "1\n2\n3"

    def test_tail_default(self, engine):
        assert output(engine, ["tail"], stdin=self.LINES).split("\n")[0] == "6"

    def test_tail_n(self, engine):
        assert output(engine, ["tail", "-n", "2"], stdin=self.LINES) == "14\n15"

    def test_tail_zero(self, engine):
        assert output(engine, ["tail", "-n", "0"], stdin=self.LINES) == ""

    def test_file(self, engine):
        assert output(engine, ["head", "-n", "1", "/etc/passwd"]) == "root:x:0:0:root:/root:/bin/bash"

    def test_missing_argument(self, engine):
        assert output(engine, ["head", "-n"]) == "head: option requires an argument -- 'n'"

    def test_invalid_count(self, engine):
        assert output(engine, ["tail", "-n", "x"]) == "tail: invalid number of lines: 'x'"


class TestMkdirTouch:
    """Test mkdir and touch."""

    def test_mkdir(self, engine):
        assert output(engine, ["mkdir", "work"]) == ""
        assert engine.is_directory("/home/user/work")

    def test_mkdir_exists(self, engine):
        assert output(engine, ["mkdir", "Documents"]) == "mkdir: cannot create directory 'Documents': File exists"

    def test_mkdir_missing_parent(self, engine):
        assert output(engine, ["mkdir", "a/b"]) == "mkdir: cannot create directory 'a/b': No such file or directory"

    def test_mkdir_parents(self, engine):
        assert output(engine, ["mkdir", "-p", "a/b/c"]) == ""
        assert engine.is_directory("/home/user/a/b/c")

    def test_mkdir_missing_operand(self, engine):
        assert output(engine, ["mkdir"]) == "mkdir: missing operand"

    def test_touch_creates_empty_file(self, engine):
        assert output(engine, ["touch", "new.txt"]) == ""
        assert engine.read_file("/home/user/new.txt") == ""

    def test_touch_keeps_content(self, engine):
        output(engine, ["touch", "/etc/hostname"])
        assert engine.read_file("/etc/hostname") == "desktop"

    def test_touch_missing_directory(self, engine):
        assert output(engine, ["touch", "nope/x"]) == "touch: cannot touch 'nope/x': No such file or directory"

    def test_touch_missing_operand(self, engine):
        assert output(engine, ["touch"]) == "touch: missing file operand"


class TestRm:
    """Test rm."""

    def test_remove_file(self, engine):
        assert output(engine, ["rm", "Desktop/todo.md"]) == ""
        assert not engine.exists("/home/user/Desktop/todo.md")

    def test_directory_needs_recursive(self, engine):
        assert output(engine, ["rm", "Documents"]) == "rm: cannot remove 'Documents': Is a directory"
        assert engine.exists("/home/user/Documents")

    def test_recursive(self, engine):
        assert output(engine, ["rm", "-r", "Documents"]) == ""
        assert not engine.exists("/home/user/Documents/Notes/welcome.txt")

    def test_missing(self, engine):
        assert output(engine, ["rm", "nope"]) == "rm: cannot remove 'nope': No such file or directory"

    def test_force_silences_missing(self, engine):
        assert output(engine, ["rm", "-rf", "nope"]) == ""

    def test_root_refused(self, engine):
        assert output(engine, ["rm", "-rf", "/"]) == "rm: it is dangerous to operate recursively on '/'"
        assert engine.exists("/etc")

    def test_missing_operand(self, engine):
        assert output(engine, ["rm"]) == "rm: missing operand"


class TestCpMv:
    """Test cp and mv."""

    def test_cp_file(self, engine):
        assert output(engine, ["cp", "/etc/hostname", "/tmp/h"]) == ""
        assert engine.read_file("/tmp/h") == "desktop"

    def test_cp_directory_needs_recursive(self, engine):
        assert output(engine, ["cp", "Documents", "/tmp"]) == "cp: -r not specified; omitting directory 'Documents'"

    def test_cp_recursive(self, engine):
        assert output(engine, ["cp", "-r", "Documents", "/tmp"]) == ""
        assert engine.exists("/tmp/Documents/Notes/welcome.txt")

    def test_cp_missing_source(self, engine):
        assert output(engine, ["cp", "nope", "/tmp"]) == "cp: cannot stat 'nope': No such file or directory"

    def test_cp_missing_destination(self, engine):
        assert output(engine, ["cp", "a"]) == "cp: missing destination file operand after 'a'"

    def test_cp_missing_operands(self, engine):
        assert output(engine, ["cp"]) == "cp: missing file operand"

    def test_cp_many_sources_need_directory(self, engine):
        assert output(engine, ["cp", "/etc/passwd", "/etc/hostname", "/tmp/x"]) == "cp: target '/tmp/x' is not a directory"

    def test_cp_many_sources(self, engine):
        assert output(engine, ["cp", "/etc/passwd", "/etc/hostname", "/tmp"]) == ""
        assert engine.exists("/tmp/passwd")
        assert engine.exists("/tmp/hostname")

    def test_mv_rename(self, engine):
        assert output(engine, ["mv", "Desktop/todo.md", "Desktop/done.md"]) == ""
        assert engine.exists("/home/user/Desktop/done.md")
        assert not engine.exists("/home/user/Desktop/todo.md")

    def test_mv_into_itself(self, engine):
        assert output(engine, ["mv", "Documents", "Documents/Notes"]) == "mv: cannot move 'Documents' to 'Documents/Notes'"


class TestChmod:
    """Test chmod."""

    def test_symbolic(self, engine):
        assert output(engine, ["chmod", "+x", "Desktop/todo.md"]) == ""
        assert engine.get_node("/home/user/Desktop/todo.md").permissions == "-rwxr-xr-x"

    def test_mode_that_looks_like_flag(self, engine):
        assert output(engine, ["chmod", "-x", "Tools/scan.py"]) == ""
        assert engine.get_node("/home/user/Tools/scan.py").permissions == "-rw-r--r--"

    def test_numeric(self, engine):
        output(engine, ["chmod", "700", "Documents"])
        assert engine.get_node("/home/user/Documents").permissions == "drwx------"

    def test_invalid_mode(self, engine):
        assert output(engine, ["chmod", "abc", "Documents"]) == "chmod: invalid mode: 'abc'"

    def test_missing_operand(self, engine):
        assert output(engine, ["chmod", "755"]) == "chmod: missing operand"

    def test_missing_file(self, engine):
        assert output(engine, ["chmod", "755", "nope"]) == "chmod: cannot access 'nope': No such file or directory"


class TestProcesses:
    """Test ps and kill against the window manager."""

    def test_ps_without_windows(self, engine, window_manager):
        lines = output(engine, ["ps"], windows=window_manager).split("\n")
        assert lines[0] == PS_HEADER
        assert [line.split()[-1] for line in lines[1:]] == ["systemd", "kthreadd", "bash"]

    def test_ps_lists_windows_in_order(self, engine, window_manager):
        window_manager.open("terminal")
        window_manager.open("browser")
        lines = output(engine, ["ps"], windows=window_manager).split("\n")
        assert lines[3] == " 1000 pts/0    00:00:00 terminal"
        assert lines[4] == " 1001 pts/0    00:00:00 browser"
        assert lines[5] == "  500 pts/0    00:00:00 bash"

    def test_kill_closes_window(self, engine, window_manager):
        window_manager.open("terminal")
        window_manager.open("notes")
        assert output(engine, ["kill", "1000"], windows=window_manager) == "[1]  + terminated  Terminal"
        assert [w.app_id for w in window_manager.list_windows()] == ["notes"]

    def test_kill_ignores_signal(self, engine, window_manager):
        window_manager.open("paint")
        assert output(engine, ["kill", "-9", "1000"], windows=window_manager) == "[1]  + terminated  Paint"

    def test_kill_unmapped(self, engine, window_manager):
        assert output(engine, ["kill", "1"], windows=window_manager) == "kill: (1) - No such process"

    def test_kill_invalid_pid(self, engine, window_manager):
        assert output(engine, ["kill", "abc"], windows=window_manager) == "kill: invalid pid"

    def test_kill_usage(self, engine):
        assert output(engine, ["kill"]) == "kill: usage: kill PID"


class TestSystemInformation:
    """Test whoami, date, uname, help, history and clear."""

    def test_whoami(self, engine):
        assert output(engine, ["whoami"]) == "user"

    def test_date(self, engine):
        assert output(engine, ["date"]).split()[-2] == "UTC"

    def test_uname(self, engine):
        assert output(engine, ["uname"]) == "Linux"

    def test_uname_all(self, engine):
        text = output(engine, ["uname", "-a"])
        assert text.startswith(f"Linux desktop {KERNEL_RELEASE}")
        assert text.endswith("GNU/Linux")

    def test_uname_fields(self, engine):
        assert output(engine, ["uname", "-sr"]) == f"Linux {KERNEL_RELEASE}"
        assert output(engine, ["uname", "-n"]) == "desktop"

    def test_help(self, engine):
        assert output(engine, ["help"]) == HELP_TEXT

    def test_history(self, engine):
        assert output(engine, ["history"], history=["ls", "pwd"]) == "    1  ls\n    2  pwd"

    def test_clear(self, engine):
        assert run(engine, ["clear"]).kind == ResultKind.CLEAR


@pytest.mark.parametrize("args", [["ls", "-z"], ["cat", "/"], ["rm", "-f"], ["head", "-q", "/etc/hostname"]])
def test_builtins_never_raise(engine, args):
    """Odd input produces a message or nothing, never an exception."""
    assert isinstance(output(engine, args), str)
