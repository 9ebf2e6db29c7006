"""Tests for terminal sessions and the session manager."""

import asyncio

import pytest

from models.errors import NotADirectory, PathNotFound, SessionBusyError
from models.history import NOT_NAVIGATING
from models.pipeline import OutcomeKind, PipelineExecutor
from models.session import TerminalSession, TurnState
from tests.fixtures.sessions import BlockingGateway, FailingGateway

HOME = "/home/user"


def make_session(engine, gateway, settings, cwd=HOME):
    return TerminalSession(PipelineExecutor(engine, gateway, None, settings), cwd, settings)


class TestSubmit:
    """Test submitting lines to a session."""

    async def test_logs_command_and_output(self, session):
        outcome = await session.submit("echo hi")
        assert outcome.kind == OutcomeKind.RENDERED
        assert [(e.kind, e.text) for e in session.state.log] == [("command", "echo hi"), ("output", "hi")]
        assert session.state.log[0].cwd == HOME
        assert session.state.history.entries == ["echo hi"]
        assert session.state.turn_state == TurnState.IDLE

    async def test_submits_current_input(self, session):
        session.set_input("pwd")
        await session.submit()
        assert session.state.input_text == ""
        assert session.state.log[-1].text == HOME

    async def test_blank_line_ignored(self, session):
        assert await session.submit("   ") is None
        assert session.state.log == []
        assert session.state.history.entries == []

    async def test_empty_output_not_logged(self, session):
        await session.submit("touch /tmp/a")
        assert [e.kind for e in session.state.log] == ["command"]

    async def test_markup_kept_on_log_entry(self, session):
        await session.submit("ls")
        assert "[bold blue]Documents[/bold blue]" in session.state.log[-1].markup

    async def test_cd_changes_cwd_and_prompt(self, session):
        assert session.prompt == "user@desktop:~$"
        await session.submit("cd Documents")
        assert session.state.cwd == "/home/user/Documents"
        assert session.prompt == "user@desktop:~/Documents$"
        await session.submit("cd /tmp")
        assert session.prompt == "user@desktop:/tmp$"

    async def test_command_entry_records_cwd_at_submission(self, session):
        await session.submit("cd /tmp")
        await session.submit("pwd")
        assert session.state.log[0].cwd == HOME
        assert session.state.log[1].cwd == "/tmp"

    async def test_clear_empties_log(self, session):
        await session.submit("echo one")
        outcome = await session.submit("clear")
        assert outcome.kind == OutcomeKind.CLEARED
        assert session.state.log == []
        assert session.state.history.entries == ["echo one", "clear"]

    async def test_delegation(self, session, recording_gateway):
        outcome = await session.submit("nmap localhost")
        assert outcome.kind == OutcomeKind.DELEGATED
        assert session.state.log[-1].text == "simulated output"
        assert recording_gateway.calls[0][:2] == ("nmap localhost", HOME)

    async def test_gateway_failure_rendered(self, engine, test_settings):
        session = make_session(engine, FailingGateway(), test_settings)
        outcome = await session.submit("nmap localhost")
        assert outcome.output == "Error: gateway exploded"
        assert session.state.log[-1].text == "Error: gateway exploded"
        assert session.state.turn_state == TurnState.IDLE


class TestTurnState:
    """Test the one-line-in-flight rule."""

    async def test_busy_while_processing(self, engine, test_settings):
        gateway = BlockingGateway()
        session = make_session(engine, gateway, test_settings)

        task = asyncio.create_task(session.submit("nmap localhost"))
        await gateway.started.wait()
        assert session.state.turn_state == TurnState.PROCESSING
        assert session.get_snapshot()["is_processing"] is True

        with pytest.raises(SessionBusyError):
            await session.submit("ls")

        gateway.release.set()
        outcome = await task
        assert outcome.output == "late output"
        assert session.state.turn_state == TurnState.IDLE
        assert len(gateway.calls) == 1

    async def test_interrupt_does_not_cancel_inflight_line(self, engine, test_settings):
        gateway = BlockingGateway()
        session = make_session(engine, gateway, test_settings)

        task = asyncio.create_task(session.submit("nmap localhost"))
        await gateway.started.wait()
        session.set_input("half typed")
        session.interrupt()
        gateway.release.set()
        await task

        assert [e.text for e in session.state.log] == ["nmap localhost", "half typed^C", "late output"]

    def test_invalid_transition(self, session):
        with pytest.raises(RuntimeError):
            session._transition(TurnState.RENDERED)


class TestInputLine:
    """Test history navigation, completion and interrupt on the input line."""

    async def test_history_navigation(self, session):
        await session.submit("ls")
        await session.submit("pwd")
        assert session.history_previous() == "pwd"
        assert session.history_previous() == "ls"
        assert session.history_previous() == "ls"
        assert session.history_next() == "pwd"
        assert session.history_next() == ""
        assert session.state.history.cursor == NOT_NAVIGATING

    def test_history_on_empty_keeps_input(self, session):
        session.set_input("draft")
        assert session.history_previous() == "draft"
        assert session.history_next() == "draft"

    def test_complete_file_name(self, session):
        session.set_input("cd Doc")
        assert session.complete() == "cd Documents/"

    def test_complete_under_directory(self, session):
        session.set_input("cat Documents/Notes/we")
        assert session.complete() == "cat Documents/Notes/welcome.txt"

    def test_complete_tilde(self, session):
        session.state.cwd = "/"
        session.set_input("cat ~/Desktop/to")
        assert session.complete() == "cat ~/Desktop/todo.md"

    def test_complete_command(self, session):
        session.set_input("hist")
        assert session.complete() == "history"

    def test_interrupt(self, session):
        session.set_input("rm -rf")
        session.interrupt()
        assert session.state.input_text == ""
        assert session.state.log[-1].text == "rm -rf^C"
        assert session.state.log[-1].cwd == HOME

    def test_clear(self, session):
        session.interrupt()
        session.clear()
        assert session.state.log == []


class TestClipboard:
    """Test copy and paste."""

    def test_copy_then_paste(self, session):
        assert session.copy("echo hi") is True
        assert session.paste() == "echo hi"

    def test_paste_appends(self, session):
        session.set_input("cat ")
        session.copy("notes.txt")
        assert session.paste() == "cat notes.txt"

    def test_paste_from_ring(self, session):
        session.copy("first")
        session.copy("second")
        assert session.state.clipboard.items == ["second", "first"]
        assert session.paste(1) == "first"

    def test_paste_missing_index(self, session):
        with pytest.raises(IndexError):
            session.paste(3)

    def test_copy_empty(self, session):
        assert session.copy("") is False


class TestSnapshot:
    async def test_snapshot(self, session):
        await session.submit("echo hi")
        snapshot = session.get_snapshot()
        assert snapshot["session_id"] == session.session_id
        assert snapshot["cwd"] == HOME
        assert snapshot["prompt"] == "user@desktop:~$"
        assert snapshot["turn_state"] == "idle"
        assert snapshot["is_processing"] is False
        assert snapshot["log"][1]["text"] == "hi"


class TestSessionManager:
    """Test creating and tracking sessions."""

    async def test_create_in_home(self, session_manager):
        session = await session_manager.create()
        assert session.state.cwd == HOME
        assert session_manager.get(session.session_id) is session

    async def test_create_with_start_path(self, session_manager):
        assert (await session_manager.create("/tmp")).state.cwd == "/tmp"
        assert (await session_manager.create("~/Documents")).state.cwd == "/home/user/Documents"

    async def test_missing_start_path(self, session_manager):
        with pytest.raises(PathNotFound):
            await session_manager.create("/nope")

    async def test_file_start_path(self, session_manager):
        with pytest.raises(NotADirectory):
            await session_manager.create("/etc/passwd")

    async def test_auto_run(self, session_manager):
        session = await session_manager.create(auto_run="echo ready")
        assert [e.text for e in session.state.log] == ["echo ready", "ready"]

    async def test_list_and_close(self, session_manager):
        first = await session_manager.create()
        second = await session_manager.create()
        assert session_manager.list_sessions() == [first, second]

        assert session_manager.close(first.session_id) is True
        assert session_manager.close(first.session_id) is False
        assert session_manager.get(first.session_id) is None

        session_manager.close_all()
        assert session_manager.list_sessions() == []

    async def test_sessions_share_filesystem(self, session_manager):
        writer = await session_manager.create()
        reader = await session_manager.create("/tmp")
        await writer.submit("echo shared > /tmp/shared.txt")
        await reader.submit("cat shared.txt")
        assert reader.state.log[-1].text == "shared"
        assert writer.state.cwd == HOME
