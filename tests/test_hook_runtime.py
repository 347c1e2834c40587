import io
import json

import pytest
from pydantic import ValidationError

from hook_runtime import (
    Decision,
    HookInput,
    HookResult,
    evaluate,
    read_hook_input,
    report,
    run_hook,
)


def always_block(record, settings):
    return HookResult.block(f"no {record.command}")


def explode(record, settings):
    raise OSError("disk on fire")


def test_hook_input_ignores_host_extras():
    record = HookInput.model_validate_json(
        json.dumps(
            {
                "session_id": "abc",
                "hook_event_name": "PreToolUse",
                "tool_name": "Bash",
                "tool_input": {"command": "ls -la", "description": "list"},
            }
        )
    )
    assert record.tool_name == "Bash"
    assert record.command == "ls -la"


def test_hook_input_command_defaults_to_empty():
    assert HookInput(tool_name="Edit", tool_input={"file_path": "a.py"}).command == ""
    assert HookInput(tool_name="Bash", tool_input={"command": ["ls"]}).command == ""


def test_read_hook_input_empty_stream_is_none():
    assert read_hook_input(io.StringIO("  \n")) is None


def test_evaluate_returns_body_decision():
    stream = io.StringIO(json.dumps({"tool_name": "Bash", "tool_input": {"command": "ls"}}))
    result = evaluate(always_block, stream, "test")
    assert result == HookResult(Decision.BLOCK, "no ls")


@pytest.mark.parametrize("payload", ["{not json", "[1, 2, 3]", '"text"', '{"tool_input": "ls"}'])
def test_evaluate_fails_open_on_malformed_input(payload):
    assert evaluate(always_block, io.StringIO(payload), "test") == HookResult.allow()


def test_evaluate_fails_open_when_body_raises():
    stream = io.StringIO(json.dumps({"tool_name": "Bash", "tool_input": {"command": "ls"}}))
    assert evaluate(explode, stream, "test").decision is Decision.ALLOW


def test_evaluate_fails_open_on_invalid_settings(monkeypatch):
    monkeypatch.setenv("TOOL_HOOKS_LOG_LEVEL", "chatty")
    stream = io.StringIO(json.dumps({"tool_name": "Bash", "tool_input": {"command": "ls"}}))
    assert evaluate(always_block, stream, "test").decision is Decision.ALLOW


def test_run_hook_exits_2_and_writes_reason_to_stderr(monkeypatch, capsys):
    monkeypatch.setattr(
        "sys.stdin", io.StringIO(json.dumps({"tool_name": "Bash", "tool_input": {"command": "ls"}}))
    )
    with pytest.raises(SystemExit) as exc:
        run_hook(always_block, "test")

    out, err = capsys.readouterr()
    assert exc.value.code == 2
    assert "no ls" in err
    assert out == ""


def test_run_hook_exits_0_on_malformed_json(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("{oops"))
    with pytest.raises(SystemExit) as exc:
        run_hook(always_block, "test")

    assert exc.value.code == 0
    assert capsys.readouterr() == ("", "")


def test_run_hook_logs_to_project_file_with_code_masked(project_dir, monkeypatch):
    monkeypatch.setattr(
        "sys.stdin",
        io.StringIO(json.dumps({"tool_name": "Bash", "tool_input": {"command": "OTP=123456 ls"}})),
    )
    with pytest.raises(SystemExit):
        run_hook(always_block, "test")

    log_text = (project_dir / ".claude" / "logs" / "tool-hooks.log").read_text(encoding="utf-8")
    assert "hook_decision" in log_text
    assert "OTP=[REDACTED] ls" in log_text
    assert "OTP=123456" not in log_text


def test_read_hook_input_decodes_stdin_bytes_as_utf8():
    payload = json.dumps(
        {"tool_name": "Bash", "tool_input": {"command": "echo ÁRVORE café"}}, ensure_ascii=False
    )
    # A stdin whose locale encoding is not UTF-8, as on a cp1252 Windows host
    stream = io.TextIOWrapper(io.BytesIO(payload.encode("utf-8")), encoding="cp1252")

    assert read_hook_input(stream).command == "echo ÁRVORE café"


def test_read_hook_input_requires_tool_name():
    with pytest.raises(ValidationError):
        read_hook_input(io.StringIO(json.dumps({"tool_input": {"command": "ls"}})))


def test_missing_tool_name_fails_open_and_is_logged(project_dir):
    stream = io.StringIO(json.dumps({"tool_input": {"command": "ls"}}))

    assert evaluate(always_block, stream, "test") == HookResult.allow()

    log_text = (project_dir / ".claude" / "logs" / "tool-hooks.log").read_text(encoding="utf-8")
    assert "hook_failed_open" in log_text
    assert "tool_name" in log_text


def test_report_writes_utf8_regardless_of_stream_encoding():
    stream = io.TextIOWrapper(io.BytesIO(), encoding="ascii")

    report("Use → arrows. Ünïcode note.", stream)

    assert stream.buffer.getvalue().decode("utf-8") == "Use → arrows. Ünïcode note.\n"


def test_run_hook_keeps_decision_when_stderr_is_closed(monkeypatch):
    closed = io.StringIO()
    closed.close()
    monkeypatch.setattr("sys.stderr", closed)
    monkeypatch.setattr(
        "sys.stdin", io.StringIO(json.dumps({"tool_name": "Bash", "tool_input": {"command": "ls"}}))
    )

    with pytest.raises(SystemExit) as exc:
        run_hook(always_block, "test")

    assert exc.value.code == 2
