from logging_config import _mask_command, _scrub_sensitive


def test_mask_command_hides_submitted_code():
    event = _mask_command(None, "info", {"command": "OTP=123456 git commit -m x"})
    assert event["command"] == "OTP=[REDACTED] git commit -m x"


def test_mask_command_leaves_non_ascii_digits_alone():
    event = _mask_command(None, "info", {"command": "OTP=١٢٣٤٥٦ ls"})
    assert event["command"] == "OTP=١٢٣٤٥٦ ls"


def test_mask_command_truncates_long_commands():
    event = _mask_command(None, "info", {"command": "x" * 500})
    assert event["command"] == "x" * 200 + "..."


def test_scrub_sensitive_redacts_code_keys():
    event = _scrub_sensitive(None, "info", {"Code": "123456", "hook": "memory_gate"})
    assert event == {"Code": "[REDACTED]", "hook": "memory_gate"}
