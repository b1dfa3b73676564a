from __future__ import annotations

import json

import pytest

from pong.contracts.error import (
    BadInputError,
    EnvelopeError,
    ErrorEnvelope,
    Exit,
    IOErrorEnvelope,
    die,
    guard_cli,
)


def test_envelope_omits_empty_hint() -> None:
    assert json.loads(ErrorEnvelope("BadInput", "nope").to_json()) == {
        "error": "BadInput",
        "detail": "nope",
    }
    assert json.loads(ErrorEnvelope("IO", "gone", hint="check path").to_json())["hint"] == (
        "check path"
    )


def test_die_writes_envelope_and_exits(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        die(Exit.IO, "IO", "disk on fire")
    assert excinfo.value.code == 5
    assert json.loads(capsys.readouterr().err) == {"error": "IO", "detail": "disk on fire"}


@pytest.mark.parametrize(
    ("exc", "code", "kind"),
    [
        (BadInputError("bad flag", hint="try --help"), Exit.BAD_INPUT, "BadInput"),
        (IOErrorEnvelope("unreadable"), Exit.IO, "IO"),
        (EnvelopeError("odd"), Exit.UNHANDLED, "UnhandledEnvelope"),
        (FileNotFoundError("missing.toml"), Exit.IO, "FileNotFound"),
        (RuntimeError("kaboom"), Exit.UNHANDLED, "Unhandled"),
    ],
)
def test_guard_cli_maps_exceptions(
    capsys: pytest.CaptureFixture[str], exc: Exception, code: Exit, kind: str
) -> None:
    @guard_cli
    def handler() -> int:
        raise exc

    with pytest.raises(SystemExit) as excinfo:
        handler()
    assert excinfo.value.code == int(code)
    env = json.loads(capsys.readouterr().err.splitlines()[-1])
    assert env["error"] == kind
    if isinstance(exc, EnvelopeError) and exc.hint:
        assert env["hint"] == exc.hint


def test_guard_cli_passes_through_results() -> None:
    @guard_cli
    def handler(value: int) -> int:
        return value * 2

    assert handler(21) == 42


def test_exit_codes_are_stable() -> None:
    assert [(code.name, int(code)) for code in Exit] == [
        ("OK", 0),
        ("BAD_INPUT", 2),
        ("UNHANDLED", 4),
        ("IO", 5),
    ]
