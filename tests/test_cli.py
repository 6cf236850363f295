"""Smoke tests for the CLI entrypoint."""

import pytest
from click.testing import CliRunner

from filesift.classification import CancellationSignal
from filesift.cli import _wait_for, cli


class _InterruptedWorker:
    """Worker stand-in whose first ``interrupts`` joins raise KeyboardInterrupt."""

    def __init__(self, interrupts: int, *, forever: bool = False) -> None:
        self.interrupts = interrupts
        self.forever = forever
        self.joins = 0

    def is_alive(self) -> bool:
        return self.forever or self.joins <= self.interrupts

    def join(self, timeout: float | None = None) -> None:
        self.joins += 1
        if self.forever or self.joins <= self.interrupts:
            raise KeyboardInterrupt


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "filesift classifies every file" in result.output
    assert "scan" in result.output


def test_first_interrupt_requests_stop_and_keeps_waiting() -> None:
    cancel = CancellationSignal()
    notices: list[str] = []
    worker = _InterruptedWorker(interrupts=1)

    _wait_for(worker, cancel, lambda: notices.append("stopping"))  # type: ignore[arg-type]

    assert cancel.requested
    assert notices == ["stopping"]
    assert worker.joins == 2


def test_second_interrupt_aborts_the_wait() -> None:
    cancel = CancellationSignal()
    notices: list[str] = []
    worker = _InterruptedWorker(interrupts=0, forever=True)

    with pytest.raises(KeyboardInterrupt):
        _wait_for(worker, cancel, lambda: notices.append("stopping"))  # type: ignore[arg-type]

    assert cancel.requested
    assert notices == ["stopping"]
    assert worker.joins == 2
