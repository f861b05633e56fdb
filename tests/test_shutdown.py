"""Tests for the forceful-termination escalation."""

import signal

import psutil
import pytest

import supervise.supervisor.shutdown as shutdown
from supervise.supervisor.process_utils import SupervisedProcess
from supervise.supervisor.shutdown import escalate_to_kill, run_fallback_command


class FakeProcess:
    """Stands in for SupervisedProcess; the group stays alive for `alive_checks` checks."""

    def __init__(self, alive_checks):
        self.pid = 4242
        self.pgid = 4242
        self.alive_checks = alive_checks
        self.checks = 0
        self.reaps = 0
        self.signals = []
        self.waits = []

    def reap_nowait(self):
        self.reaps += 1
        return False

    def group_exists(self):
        self.checks += 1
        return self.checks <= self.alive_checks

    def signal_group(self, sig):
        self.signals.append(sig)
        return True

    def wait(self, timeout=None):
        self.waits.append(timeout)
        return -signal.SIGKILL


@pytest.fixture
def sleeps(monkeypatch):
    calls = []
    monkeypatch.setattr(shutdown.time, "sleep", calls.append)
    return calls


def test_gone_group_is_left_alone(sleeps):
    process = FakeProcess(alive_checks=0)
    assert escalate_to_kill(process, attempts=3, interval=1.0) is False
    assert process.signals == []
    assert process.reaps == 1
    assert sleeps == []


def test_group_that_exits_during_grace_period(sleeps):
    process = FakeProcess(alive_checks=2)
    assert escalate_to_kill(process, attempts=3, interval=1.0) is False
    assert process.signals == []
    assert sleeps == [1.0, 1.0]


def test_stubborn_group_is_killed_after_bounded_retries(sleeps):
    process = FakeProcess(alive_checks=99)
    assert escalate_to_kill(process, attempts=3, interval=1.0) is True
    assert process.checks == 3
    assert sleeps == [1.0, 1.0, 1.0]
    assert process.signals == [signal.SIGKILL]
    assert process.waits == [shutdown.config.KILL_REAP_TIMEOUT]


def test_escalation_uses_configured_defaults(sleeps, monkeypatch):
    monkeypatch.setattr(shutdown.config, "ESCALATION_ATTEMPTS", 2)
    monkeypatch.setattr(shutdown.config, "ESCALATION_INTERVAL", 0.25)
    process = FakeProcess(alive_checks=99)
    escalate_to_kill(process)
    assert sleeps == [0.25, 0.25]


def test_fallback_command_runs_through_the_shell(tmp_path):
    marker = tmp_path / "fallback"
    run_fallback_command(f"echo ran > '{marker}'; exit 3")
    assert marker.read_text().strip() == "ran"


def test_fallback_command_start_failure_is_logged(monkeypatch, caplog):
    def failing_run(*args, **kwargs):
        raise OSError("no shell")

    monkeypatch.setattr(shutdown.subprocess, "run", failing_run)
    with caplog.at_level("ERROR"):
        run_fallback_command("true")
    assert "Failed to run fallback command" in caplog.text


def test_gone_group_is_not_waited_for(sleeps):
    process = FakeProcess(alive_checks=0)
    escalate_to_kill(process, attempts=3, interval=1.0)
    assert process.waits == []


def test_unreaped_leader_after_kill_is_logged(sleeps, caplog):
    class StuckProcess(FakeProcess):
        def wait(self, timeout=None):
            raise psutil.TimeoutExpired(timeout, pid=self.pid)

    with caplog.at_level("ERROR"):
        assert escalate_to_kill(StuckProcess(alive_checks=99), attempts=1, interval=0.1) is True
    assert "was not reaped after SIGKILL" in caplog.text


def test_killed_leader_is_reaped_before_returning():
    process = SupervisedProcess.spawn(["sh", "-c", "trap '' TERM; exec sleep 30"])
    try:
        process.signal_group(signal.SIGTERM)
        assert escalate_to_kill(process, attempts=2, interval=0.05) is True
        assert process.reaped
        assert process.returncode == -signal.SIGKILL
    finally:
        if not process.reaped:
            process.signal_group(signal.SIGKILL)
            process.wait(timeout=5)
