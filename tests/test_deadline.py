"""Tests for deadline resolution."""

import subprocess

import pytest

import supervise.supervisor.deadline as deadline_module
from supervise.supervisor import DateCommandResolver, UsageError, resolve_deadline


NOW = 1_700_000_000.0


def test_integer_seconds_are_relative():
    deadline = resolve_deadline("30", now=NOW)
    assert deadline.seconds == 30
    assert deadline.expires_at == NOW + 30
    assert not deadline.disabled


def test_zero_disables_the_deadline():
    deadline = resolve_deadline("0", now=NOW)
    assert deadline.disabled
    assert deadline.monotonic_expiry(100.0) == float("inf")


def test_absolute_time_uses_the_resolver():
    seen = []

    def resolver(expression):
        seen.append(expression)
        return NOW + 3600

    deadline = resolve_deadline("tomorrow 03:00", now=NOW, resolver=resolver)
    assert seen == ["tomorrow 03:00"]
    assert deadline.seconds == 3600
    assert deadline.expires_at == NOW + 3600


def test_past_deadline_is_a_usage_error():
    with pytest.raises(UsageError, match="in the past"):
        resolve_deadline("yesterday", now=NOW, resolver=lambda expression: NOW - 60)


def test_unparseable_time_is_a_usage_error():
    def resolver(expression):
        raise ValueError("invalid date")

    with pytest.raises(UsageError, match="cannot parse time 'whenever'"):
        resolve_deadline("whenever", now=NOW, resolver=resolver)


def test_empty_timeout_is_a_usage_error():
    with pytest.raises(UsageError):
        resolve_deadline("  ", now=NOW)


def test_monotonic_expiry_starts_from_given_clock():
    assert resolve_deadline("5", now=NOW).monotonic_expiry(10.0) == 15.0


def test_date_command_resolver_parses_epoch(monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="1700003600\n", stderr="")

    monkeypatch.setattr(deadline_module.subprocess, "run", fake_run)

    assert DateCommandResolver(command="date")("next hour") == 1700003600.0
    assert calls == [["date", "-d", "next hour", "+%s"]]


def test_date_command_resolver_reports_failure(monkeypatch):
    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="date: invalid date 'soonish'")

    monkeypatch.setattr(deadline_module.subprocess, "run", fake_run)

    with pytest.raises(ValueError, match="invalid date"):
        DateCommandResolver(command="date")("soonish")


def test_date_command_resolver_missing_binary():
    resolver = DateCommandResolver(command="/nonexistent/date-binary")
    with pytest.raises(ValueError, match="could not run"):
        resolver("tomorrow")


def test_date_command_resolver_rejects_garbage(monkeypatch):
    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 0, stdout="not a number\n", stderr="")

    monkeypatch.setattr(deadline_module.subprocess, "run", fake_run)

    with pytest.raises(ValueError, match="unexpected output"):
        DateCommandResolver(command="date")("tomorrow")
