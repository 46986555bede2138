"""Tests for execution-policy helpers."""

import logging
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor

import pytest

from partition_sizing.core.enums import ExecutorPolicy
from partition_sizing.engine import execution


class TestResolvePolicy:
    """Tests for resolve_policy."""

    @pytest.mark.parametrize("value", ["threads", "processes", "serial"])
    def test_env_override_modes(self, monkeypatch, value):
        monkeypatch.setenv(execution.EXECUTOR_ENV, value)
        assert execution.resolve_policy(ExecutorPolicy.AUTO) == ExecutorPolicy(value)

    def test_env_override_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv(execution.EXECUTOR_ENV, "SERIAL")
        assert execution.resolve_policy() == ExecutorPolicy.SERIAL

    def test_explicit_policy_beats_env(self, monkeypatch):
        monkeypatch.setenv(execution.EXECUTOR_ENV, "processes")
        assert execution.resolve_policy(ExecutorPolicy.SERIAL) == ExecutorPolicy.SERIAL
        assert execution.resolve_policy("threads") == ExecutorPolicy.THREADS

    def test_auto_policy_follows_gil(self, monkeypatch):
        monkeypatch.delenv(execution.EXECUTOR_ENV, raising=False)

        monkeypatch.setattr(execution, "is_gil_enabled", lambda: True)
        assert execution.resolve_policy() == ExecutorPolicy.PROCESSES

        monkeypatch.setattr(execution, "is_gil_enabled", lambda: False)
        assert execution.resolve_policy() == ExecutorPolicy.THREADS

    def test_auto_in_env_falls_through_to_gil(self, monkeypatch):
        monkeypatch.setenv(execution.EXECUTOR_ENV, "auto")
        monkeypatch.setattr(execution, "is_gil_enabled", lambda: False)
        assert execution.resolve_policy() == ExecutorPolicy.THREADS

    def test_invalid_env_logged_and_ignored(self, monkeypatch, caplog):
        monkeypatch.setenv(execution.EXECUTOR_ENV, "gpu")
        monkeypatch.setattr(execution, "is_gil_enabled", lambda: True)

        with caplog.at_level(logging.WARNING, logger=execution.__name__):
            assert execution.resolve_policy() == ExecutorPolicy.PROCESSES
        assert "gpu" in caplog.text


class TestGetExecutorClass:
    """Tests for get_executor_class and describe_executor."""

    def test_policy_classes(self):
        assert execution.get_executor_class(ExecutorPolicy.THREADS) is ThreadPoolExecutor
        assert execution.get_executor_class(ExecutorPolicy.PROCESSES) is ProcessPoolExecutor
        assert execution.get_executor_class(ExecutorPolicy.SERIAL) is None

    def test_env_override_describes_mode(self, monkeypatch):
        for value in ("serial", "threads", "processes"):
            monkeypatch.setenv(execution.EXECUTOR_ENV, value)
            assert execution.describe_executor(
                execution.get_executor_class(ExecutorPolicy.AUTO)
            ) == value

    def test_describe_executor(self):
        assert execution.describe_executor(None) == "serial"
        assert execution.describe_executor(ThreadPoolExecutor) == "threads"
        assert execution.describe_executor(ProcessPoolExecutor) == "processes"
