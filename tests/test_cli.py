from __future__ import annotations

import json
import logging

import reconnbench.cli as cli


def test_cli_memory_run_prints_report(capsys) -> None:
    exit_code = cli.main(
        ["--store", "memory", "-n", "3", "--seed", "1", "--fault-period", "10", "--fault-length", "2"]
    )
    assert exit_code == cli.EXIT_OK
    out = capsys.readouterr().out
    assert "Total tests: 3" in out
    assert "99% <=" in out


def test_cli_json_output(capsys) -> None:
    exit_code = cli.main(["--store", "memory", "-n", "2", "--json", "--drivers", "2"])
    assert exit_code == cli.EXIT_OK
    payload = json.loads(capsys.readouterr().out)
    assert payload["stats"]["count"] >= 2
    assert set(payload["stats"]["percentiles"]) == {"p50", "p90", "p95", "p99"}


def test_cli_rejects_non_positive_target(capsys) -> None:
    assert cli.main(["--store", "memory", "-n", "0"]) == cli.EXIT_CONFIG_ERROR


def test_cli_rejects_bad_fault_shape() -> None:
    assert (
        cli.main(["--store", "memory", "--fault-period", "5", "--fault-length", "5"])
        == cli.EXIT_CONFIG_ERROR
    )


def test_cli_unreadable_store_config(tmp_path) -> None:
    missing = tmp_path / "missing.json"
    assert cli.main(["--config", str(missing)]) == cli.EXIT_CONFIG_ERROR


def test_cli_fatal_store_error(monkeypatch, capsys) -> None:
    from reconnbench.exceptions import StoreOperationError

    def _boom(*args, **kwargs):
        raise StoreOperationError("get failed: WRONGTYPE", operation="read")

    monkeypatch.setattr(cli, "run_benchmark", _boom)
    exit_code = cli.main(["--store", "memory", "--json"])
    assert exit_code == cli.EXIT_STORE_ERROR
    payload = json.loads(capsys.readouterr().out)
    assert payload["error"] == "StoreOperationError"
    assert payload["details"]["operation"] == "read"


def test_cli_logs_the_store_description_only(caplog) -> None:
    with caplog.at_level(logging.INFO):
        exit_code = cli.main(["--store", "memory", "-n", "1"])
    assert exit_code == cli.EXIT_OK
    assert "Memory mode" in caplog.text
    assert "Pool mode" not in caplog.text
    assert "Cluster mode" not in caplog.text
