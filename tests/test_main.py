import json

import pytest

from athlete_fuzz.main import EXIT_CONFIG_ERROR, EXIT_FAILURES, build_config, main, parse_args
from athlete_fuzz.utils import LOG_SEPARATOR


@pytest.fixture(autouse=True)
def no_base_url(monkeypatch, tmp_path):
    monkeypatch.delenv("BASE_URL", raising=False)
    monkeypatch.chdir(tmp_path)


def test_cli_overrides_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"endpoint": {"base_url": "http://from-file/"}}))

    config = build_config(parse_args([
        "--config", str(path),
        "--base-url", "http://from-cli/",
        "--timeout", "2.5",
        "--parallel",
        "--workers", "2",
        "--log-file", "run.txt",
    ]))

    assert config.endpoint.base_url == "http://from-cli/"
    assert config.endpoint.timeout_seconds == 2.5
    assert config.run.parallel is True
    assert config.run.workers == 2
    assert config.run.log_file == "run.txt"
    assert config.run.save_json is False


def test_flags_absent_keep_file_values(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"run": {"parallel": True, "save_json": True}}))

    config = build_config(parse_args(["--config", str(path)]))

    assert config.run.parallel is True
    assert config.run.save_json is True


def test_malformed_base_url_exits_before_any_request(monkeypatch, tmp_path):
    monkeypatch.setenv("BASE_URL", "localhost:8080/nutrition")
    log_file = tmp_path / "test-results.txt"

    assert main(["--log-file", str(log_file)]) == EXIT_CONFIG_ERROR
    assert not log_file.exists()


def test_invalid_config_file_exits_with_config_error(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{broken")

    assert main(["--config", str(path)]) == EXIT_CONFIG_ERROR


@pytest.mark.parametrize("url", ["http://[::1", "http://host:99999/"])
def test_unparseable_base_url_exits_with_config_error(monkeypatch, tmp_path, url):
    monkeypatch.setenv("BASE_URL", url)
    log_file = tmp_path / "test-results.txt"

    assert main(["--log-file", str(log_file)]) == EXIT_CONFIG_ERROR
    assert not log_file.exists()


def test_missing_log_directory_exits_with_config_error(tmp_path):
    log_file = tmp_path / "missing" / "test-results.txt"

    assert main(["--base-url", "http://127.0.0.1:1/", "--log-file", str(log_file)]) == EXIT_CONFIG_ERROR


def test_parallel_run_writes_worker_logs_and_combined_report(tmp_path, closed_port_url, capsys):
    log_file = tmp_path / "test-results.txt"
    log_file.write_text("previous run")
    stale = tmp_path / "test-results-worker-3.txt"
    stale.write_text("left over from a three-worker run")

    code = main([
        "--parallel",
        "--workers", "2",
        "--base-url", closed_port_url,
        "--timeout", "5",
        "--log-file", str(log_file),
    ])

    assert code == EXIT_FAILURES
    assert log_file.read_text() == ""
    assert not stale.exists()
    for index in (1, 2):
        worker_log = tmp_path / f"test-results-worker-{index}.txt"
        assert worker_log.read_text(encoding="utf-8").count(LOG_SEPARATOR) == 375

    out = capsys.readouterr().out
    assert "=== Combined Worker Report ===" in out
    combined = out[out.index("=== Combined Worker Report ==="):]
    assert "Total test cases: 750" in combined
    assert "Failed tests: 750" in combined
