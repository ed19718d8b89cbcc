"""Tests for the collector and aggregator CLI entry points."""

from unittest.mock import patch

import pytest

from src.aggregator import main as aggregator_main
from src.aggregator.baselines import AggregateSummary
from src.collector import main as collector_main
from src.collector.scraper import CollectSummary


@pytest.fixture
def credentials(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://x.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "secret")


@pytest.fixture
def no_credentials(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "")


class TestCollectorMain:
    def test_missing_credentials_exit_1(self, no_credentials, tmp_path):
        targets = tmp_path / "targets.json"
        targets.write_text("[]", encoding="utf-8")
        assert collector_main.main(["--targets", str(targets)]) == 1

    def test_invalid_env_override_exit_1(self, credentials, tmp_path, monkeypatch):
        monkeypatch.setenv("COLLECTOR_REQUEST_DELAY_MS", "slow")
        targets = tmp_path / "targets.json"
        targets.write_text("[]", encoding="utf-8")
        assert collector_main.main(["--targets", str(targets)]) == 1

    def test_missing_targets_file_exit_1(self, credentials, tmp_path):
        assert collector_main.main(["--targets", str(tmp_path / "nope.json")]) == 1

    def test_empty_targets_never_launch_browser(self, credentials, tmp_path):
        targets = tmp_path / "targets.json"
        targets.write_text("[]", encoding="utf-8")
        with patch.object(collector_main, "BrowserSession") as mock_session:
            assert collector_main.main(["--targets", str(targets)]) == 0
        mock_session.assert_not_called()

    def test_browser_launch_failure_exit_1(self, credentials, tmp_path):
        targets = tmp_path / "targets.json"
        targets.write_text('[{"zip": "94107", "query": "Civic"}]', encoding="utf-8")
        with patch.object(collector_main.BrowserSession, "start", side_effect=RuntimeError("Executable doesn't exist")):
            assert collector_main.main(["--targets", str(targets)]) == 1

    def test_successful_run(self, credentials, tmp_path):
        targets = tmp_path / "targets.json"
        targets.write_text('[{"zip": "94107", "query": "Civic"}]', encoding="utf-8")

        async def fake_run(targets, store, config):
            assert config.headless is False
            return CollectSummary(targets_total=len(targets), targets_failed=1)

        with patch.object(collector_main, "run", side_effect=fake_run):
            assert collector_main.main(["--targets", str(targets), "--headed"]) == 0


class TestAggregatorMain:
    def test_missing_credentials_exit_1(self, no_credentials):
        assert aggregator_main.main([]) == 1

    def test_read_failure_exit_1(self, credentials):
        with patch.object(aggregator_main.BaselineAggregator, "run", side_effect=RuntimeError("timeout")):
            assert aggregator_main.main([]) == 1

    def test_window_override_and_dry_run(self, credentials):
        with patch.object(aggregator_main.BaselineAggregator, "run", return_value=AggregateSummary()) as mock_run, \
                patch.object(aggregator_main, "BaselineAggregator", wraps=aggregator_main.BaselineAggregator) as mock_cls:
            assert aggregator_main.main(["--window-days", "7", "--dry-run"]) == 0

        config = mock_cls.call_args.args[1]
        assert config.window_days == 7
        mock_run.assert_called_once_with(dry_run=True)

    def test_invalid_env_window_exit_1(self, credentials, monkeypatch):
        monkeypatch.setenv("AGGREGATOR_WINDOW_DAYS", "0")
        assert aggregator_main.main([]) == 1

    def test_invalid_window_exit_1(self, credentials):
        assert aggregator_main.main(["--window-days", "0"]) == 1
