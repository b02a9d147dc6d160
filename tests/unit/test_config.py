"""Тесты для IndexerConfig и structured logging."""

import json
import logging

import pytest

from src.core.logger import JSONFormatter, get_logger, log_event
from src.indexer import IndexerConfig, TvlMode


class TestIndexerConfig:
    def test_defaults(self):
        config = IndexerConfig()
        assert config.tvl_mode == TvlMode.LAST_TOKEN
        assert config.reject_duplicate_launch is True
        assert config.check_invariants is True
        assert config.log_level == "INFO"

    def test_from_empty_env_uses_defaults(self):
        assert IndexerConfig.from_env({}) == IndexerConfig()

    def test_from_env_overrides(self):
        config = IndexerConfig.from_env(
            {
                "CRATE_TVL_MODE": "aggregate",
                "CRATE_REJECT_DUPLICATE_LAUNCH": "0",
                "CRATE_CHECK_INVARIANTS": "false",
                "CRATE_LOG_LEVEL": "debug",
            }
        )
        assert config.tvl_mode == TvlMode.AGGREGATE
        assert config.reject_duplicate_launch is False
        assert config.check_invariants is False
        assert config.log_level == "DEBUG"

    def test_invalid_tvl_mode_rejected(self):
        with pytest.raises(ValueError):
            IndexerConfig.from_env({"CRATE_TVL_MODE": "median"})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("CRATE_TVL_MODE", "aggregate")
        assert IndexerConfig.from_env().tvl_mode == TvlMode.AGGREGATE

    def test_frozen(self):
        config = IndexerConfig()
        with pytest.raises(AttributeError):
            config.tvl_mode = TvlMode.AGGREGATE  # type: ignore[misc]


class TestJSONLogging:
    def test_formatter_merges_fields(self):
        record = logging.LogRecord("crate", logging.INFO, __file__, 1, "token_launched", None, None)
        record.fields = {"event": "token_launched", "token": "0xabc", "amount": 10**30}

        payload = json.loads(JSONFormatter().format(record))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "crate"
        assert payload["message"] == "token_launched"
        assert payload["token"] == "0xabc"
        assert payload["amount"] == 10**30

    def test_get_logger_adds_single_handler(self):
        first = get_logger("crate.test.single")
        second = get_logger("crate.test.single")
        assert first is second
        assert len(first.handlers) == 1

    def test_log_event_attaches_fields(self, caplog):
        logger = get_logger("crate.test.event", level=logging.DEBUG)
        with caplog.at_level(logging.DEBUG, logger="crate.test.event"):
            log_event(logger, "token_trade", {"token": "0xabc"}, level=logging.DEBUG)

        assert caplog.records[-1].fields == {"event": "token_trade", "token": "0xabc"}
