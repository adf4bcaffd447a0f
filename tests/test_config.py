"""Tests for configuration loading."""

import calendar
import logging

import pytest

from checkmate.config import Config, load_config
from checkmate.core.context import UserContext
from checkmate.core.tasks import Location, MentalLoad, TimeEstimate


@pytest.fixture
def conf_file(tmp_path):
    def _write(text: str):
        path = tmp_path / "checkmate.conf"
        path.write_text(text)
        return path

    return _write


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.conf")
        assert config == Config()
        assert config.week_start == calendar.SUNDAY

    def test_reads_settings(self, conf_file):
        path = conf_file(
            "# CheckMate settings\n"
            "STORE_BACKEND=http\n"
            "STORE_URL=\"https://kv.example.com\"\n"
            "STORE_KEY=my-tasks\n"
            "RECOMMENDATION_LIMIT=3  # fewer\n"
            "WEEK_START_DAY=Monday\n"
            "DEFAULT_LOCATION='work'\n"
            "TELEGRAM_BOT_TOKEN=123:abc\n"
            "TELEGRAM_ALLOWED_USERS=111, 222\n"
        )
        config = load_config(path)

        assert config.store_backend == "http"
        assert config.store_url == "https://kv.example.com"
        assert config.store_key == "my-tasks"
        assert config.recommendation_limit == 3
        assert config.week_start == calendar.MONDAY
        assert config.default_location == "work"
        assert config.telegram_bot_token == "123:abc"
        assert config.telegram_allowed_users == [111, 222]

    def test_recommendation_limit_capped_at_five(self, conf_file, caplog):
        with caplog.at_level(logging.WARNING, logger="checkmate.config"):
            config = load_config(conf_file("RECOMMENDATION_LIMIT=10\n"))
        assert config.recommendation_limit == 5
        assert "RECOMMENDATION_LIMIT 10 is above 5" in caplog.text

    def test_ignores_junk_lines(self, conf_file):
        config = load_config(conf_file("not a setting\n\n   # comment\nUNKNOWN_KEY=1\n"))
        assert config == Config()

    def test_bad_values_fall_back(self, conf_file, caplog):
        path = conf_file(
            "STORE_BACKEND=ftp\n"
            "HEADLINE_COUNT=three\n"
            "WEEK_START_DAY=Funday\n"
            "TELEGRAM_ALLOWED_USERS=me\n"
        )
        with caplog.at_level(logging.WARNING, logger="checkmate.config"):
            config = load_config(path)

        assert config.store_backend == "file"
        assert config.headline_count == 3
        assert config.week_start_day == "Sunday"
        assert config.telegram_allowed_users == []
        assert "Unknown STORE_BACKEND" in caplog.text
        assert "Invalid integer for HEADLINE_COUNT" in caplog.text


class TestConfig:
    def test_data_path_override(self, tmp_path):
        assert Config(data_dir=str(tmp_path)).data_path == tmp_path

    def test_default_context(self):
        config = Config(default_available_time="quick", default_energy_level="low", default_location="online")
        assert config.default_context() == UserContext(
            TimeEstimate.QUICK, MentalLoad.LOW, Location.ONLINE
        )

    def test_invalid_default_context_falls_back(self, caplog):
        config = Config(default_location="anywhere")
        with caplog.at_level(logging.WARNING, logger="checkmate.config"):
            ctx = config.default_context()
        assert ctx == UserContext(TimeEstimate.MEDIUM, MentalLoad.MEDIUM, Location.HOME)
        assert "Invalid default context" in caplog.text
