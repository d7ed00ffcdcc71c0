"""
Tests for exporter configuration and command line parsing
"""
import inspect
from unittest.mock import patch

import pytest

from docker_state_exporter.__main__ import load_config, main
from docker_state_exporter.collector import CachedCollector
from docker_state_exporter.config import ExporterConfig, parse_listen_address
from docker_state_exporter.docker_client import DockerStateSource

ENV_VARS = ["LISTEN_ADDRESS", "DOCKER_HOST", "DOCKER_TIMEOUT", "CACHE_TTL", "LOG_LEVEL"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    # Keep a stray .env in the working directory out of the tests
    with patch('docker_state_exporter.config.load_dotenv'):
        yield


class TestParseListenAddress:
    """Test host:port parsing"""

    @pytest.mark.parametrize("address,expected", [
        (":8080", ("0.0.0.0", 8080)),
        ("127.0.0.1:9417", ("127.0.0.1", 9417)),
        ("localhost:80", ("localhost", 80)),
        ("[::1]:8080", ("::1", 8080)),
    ])
    def test_valid(self, address, expected):
        assert parse_listen_address(address) == expected

    @pytest.mark.parametrize("address", ["8080", "host:", "host:http", ":0", ":70000"])
    def test_invalid(self, address):
        with pytest.raises(ValueError):
            parse_listen_address(address)


class TestExporterConfig:
    """Test ExporterConfig defaults, validation and environment loading"""

    def test_defaults(self):
        config = ExporterConfig()

        assert config.listen_address == ":8080"
        assert config.docker_host is None
        assert config.docker_timeout == 10.0
        assert config.cache_ttl == 1.0
        assert config.log_level == "INFO"
        assert (config.host, config.port) == ("0.0.0.0", 8080)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LISTEN_ADDRESS", "127.0.0.1:9000")
        monkeypatch.setenv("DOCKER_HOST", "unix:///run/docker.sock")
        monkeypatch.setenv("DOCKER_TIMEOUT", "2.5")
        monkeypatch.setenv("CACHE_TTL", "5")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        config = ExporterConfig.from_env()

        assert config.listen_address == "127.0.0.1:9000"
        assert config.docker_host == "unix:///run/docker.sock"
        assert config.docker_timeout == 2.5
        assert config.cache_ttl == 5.0
        assert config.log_level == "DEBUG"

    def test_empty_docker_host_means_default(self, monkeypatch):
        monkeypatch.setenv("DOCKER_HOST", "")
        assert ExporterConfig.from_env().docker_host is None

    def test_from_env_loads_dotenv(self):
        with patch('docker_state_exporter.config.load_dotenv') as mock_load:
            ExporterConfig.from_env()
        mock_load.assert_called_once()

    def test_negative_ttl(self):
        with pytest.raises(ValueError, match="cache_ttl"):
            ExporterConfig(cache_ttl=-1)

    def test_zero_timeout(self):
        with pytest.raises(ValueError, match="docker_timeout"):
            ExporterConfig(docker_timeout=0)

    def test_bad_listen_address(self):
        with pytest.raises(ValueError):
            ExporterConfig(listen_address="nowhere")

    def test_bad_log_level(self):
        with pytest.raises(ValueError, match="log_level"):
            ExporterConfig(log_level="verbose")

    def test_bad_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "verbose")

        with pytest.raises(ValueError, match="log_level"):
            ExporterConfig.from_env()

    def test_defaults_shared_with_components(self):
        """The collector and Docker source default to the configured values"""
        config = ExporterConfig()

        ttl = inspect.signature(CachedCollector).parameters["ttl"].default
        timeout = inspect.signature(DockerStateSource).parameters["timeout"].default

        assert ttl == config.cache_ttl
        assert timeout == config.docker_timeout
        assert isinstance(timeout, float)


class TestCommandLine:
    """Test command line overrides"""

    def test_defaults(self):
        assert load_config([]) == ExporterConfig()

    def test_flags_override_environment(self, monkeypatch):
        monkeypatch.setenv("LISTEN_ADDRESS", ":9000")
        monkeypatch.setenv("CACHE_TTL", "3")

        config = load_config(["--listen-address", ":9100", "--log-level", "debug"])

        assert config.listen_address == ":9100"
        assert config.cache_ttl == 3.0
        assert config.log_level == "DEBUG"

    def test_all_flags(self):
        config = load_config([
            "--listen-address", "127.0.0.1:1234",
            "--docker-host", "tcp://docker:2375",
            "--docker-timeout", "7",
            "--cache-ttl", "0.5",
        ])

        assert config.port == 1234
        assert config.docker_host == "tcp://docker:2375"
        assert config.docker_timeout == 7.0
        assert config.cache_ttl == 0.5

    def test_override_is_validated(self):
        with pytest.raises(ValueError):
            load_config(["--cache-ttl", "-2"])

    def test_main_reports_bad_config(self, capsys):
        assert main(["--listen-address", "bogus"]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_main_reports_bad_log_level_env(self, monkeypatch, capsys):
        monkeypatch.setenv("LOG_LEVEL", "verbose")

        assert main([]) == 1
        assert "log_level" in capsys.readouterr().err

    @patch('docker_state_exporter.__main__.setup_logging')
    @patch('docker_state_exporter.__main__.DockerStateExporter')
    def test_main_starts_exporter(self, mock_exporter_class, mock_setup_logging):
        assert main(["--cache-ttl", "2"]) == 0

        mock_setup_logging.assert_called_once_with("INFO")
        config = mock_exporter_class.call_args[0][0]
        assert config.cache_ttl == 2.0
        mock_exporter_class.return_value.start.assert_called_once()
