import pytest
from pydantic import ValidationError

from config import Defaults, get_settings, load_config_file
from config.settings import Settings, create_default_config_file, find_config_file
from core.errors import InvalidArgumentError


class TestSettings:
    def test_defaults(self):
        settings = get_settings()
        assert settings.hashing.read_buffer_size == Defaults.READ_BUFFER_SIZE == 2048
        assert settings.hashing.output_format == "decimal"
        assert settings.fetch.timeout == Defaults.URL_TIMEOUT
        assert settings.shingles.shingle_size == Defaults.SHINGLE_SIZE

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_no_config_file(self):
        assert find_config_file() is None
        assert load_config_file() == {}

    def test_config_file_in_cwd(self, tmp_path):
        (tmp_path / "rabinfp.yaml").write_text("hashing:\n  read_buffer_size: 512\n  output_format: hex\n")
        settings = get_settings()
        assert settings.hashing.read_buffer_size == 512
        assert settings.hashing.output_format == "hex"
        assert settings.hashing.workers == Defaults.HASH_WORKERS

    def test_explicit_config_file(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("shingles:\n  shingle_size: 12\n")
        assert get_settings(str(path)).shingles.shingle_size == 12

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / "rabinfp.yaml").write_text("hashing:\n  read_buffer_size: 512\n")
        monkeypatch.setenv("RABINFP_READ_BUFFER_SIZE", "64")
        monkeypatch.setenv("RABINFP_URL_TIMEOUT", "3")
        monkeypatch.setenv("RABINFP_USER_AGENT", "tests/1.0")
        settings = get_settings()
        assert settings.hashing.read_buffer_size == 64
        assert settings.fetch.timeout == 3
        assert settings.fetch.user_agent == "tests/1.0"

    def test_invalid_yaml_falls_back_to_defaults(self, tmp_path, capsys):
        (tmp_path / "rabinfp.yaml").write_text("hashing: [unclosed\n")
        assert get_settings().hashing.read_buffer_size == Defaults.READ_BUFFER_SIZE
        assert "[WARNING]" in capsys.readouterr().out

    def test_invalid_values_rejected(self):
        with pytest.raises(ValidationError):
            Settings.model_validate({"hashing": {"read_buffer_size": 0}})
        with pytest.raises(ValidationError):
            Settings.model_validate({"hashing": {"output_format": "octal"}})
        with pytest.raises(ValidationError):
            Settings.model_validate({"shingles": {"shingle_size": 2}})

    def test_default_config_file_round_trips(self, tmp_path):
        path = create_default_config_file(tmp_path / "conf" / "rabinfp.yaml")
        assert Settings.model_validate(load_config_file(path)) == Settings()

    def test_invalid_file_value_raises_invalid_argument(self, tmp_path):
        (tmp_path / "rabinfp.yaml").write_text("hashing:\n  output_format: octal\n")
        with pytest.raises(InvalidArgumentError, match="Invalid configuration"):
            get_settings()

    def test_non_mapping_file_raises_invalid_argument(self, tmp_path):
        (tmp_path / "rabinfp.yaml").write_text("- just\n- a list\n")
        with pytest.raises(InvalidArgumentError):
            get_settings()

    @pytest.mark.parametrize("name", ["RABINFP_READ_BUFFER_SIZE", "RABINFP_WORKERS", "RABINFP_URL_TIMEOUT"])
    def test_non_integer_env_value(self, monkeypatch, name):
        monkeypatch.setenv(name, "lots")
        with pytest.raises(InvalidArgumentError, match=name):
            get_settings()

    def test_env_value_below_one_is_clamped(self, monkeypatch):
        monkeypatch.setenv("RABINFP_WORKERS", "-3")
        assert get_settings().hashing.workers == 1
