import pytest

from inliner.images.config import DEFAULT_API_URL, DEFAULT_IMAGE_URL, InlinerConfig
from inliner.images.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for var in (
        "INLINER_API_KEY",
        "INLINER_API_URL",
        "INLINER_IMAGE_URL",
        "INLINER_DEFAULT_PROJECT",
    ):
        monkeypatch.delenv(var, raising=False)


class TestInlinerConfig:
    def test_defaults(self):
        config = InlinerConfig(api_key="abc")
        assert config.api_url == DEFAULT_API_URL
        assert config.image_url == DEFAULT_IMAGE_URL
        assert config.poll_attempts == 60
        assert config.poll_interval == 3.0
        assert config.default_project is None

    @pytest.mark.parametrize("key", ["", "   "])
    def test_missing_key_fails_at_construction(self, key: str):
        with pytest.raises(ConfigurationError, match="INLINER_API_KEY"):
            InlinerConfig(api_key=key)

    def test_invalid_poll_settings(self):
        with pytest.raises(ConfigurationError, match="poll_attempts"):
            InlinerConfig(api_key="abc", poll_attempts=0)

    def test_trailing_slashes_stripped(self):
        config = InlinerConfig(api_key="abc", api_url="https://api.example.com/")
        assert config.api_url == "https://api.example.com"

    def test_frozen(self):
        config = InlinerConfig(api_key="abc")
        with pytest.raises(Exception):
            config.api_key = "other"  # type: ignore[misc]


class TestFromEnv:
    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("INLINER_API_KEY", "env-key")
        monkeypatch.setenv("INLINER_API_URL", "https://staging.inliner.ai")
        monkeypatch.setenv("INLINER_DEFAULT_PROJECT", "zoo")
        config = InlinerConfig.from_env()
        assert config.api_key == "env-key"
        assert config.api_url == "https://staging.inliner.ai"
        assert config.default_project == "zoo"

    def test_overrides_win(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("INLINER_API_KEY", "env-key")
        config = InlinerConfig.from_env(api_key="cli-key", api_url=None)
        assert config.api_key == "cli-key"
        assert config.api_url == DEFAULT_API_URL

    def test_missing_key(self):
        with pytest.raises(ConfigurationError):
            InlinerConfig.from_env()
