"""Tests for BlogEnhancer.Config."""

import pytest

from BlogEnhancer.Config import ConfigError, PipelineConfig, SiteProfile, load_config

ENV_NAMES = [
    "BLOG_BASE_URL", "BLOG_LISTING_URL", "BLOG_BRAND_NAME", "LARAVEL_API_URL", "ARTICLE_STORE_FILE",
    "OPENAI_API_KEY", "OPENAI_MODEL", "OPENAI_MAX_TOKENS", "OPENAI_TEMPERATURE", "REQUEST_TIMEOUT_S",
    "RENDER_TIMEOUT_S", "MAX_LISTING_PAGES", "REFERENCE_DELAY_S", "ARTICLE_DELAY_S",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    # setenv first so teardown also removes anything a .env file loads.
    for name in ENV_NAMES:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    empty = tmp_path / "empty.env"
    empty.write_text("", encoding="utf-8")
    return str(empty)


class TestSiteProfile:
    def test_listing_urls(self) -> None:
        site = SiteProfile()
        assert site.listing_url(1) == "https://beyondchats.com/blogs/"
        assert site.listing_url(3) == "https://beyondchats.com/blogs/page/3/"


class TestLoadConfig:
    def test_defaults(self, clean_env) -> None:
        config = load_config(clean_env)
        assert config.api_url == "http://localhost:8000/api"
        assert config.openai_model == "gpt-3.5-turbo"
        assert config.max_tokens == 2000
        assert config.temperature == 0.7
        assert config.store_file is None
        assert config.site.brand_name == "BeyondChats"

    def test_environment_overrides(self, clean_env, monkeypatch) -> None:
        monkeypatch.setenv("LARAVEL_API_URL", "https://articles.internal/api")
        monkeypatch.setenv("BLOG_LISTING_URL", "https://example.com/journal/")
        monkeypatch.setenv("OPENAI_MAX_TOKENS", "800")
        monkeypatch.setenv("ARTICLE_DELAY_S", "0.5")
        config = load_config(clean_env)
        assert config.api_url == "https://articles.internal/api"
        assert config.site.blog_url == "https://example.com/journal/"
        assert config.site.blog_root == "/journal/"
        assert config.max_tokens == 800
        assert config.article_delay_s == 0.5

    def test_dotenv_file(self, clean_env, tmp_path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("OPENAI_API_KEY=sk-from-file\nOPENAI_MODEL=gpt-4o-mini\n", encoding="utf-8")
        config = load_config(str(env_file))
        assert config.require_openai_key() == "sk-from-file"
        assert config.openai_model == "gpt-4o-mini"

    def test_bad_number(self, clean_env, monkeypatch) -> None:
        monkeypatch.setenv("MAX_LISTING_PAGES", "ten")
        with pytest.raises(ConfigError, match="MAX_LISTING_PAGES"):
            load_config(clean_env)

    def test_missing_api_key(self) -> None:
        with pytest.raises(ConfigError):
            PipelineConfig().require_openai_key()

    def test_key_hidden_from_repr(self) -> None:
        assert "sk-secret" not in repr(PipelineConfig(openai_api_key="sk-secret"))
