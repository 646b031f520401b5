from pathlib import Path

import pytest

from blogsite.config import SiteConfig, load_config
from blogsite.errors import ConfigError


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config_defaults(tmp_path: Path):
    path = _write(tmp_path / "site.yaml", "api_endpoint: https://repo.cdn.prismic.io/api/v2/\n")

    config = load_config(path, environ={})

    assert config.api_endpoint == "https://repo.cdn.prismic.io/api/v2"
    assert config.document_type == "posts"
    assert config.page_size == 20
    assert config.words_per_minute == 200
    assert not config.preview


def test_environment_overrides(tmp_path: Path):
    path = _write(tmp_path / "site.yaml", "api_endpoint: https://repo.cdn.prismic.io/api/v2\n")

    config = load_config(
        path,
        environ={"PRISMIC_ACCESS_TOKEN": "token", "PRISMIC_PREVIEW_REF": "preview"},
    )

    assert config.access_token == "token"
    assert config.preview_ref == "preview"
    assert config.preview


def test_endpoint_from_environment_only(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PRISMIC_API_ENDPOINT", "https://env.cdn.prismic.io/api/v2")

    config = load_config()

    assert config.api_endpoint == "https://env.cdn.prismic.io/api/v2"


@pytest.mark.parametrize(
    "text",
    [
        "api_endpoint: [unclosed\n",
        "- just\n- a list\n",
        "api_endpoint: ftp://nope\n",
        "api_endpoint: https://repo.test/api/v2\npage_size: 0\n",
        "api_endpoint: https://repo.test/api/v2\nunknown_key: 1\n",
        "site_title: missing endpoint\n",
    ],
)
def test_invalid_config(tmp_path: Path, text: str):
    path = _write(tmp_path / "site.yaml", text)
    with pytest.raises(ConfigError):
        load_config(path, environ={})


def test_missing_explicit_config(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml", environ={})


def test_repository_config_is_valid():
    config = load_config(Path("config/site.yaml"), environ={})
    assert isinstance(config, SiteConfig)
    assert config.site_title == "Space Traveling"
