"""Site configuration loaded from YAML with environment overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

DEFAULT_CONFIG_PATH = Path("config/site.yaml")

ENV_OVERRIDES = {
    "PRISMIC_API_ENDPOINT": "api_endpoint",
    "PRISMIC_ACCESS_TOKEN": "access_token",
    "PRISMIC_PREVIEW_REF": "preview_ref",
}


class SiteConfig(BaseModel):
    """Settings for a blog build."""

    site_title: str = Field("Space Traveling", description="Suffix of every page title.")
    api_endpoint: str = Field(
        ..., description="CMS API root, e.g. https://repo.cdn.prismic.io/api/v2."
    )
    access_token: Optional[str] = Field(
        None, description="Token for private repositories."
    )
    document_type: str = Field("posts", description="Custom type holding blog posts.")
    page_size: int = Field(20, gt=0, le=100, description="Posts per listing page.")
    words_per_minute: int = Field(200, gt=0, description="Reading speed estimate.")
    timezone: str = Field("UTC", description="Timezone used for date labels.")
    request_timeout: float = Field(
        10.0, gt=0, description="Seconds before a CMS request is abandoned."
    )
    output_dir: str = Field("public", description="Default build output directory.")
    templates_dir: Optional[str] = Field(
        None, description="Directory with templates overriding the bundled ones."
    )
    preview_ref: Optional[str] = Field(
        None, description="Preview ref; when set, draft content is fetched."
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("api_endpoint")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("api_endpoint must be an http(s) URL")
        return value.rstrip("/")

    @property
    def preview(self) -> bool:
        return bool(self.preview_ref)


def load_config(
    path: Optional[Path] = None, *, environ: Optional[Mapping[str, str]] = None
) -> SiteConfig:
    """Load ``SiteConfig`` from YAML, applying ``PRISMIC_*`` environment overrides."""

    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    env = os.environ if environ is None else environ

    data: dict = {}
    if config_path.exists():
        try:
            loaded = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigError(f"{config_path} must contain a mapping of settings.")
        data.update(loaded)
    elif path is not None:
        raise ConfigError(f"Config file not found: {config_path}")

    for env_name, field_name in ENV_OVERRIDES.items():
        if env.get(env_name):
            data[field_name] = env[env_name]

    try:
        return SiteConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid site config in {config_path}: {exc}") from exc


__all__ = ["DEFAULT_CONFIG_PATH", "SiteConfig", "load_config"]
