from pathlib import Path

import pytest

from blogsite.build import BuildContext
from blogsite.config import SiteConfig
from blogsite.gateway import ContentGateway
from tests.fakes import API, FakeCMS, make_docs


@pytest.fixture
def site_config() -> SiteConfig:
    return SiteConfig(api_endpoint=API, timezone="UTC")


@pytest.fixture
def cms() -> FakeCMS:
    return FakeCMS(make_docs(5))


@pytest.fixture
def gateway(cms: FakeCMS) -> ContentGateway:
    return ContentGateway(API, session=cms)


@pytest.fixture
def build_ctx(tmp_path: Path, site_config: SiteConfig) -> BuildContext:
    return BuildContext(config=site_config, out_root=tmp_path / "public")
