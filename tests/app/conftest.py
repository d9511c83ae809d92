from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from contentpulse_sync.app import ContentPulseApp
from contentpulse_sync.boundary import IngestionBoundary
from contentpulse_sync.config import ContentPulseConfig, SiteConfig, StorageConfig, SyncConfig
from tests.helpers.fakes import (
    API_KEY,
    SITE_URL,
    FakeContentUnitOfWork,
    FakeFileFetcher,
    fixed_clock,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


@pytest.fixture
def uow() -> FakeContentUnitOfWork:
    return FakeContentUnitOfWork()


@pytest.fixture
def make_app(uow: FakeContentUnitOfWork, tmp_path: Path) -> Callable[..., ContentPulseApp]:
    def build(*, api_key: str = API_KEY, **sync_overrides: object) -> ContentPulseApp:
        return ContentPulseApp(
            contentpulse=ContentPulseConfig(api_key=api_key, api_url="https://cp.example.test"),
            sync=SyncConfig(**sync_overrides),  # type: ignore[arg-type]
            site=SiteConfig(site_url=SITE_URL),
            storage=StorageConfig(data_dir=tmp_path),
            unit_of_work_factory=lambda: uow,
            media_fetcher=FakeFileFetcher(),
            clock=fixed_clock,
        )

    return build


@pytest.fixture
def app(make_app: Callable[..., ContentPulseApp]) -> ContentPulseApp:
    return make_app().boot()


@pytest.fixture
def boundary(app: ContentPulseApp) -> IngestionBoundary:
    return IngestionBoundary(app)
