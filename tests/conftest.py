"""Pytest configuration and fixtures."""
import datetime as dt

import pytest

from talk_exporter.config import ExtractOptions
from talk_exporter.extractor import parse_html
from talk_exporter.profile import Profile


@pytest.fixture
def profile():
    return Profile()


@pytest.fixture
def options():
    """Extraction options pinned to UTC so payload times are deterministic."""
    return ExtractOptions(tz=dt.timezone.utc)


@pytest.fixture
def item():
    """Parse a single item's HTML and return its node."""
    def _item(html):
        return parse_html(html).children()[0]
    return _item


@pytest.fixture(autouse=True)
def isolated_config_home(tmp_path, monkeypatch):
    """Keep tests away from any real user configuration."""
    monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
