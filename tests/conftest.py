"""Shared test fixtures for cmsaudit package."""

import pytest
import yaml


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the global config at a temp directory and clear the token env var."""
    config_home = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.delenv("CMSAUDIT_TOKEN", raising=False)
    return config_home / "cmsaudit" / "config.yaml"


@pytest.fixture
def write_config(isolated_config):
    """Factory fixture for writing the global config file."""
    def _write(data: dict):
        isolated_config.parent.mkdir(parents=True, exist_ok=True)
        isolated_config.write_text(yaml.dump(data), encoding="utf-8")
        return isolated_config

    return _write


@pytest.fixture
def sample_records():
    """Records shaped like a page-type listing."""
    return [
        {
            "name": "Shipping",
            "slug": "shipping",
            "url": "https://example.com/shipping",
            "fields": {
                "body": "<p>Free shipping on orders over &pound;50.</p>",
                "sections": [
                    {"heading": "Returns", "text": "Free returns within 30 days"},
                ],
            },
        },
        {
            "title": "About us",
            "slug": "about",
            "fields": {"body": "<p style=\"mso-line-height:1\">We sell things.</p>"},
        },
        {
            "slug": "contact",
            "fields": {"body": "Call us", "active": True, "phone": 441234},
        },
    ]
