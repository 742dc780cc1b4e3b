import json
import logging

import pytest

from qrisconnect.errors import ConfigurationError
from qrisconnect.providers.registry import get_gateway, get_provider_by_name
from qrisconnect.settings import settings
from qrisconnect.utils.logging import JsonFormatter


@pytest.mark.parametrize("name", ["bni", "BNI", " Bni "])
def test_bni_aliases(name):
    assert get_provider_by_name(name).name == "BNI"


@pytest.mark.parametrize("name", ["bri", "bri_mpm", "BRI-MPM", "BRI_MPM_DYNAMIC"])
def test_bri_aliases(name):
    assert get_provider_by_name(name).name == "BRI_MPM_DYNAMIC"


def test_unknown_name():
    assert get_provider_by_name("mandiri") is None
    assert get_provider_by_name(None) is None


def test_get_gateway_uses_default_provider(monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_PROVIDER", "bri")
    assert get_gateway().name == "BRI_MPM_DYNAMIC"
    assert get_gateway("bni").name == "BNI"


def test_get_gateway_unknown():
    with pytest.raises(ConfigurationError):
        get_gateway("mandiri")


def test_get_gateway_reports_default_provider_name(monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_PROVIDER", "mandiri")
    with pytest.raises(ConfigurationError) as exc:
        get_gateway()
    assert "'mandiri'" in str(exc.value)
    assert "None" not in str(exc.value)


def test_json_formatter_keeps_provider_extra():
    record = logging.LogRecord("qrisconnect.providers.bni.adapter", logging.INFO, __file__, 1,
                               "requesting access token", None, None)
    record.provider = "BNI"

    line = json.loads(JsonFormatter().format(record))

    assert line["level"] == "INFO"
    assert line["message"] == "requesting access token"
    assert line["provider"] == "BNI"
    assert "uri" not in line
