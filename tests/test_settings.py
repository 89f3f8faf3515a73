from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

from invoice_engine.core.formatting import Formatters, format_date, parse_date
from invoice_engine.core.paths import config_dir, default_output_dir, resource_path, settings_path
from invoice_engine.core.settings import Settings, load_settings, save_settings


def test_missing_settings_file_writes_defaults(tmp_path: Path) -> None:
    p = tmp_path / "conf" / "settings.json"
    settings = load_settings(p)
    assert settings == Settings()
    assert json.loads(p.read_text(encoding="utf-8"))["currency"] == "USD"


def test_round_trip_keeps_unicode_and_ignores_unknown_keys(tmp_path: Path) -> None:
    p = tmp_path / "settings.json"
    save_settings(Settings(issuer_name="Kāfé Ltd", currency="INR", digit_grouping="indian"), p)
    raw = json.loads(p.read_text(encoding="utf-8"))
    raw["legacy_flag"] = True
    p.write_text(json.dumps(raw, ensure_ascii=False), encoding="utf-8")

    loaded = load_settings(p)
    assert loaded.issuer_name == "Kāfé Ltd"
    assert loaded.currency == "INR"
    assert not hasattr(loaded, "legacy_flag")


def test_corrupt_settings_fall_back_to_defaults(tmp_path: Path) -> None:
    p = tmp_path / "settings.json"
    p.write_text("{not json", encoding="utf-8")
    assert load_settings(p) == Settings()
    # the broken file is left for the user to fix
    assert p.read_text(encoding="utf-8") == "{not json"


def test_formatters_from_settings() -> None:
    fmt = Formatters.from_settings(Settings(currency="EUR", date_format="%Y/%m/%d"))
    assert fmt.money(Decimal("12")) == "€12.00"
    assert fmt.date(parse_date("2026-10-19T10:00:00Z")) == "2026/10/19"
    assert fmt.quantity(2) == "2"


def test_format_date_fallbacks() -> None:
    assert format_date(None) == ""
    assert format_date("2026-10-19") == "19 Oct 2026"
    assert format_date("someday") == "someday"


def test_resource_paths_follow_config_dir(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("INVOICE_ENGINE_HOME", str(tmp_path / "home"))
    assert config_dir() == tmp_path / "home"
    assert settings_path() == tmp_path / "home" / "settings.json"
    assert resource_path("fonts/x.ttf") == tmp_path / "home" / "fonts" / "x.ttf"
    font = tmp_path / "NotoSans-Regular.ttf"
    assert resource_path(font) == font

    monkeypatch.delenv("INVOICE_ENGINE_HOME")
    assert config_dir() == Path.home() / ".invoice_engine"
    assert default_output_dir().parts[-2:] == ("Documents", "Invoices")
