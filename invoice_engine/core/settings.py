from __future__ import annotations

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging


from invoice_engine.core.paths import settings_path

logger = logging.getLogger(__name__)


@dataclass
class Settings:
	# Issuer block printed under the title on the first page
	issuer_name: str = "My Company Name"
	issuer_address: str = "123 Business Rd\nCity, State, Zip"
	issuer_email: str = "contact@mycompany.com"
	document_title: str = "INVOICE"
	# ISO currency code; the symbol is looked up at format time
	currency: str = "USD"
	# 'western' (1,234,567) or 'indian' (12,34,567)
	digit_grouping: str = "western"
	date_format: str = "%d %b %Y"
	# Optional TrueType files; Helvetica/Helvetica-Bold when unset.
	# Symbols outside WinAnsi (e.g. ₹) need a TrueType font that has the glyph.
	font_regular_path: Optional[str] = None
	font_bold_path: Optional[str] = None
	# Footer label; supports {number} and {count}. Empty disables it.
	page_label: str = "Page {number} of {count}"
	# Template supports {number}
	file_name_template: str = "Invoice-{number}"
	# Optional root directory for saving PDFs; if None, defaults to Documents/Invoices
	output_dir: Optional[str] = None

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "Settings":
		# Merge provided values over defaults, ignore unknown keys
		defaults = asdict(cls())
		merged: Dict[str, Any] = {**defaults, **{k: v for k, v in data.items() if k in defaults}}
		return cls(**merged)

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)


def _coerce_path(path: Optional[Union[str, Path]]) -> Path:
	return Path(path) if path is not None else settings_path()


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
	"""
	Load settings from JSON (UTF-8). If the file is missing, write defaults and return them.
	"""
	p = _coerce_path(path)
	if not p.exists():
		settings = Settings()
		save_settings(settings, p)
		return settings

	try:
		with p.open("r", encoding="utf-8") as f:
			raw: Dict[str, Any] = json.load(f)
	except (json.JSONDecodeError, OSError):
		# If unreadable/corrupt, fall back to defaults (do not overwrite automatically)
		logger.warning("Could not read settings from %s; using defaults", p)
		return Settings()

	return Settings.from_dict(raw if isinstance(raw, dict) else {})


def save_settings(settings: Settings, path: Optional[Union[str, Path]] = None) -> None:
	"""Save settings to JSON (UTF-8), creating parent dirs if needed."""
	p = _coerce_path(path)
	p.parent.mkdir(parents=True, exist_ok=True)
	# Pretty JSON, keep Unicode
	tmp = p.with_suffix(p.suffix + ".tmp")
	with tmp.open("w", encoding="utf-8", newline="\n") as f:
		json.dump(settings.to_dict(), f, indent=2, ensure_ascii=False)
		f.write("\n")
	tmp.replace(p)
