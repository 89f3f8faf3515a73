from __future__ import annotations

from typing import Iterable, List


class InvoiceEngineError(Exception):
	"""Base class for every error raised by the invoice engine."""


class InvoiceValidationError(InvoiceEngineError, ValueError):
	"""Invoice data is structurally invalid; nothing was drawn."""

	def __init__(self, problems: Iterable[str]) -> None:
		self.problems: List[str] = list(problems)
		summary = "; ".join(self.problems) if self.problems else "invalid invoice data"
		super().__init__(f"Invalid invoice: {summary}")


class FontResourceError(InvoiceEngineError):
	"""Font data could not be loaded; generation cannot start."""


class SerializationError(InvoiceEngineError):
	"""Internal invariant broken while finalizing a document."""


class UnknownFontError(InvoiceEngineError, ValueError):
	pass


class PageClosedError(InvoiceEngineError, RuntimeError):
	pass


class DocumentFinalizedError(InvoiceEngineError, RuntimeError):
	pass
