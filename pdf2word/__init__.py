"""pdf2word ─ PDF to Word conversion service.

The ASGI application lives in :pymod:`pdf2word.api.app`; the conversion
pipeline in :pymod:`pdf2word.conversion`.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__: list[str] = ["__version__"]
