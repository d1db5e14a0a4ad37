"""ampify - convert conventional HTML into AMP markup."""

from .pipeline import render_embed, sanitize_document, sanitize_html

__all__ = ["render_embed", "sanitize_document", "sanitize_html"]
