"""URL liveness verification."""

from .url_verifier import UrlVerifier

__all__ = ["UrlVerifier"]
