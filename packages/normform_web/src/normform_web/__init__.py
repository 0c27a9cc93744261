from .app import NormFormApp, handle_redirect

__all__ = ["NormFormApp", "handle_redirect"]
