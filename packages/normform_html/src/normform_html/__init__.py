from normform_core.schemas.parameter import GenericParameter, PostParameter

from .controller import FormController, run_form
from .exceptions import (
    NormFormError,
    RedirectError,
    TemplateError,
    TemplateLoadError,
    TemplateRuntimeError,
    TemplateSyntaxError,
)
from .redirect import build_redirect_url, redirect_to
from .request import RequestContext
from .template_manager import TemplateManager
from .typing import NormForm
from .view import View

__all__ = [
    "FormController",
    "GenericParameter",
    "NormForm",
    "NormFormError",
    "PostParameter",
    "RedirectError",
    "RequestContext",
    "TemplateError",
    "TemplateLoadError",
    "TemplateManager",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "View",
    "build_redirect_url",
    "redirect_to",
    "run_form",
]
