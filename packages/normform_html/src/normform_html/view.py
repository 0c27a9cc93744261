"""
The view half of a NormForm: a template plus the parameters it is rendered
with.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import jinja2
from fastapi import Response
from fastapi.responses import HTMLResponse
from markupsafe import escape
from normform_core.config import normform_settings
from normform_core.logging import get_logger
from normform_core.schemas.parameter import BaseParameter, template_value

from normform_html.exceptions import (
    RedirectError,
    TemplateError,
    TemplateLoadError,
    TemplateRuntimeError,
    TemplateSyntaxError,
)
from normform_html.redirect import redirect_to
from normform_html.request import RequestContext
from normform_html.template_manager import TemplateManager

logger = get_logger(__name__)


class View:
    """
    Holds the template and parameters for displaying a form or the result of
    a submission, and renders them with Jinja2.

    Two globals are injected into every template: the request's server
    environment (`_server`) and, only when the request has a session, the
    session data (`_session`).

    Example:
        >>> view = View(
        ...     "register.html.jinja",
        ...     parameters=[GenericParameter(name="title", value="Register")],
        ... )
        >>> view.set_parameter(GenericParameter(name="title", value="Sign up"))
        >>> [p.value for p in view.get_parameters()]
        ['Sign up']
    """

    redirect_to = staticmethod(redirect_to)

    def __init__(
        self,
        template_name: str,
        template_directory: Path | str | None = None,
        template_cache_directory: Path | str | None = None,
        parameters: Iterable[BaseParameter] | None = None,
        *,
        context: RequestContext | None = None,
    ) -> None:
        self.template_name = template_name
        self.template_directory = (
            template_directory or normform_settings.TEMPLATE_DIRECTORY
        )
        self.template_cache_directory = (
            template_cache_directory or normform_settings.TEMPLATE_CACHE_DIRECTORY
        )
        self.context = context

        self._parameters: list[BaseParameter] = []
        for param in parameters or ():
            self.set_parameter(param)

        self.engine = TemplateManager(
            self.template_directory,
            self.template_cache_directory,
            auto_reload=normform_settings.TEMPLATE_AUTO_RELOAD,
            strict_undefined=normform_settings.TEMPLATE_STRICT_UNDEFINED,
        )
        server = dict(context.server) if context is not None else {}
        self.engine.add_global(normform_settings.SERVER_GLOBAL_NAME, server)
        if context is not None and context.session is not None:
            self.engine.add_global(
                normform_settings.SESSION_GLOBAL_NAME, dict(context.session)
            )

    def get_template_name(self) -> str:
        return self.template_name

    @property
    def parameters(self) -> list[BaseParameter]:
        return list(self._parameters)

    def get_parameters(self) -> list[BaseParameter]:
        return self.parameters

    def set_parameter(self, param: BaseParameter) -> None:
        """
        Add `param`, or replace the stored parameter with the same name in
        place so the original position is kept.
        """
        for index, existing in enumerate(self._parameters):
            if existing.name == param.name:
                self._parameters[index] = param
                return
        self._parameters.append(param)

    def get_template_parameters(self) -> dict[str, Any]:
        return {param.name: template_value(param) for param in self._parameters}

    def render(self) -> str:
        """
        Render the template to a string.

        Raises:
            TemplateLoadError: The template does not exist.
            TemplateSyntaxError: The template source cannot be parsed.
            TemplateRuntimeError: Evaluating the template failed.
            RedirectError: A template helper called `redirect_to`; passed through
                unchanged.
        """
        try:
            return self.engine.render(
                self.template_name, self.get_template_parameters()
            )
        except jinja2.TemplateNotFound as e:
            msg = f"Template {e.name!r} not found in {self.engine.directories}."
            raise TemplateLoadError(self.template_name, msg) from e
        except jinja2.TemplateSyntaxError as e:
            msg = f"{e.message} ({e.name or self.template_name}, line {e.lineno})"
            raise TemplateSyntaxError(self.template_name, msg) from e
        except jinja2.TemplateError as e:
            raise TemplateRuntimeError(self.template_name, str(e)) from e
        except RedirectError:
            raise
        except Exception as e:
            msg = f"{type(e).__name__}: {e}"
            raise TemplateRuntimeError(self.template_name, msg) from e

    def display(self) -> Response:
        """
        Render the view into an HTML response.

        Template failures are logged and turned into a 500 response. In
        development the response shows the error message.
        """
        try:
            content = self.render()
        except TemplateError as e:
            logger.exception("Could not display template %r", self.template_name)
            return self._error_response(e)
        return HTMLResponse(content)

    @staticmethod
    def _error_response(error: TemplateError) -> Response:
        if normform_settings.is_development():
            body = f"<h1>Template Error</h1><p>{escape(str(error))}</p>"
        else:
            body = "<h1>Internal Server Error</h1>"
        return HTMLResponse(body, status_code=500)
