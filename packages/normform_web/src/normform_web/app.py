from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Sequence

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from normform_core.config import normform_settings
from normform_core.logging import setup_logging
from normform_html.controller import FormController
from normform_html.exceptions import RedirectError
from starlette.middleware.sessions import SessionMiddleware

if TYPE_CHECKING:
    from pathlib import Path

    from normform_core.schemas.parameter import BaseParameter


class NormFormApp(FastAPI):
    """
    FastAPI application wrapper for NormForm controllers.

    Mounts form controllers on GET and POST routes, turns `RedirectError`
    into redirects and, when a secret key is configured, enables signed
    cookie sessions so templates can read `_session`.

    Example:
        >>> app = NormFormApp(secret_key="change-me")
        >>> app.add_form("/register", RegisterForm, "register.html.jinja")
    """

    def __init__(
        self,
        *,
        template_directory: Path | str | None = None,
        template_cache_directory: Path | str | None = None,
        secret_key: str | None = None,
        configure_logging: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.template_directory = template_directory
        self.template_cache_directory = template_cache_directory

        if configure_logging:
            setup_logging(
                level=normform_settings.LOG_LEVEL,
                log_file=normform_settings.LOG_FILE,
            )

        session_secret = secret_key or normform_settings.SECRET_KEY
        if session_secret:
            self.add_middleware(SessionMiddleware, secret_key=session_secret)

        self.add_exception_handler(RedirectError, handle_redirect)

    def add_form(
        self,
        path: str,
        controller: type[FormController],
        template_name: str,
        *,
        name: str | None = None,
        methods: Iterable[str] | None = None,
        parameters: Sequence[BaseParameter] | None = None,
        **initkwargs: Any,
    ) -> None:
        if not (isinstance(controller, type) and issubclass(controller, FormController)):
            msg = f"{controller!r} is not a FormController subclass."
            raise TypeError(msg)

        if methods is None:
            methods = ("GET", "POST")
        resolved_methods = [m.upper() for m in methods]
        if not resolved_methods:
            msg = f"No HTTP methods declared for form {controller.__name__}."
            raise ValueError(msg)

        endpoint = controller.as_endpoint(
            template_name,
            template_directory=self.template_directory,
            template_cache_directory=self.template_cache_directory,
            parameters=parameters,
            **initkwargs,
        )
        self.add_api_route(path, endpoint, name=name, methods=resolved_methods)


async def handle_redirect(_request: Request, exc: RedirectError) -> RedirectResponse:
    return RedirectResponse(exc.url, status_code=exc.status_code)


__all__ = ["NormFormApp", "handle_redirect"]
