"""
Form lifecycle for NormForm controllers.

A controller gathers, validates and processes one form per request:

    1.  **Initial request** (GET): the current view is displayed.
    2.  **Submission** (POST): `is_valid()` checks the input. On success
        `business()` processes it, possibly swapping the current view.
    3.  Whatever view is current at the end is displayed. A failed
        submission therefore re-renders the form with its error messages.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import nullcontext
from pathlib import Path
from typing import Any, Callable, Coroutine, Iterable
from uuid import uuid4

from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from normform_core.config import normform_settings
from normform_core.logging import get_logger, scoped_correlation_id
from normform_core.schemas.parameter import BaseParameter, PostParameter
from starlette.concurrency import run_in_threadpool

from normform_html.exceptions import RedirectError
from normform_html.request import RequestContext
from normform_html.typing import NormForm
from normform_html.view import View

logger = get_logger(__name__)


def run_form(form: NormForm) -> Response | None:
    """
    Drive `form` through one request.

    Returns the response of `form.show()` for the view that is current after
    processing, or None when the form has no current view (nothing is
    rendered then).
    """
    if form.is_form_submission():
        if form.is_valid():
            form.business()
        else:
            logger.debug("Submission for %s failed validation", type(form).__name__)

    if form.current_view is None:
        logger.debug("%s has no current view, nothing to display", type(form).__name__)
        return None
    return form.show()


class FormController(ABC):
    """
    Base class for a single form.

    Subclasses implement `is_valid()` (validation, recording messages in
    `error_messages`) and `business()` (processing the validated input).
    `run()` ties them together.

    Example:
        >>> class RegisterForm(FormController):
        ...     def is_valid(self) -> bool:
        ...         if self.is_empty_post_field("username"):
        ...             self.add_error("Please enter a username.")
        ...         self.current_view.set_parameter(
        ...             GenericParameter(name="errorMessages", value=self.error_messages)
        ...         )
        ...         return not self.error_messages
        ...
        ...     def business(self) -> None:
        ...         redirect_to("/welcome", {"user": self.context.fields["username"]})
        >>>
        >>> app.add_api_route(
        ...     "/register",
        ...     RegisterForm.as_endpoint("register.html.jinja"),
        ...     methods=["GET", "POST"],
        ... )
    """

    current_view: View | None
    error_messages: list[str]
    status_message: str
    context: RequestContext

    def __init__(
        self,
        default_view: View,
        context: RequestContext | None = None,
        **kwargs: Any,
    ) -> None:
        self.current_view = default_view
        self.context = (
            context
            if context is not None
            else default_view.context or RequestContext()
        )
        self.error_messages = []
        self.status_message = ""
        for key, value in kwargs.items():
            setattr(self, key, value)

    @abstractmethod
    def is_valid(self) -> bool:
        """Validate the submitted input. Return False to re-display the form."""

    @abstractmethod
    def business(self) -> None:
        """Process input that passed `is_valid()`."""

    def run(self) -> Response | None:
        return run_form(self)

    def show(self) -> Response:
        if self.current_view is None:
            msg = f"{type(self).__name__} has no current view to show."
            raise RuntimeError(msg)
        return self.current_view.display()

    def is_form_submission(self) -> bool:
        return self.context.method == normform_settings.SUBMISSION_METHOD.upper()

    def is_empty_post_field(self, name: str) -> bool:
        """
        True if the field was not submitted or contains only whitespace.
        Unlike a plain truthiness check, "0" counts as filled in.
        """
        value = self.context.get_field(name)
        return value is None or len(value.strip()) == 0

    def add_error(self, message: str) -> None:
        self.error_messages.append(message)

    def post_parameter(self, name: str, *, sanitize: bool = True) -> PostParameter:
        return PostParameter.from_fields(self.context.fields, name, sanitize=sanitize)

    @classmethod
    def as_endpoint(
        cls,
        template_name: str,
        *,
        template_directory: Path | str | None = None,
        template_cache_directory: Path | str | None = None,
        parameters: Iterable[BaseParameter] | None = None,
        **initkwargs: Any,
    ) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        """
        Create a FastAPI endpoint that runs this form for every request.

        A fresh view and controller are built per request, so nothing set
        during one request is visible in the next. Initial parameters are
        deep-copied into each view. The lifecycle runs in the threadpool so a
        blocking `business()` does not stall the event loop.

        Args:
            template_name: Template of the default view.
            template_directory: Template source directory of the default view.
            template_cache_directory: Compiled template directory.
            parameters: Initial parameters of the default view.
            **initkwargs: Attributes to override on the controller instance.

        Returns:
            Callable: An async function usable as a FastAPI route handler.
        """
        for key in initkwargs:
            if not hasattr(cls, key):
                msg = (
                    f"{cls.__name__}() received an invalid keyword {key!r}. "
                    f"as_endpoint() only accepts arguments that are already "
                    f"attributes of the class."
                )
                raise TypeError(msg)

        initial_parameters = tuple(parameters or ())

        async def endpoint(request: Request) -> Response:
            context = await RequestContext.from_request(request)

            tracing = nullcontext()
            if normform_settings.ENABLE_REQUEST_ID:
                request_id = (
                    request.headers.get(normform_settings.REQUEST_ID_HEADER)
                    or uuid4().hex
                )
                tracing = scoped_correlation_id(request_id)

            with tracing:
                view = View(
                    template_name,
                    template_directory,
                    template_cache_directory,
                    [p.model_copy(deep=True) for p in initial_parameters],
                    context=context,
                )
                form = cls(view, context, **initkwargs)
                try:
                    response = await run_in_threadpool(form.run)
                except RedirectError as e:
                    logger.debug("%s redirects to %s", cls.__name__, e.url)
                    return RedirectResponse(e.url, status_code=e.status_code)

            if response is None:
                return Response(status_code=200)
            return response

        endpoint.__doc__ = cls.__doc__
        endpoint.__module__ = cls.__module__
        endpoint.__name__ = cls.__name__
        return endpoint
