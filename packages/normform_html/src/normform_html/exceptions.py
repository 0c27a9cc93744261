class NormFormError(Exception):
    """Base class for all NormForm exceptions."""


class TemplateError(NormFormError):
    """Base class for failures raised while rendering a view's template."""

    def __init__(self, template_name: str, message: str) -> None:
        self.template_name = template_name
        self.message = message
        super().__init__(f"{template_name}: {message}")


class TemplateLoadError(TemplateError):
    """The template could not be found by the loader."""


class TemplateSyntaxError(TemplateError):
    """The template source is malformed."""


class TemplateRuntimeError(TemplateError):
    """Evaluating the template failed."""


class RedirectError(NormFormError):
    """Signal used to end the current request with a redirect."""

    def __init__(self, url: str, status_code: int = 302) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(url)
