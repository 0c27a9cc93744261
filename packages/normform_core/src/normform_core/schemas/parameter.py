from enum import Enum
from typing import Any, ClassVar, Mapping, Self, TypeAlias

from pydantic import BaseModel, ConfigDict, Field


class Exposure(str, Enum):
    """How a parameter is handed to the template."""

    VALUE = "value"
    OBJECT = "object"


class BaseParameter(BaseModel):
    """
    Immutable named value passed from a form controller to its view.

    Subclasses choose their `exposure`. The view never inspects the concrete
    class, it only looks at this declared mode (see `template_value`).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    exposure: ClassVar[Exposure]

    name: str = Field(..., min_length=1, description="Unique within one view")
    value: Any = None

    def get_name(self) -> str:
        return self.name

    def get_value(self) -> Any:
        return self.value


class GenericParameter(BaseParameter):
    """
    Plain name/value pair. The template receives the raw value.

    Examples
    --------
    ::

        >>> param = GenericParameter(name="title", value="Sign up")
        >>> template_value(param)
        'Sign up'
    """

    exposure: ClassVar[Exposure] = Exposure.VALUE


class PostParameter(BaseParameter):
    """
    A submitted form field. The template receives the whole object so it can
    read both ``{{ username.value }}`` and ``{{ username.errors }}``.

    Examples
    --------
    Read a field from submitted data, trimming surrounding whitespace::

        >>> param = PostParameter.from_fields({"username": "  ada "}, "username")
        >>> param.value
        'ada'

    Attach a validation message without mutating the original::

        >>> flagged = param.with_errors("Name is taken.")
        >>> flagged.errors
        ('Name is taken.',)
        >>> param.errors
        ()
    """

    exposure: ClassVar[Exposure] = Exposure.OBJECT

    value: Any = ""
    errors: tuple[str, ...] = ()

    @classmethod
    def from_fields(
        cls,
        fields: Mapping[str, Any],
        name: str,
        *,
        sanitize: bool = True,
    ) -> Self:
        """
        Build the parameter from submitted form fields. A missing field yields
        an empty value.
        """
        raw = fields.get(name)
        value = "" if raw is None else str(raw)
        if sanitize:
            value = value.strip()
        return cls(name=name, value=value)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def with_errors(self, *messages: str) -> Self:
        return self.model_copy(update={"errors": self.errors + tuple(messages)})

    def __str__(self) -> str:
        # Lets templates write {{ username }} as a shorthand for the value
        return str(self.value)


Parameter: TypeAlias = GenericParameter | PostParameter


def template_value(param: BaseParameter) -> Any:
    """
    Resolve what the template sees for `param`, based on its exposure mode.

    >>> template_value(GenericParameter(name="count", value=3))
    3
    """
    exposure = getattr(type(param), "exposure", None)
    if exposure is Exposure.VALUE:
        return param.value
    if exposure is Exposure.OBJECT:
        return param
    msg = f"Unsupported exposure mode {exposure!r} for parameter {param.name!r}."
    raise TypeError(msg)
