from .config import NormFormSettings, normform_settings
from .schemas.parameter import (
    BaseParameter,
    Exposure,
    GenericParameter,
    Parameter,
    PostParameter,
    template_value,
)

__all__ = [
    "BaseParameter",
    "Exposure",
    "GenericParameter",
    "NormFormSettings",
    "Parameter",
    "PostParameter",
    "normform_settings",
    "template_value",
]
