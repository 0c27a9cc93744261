import pytest
from normform_core import (
    BaseParameter,
    Exposure,
    GenericParameter,
    PostParameter,
    template_value,
)
from pydantic import ValidationError


def test_generic_parameter_accessors():
    param = GenericParameter(name="title", value="Sign up")

    assert param.get_name() == "title"
    assert param.get_value() == "Sign up"


def test_generic_parameter_accepts_any_value():
    messages = ["Name is required.", "Email is invalid."]
    param = GenericParameter(name="errorMessages", value=messages)

    assert param.value == messages


def test_parameters_are_immutable():
    param = GenericParameter(name="title", value="a")

    with pytest.raises(ValidationError):
        param.value = "b"


def test_empty_name_is_rejected():
    with pytest.raises(ValidationError):
        GenericParameter(name="", value="x")


def test_exposure_modes():
    assert GenericParameter.exposure is Exposure.VALUE
    assert PostParameter.exposure is Exposure.OBJECT


def test_template_value_exposes_raw_value_for_generic():
    assert template_value(GenericParameter(name="count", value=3)) == 3


def test_template_value_exposes_whole_object_for_post():
    param = PostParameter(name="username", value="ada")

    assert template_value(param) is param


def test_template_value_rejects_parameter_without_exposure():
    with pytest.raises(TypeError, match="Unsupported exposure mode"):
        template_value(BaseParameter(name="raw", value=1))


def test_post_parameter_from_fields_trims_value():
    param = PostParameter.from_fields({"username": "  ada  "}, "username")

    assert param.name == "username"
    assert param.value == "ada"
    assert param.errors == ()


def test_post_parameter_from_fields_without_sanitizing():
    param = PostParameter.from_fields({"note": "  keep  "}, "note", sanitize=False)

    assert param.value == "  keep  "


def test_post_parameter_missing_field_is_empty():
    param = PostParameter.from_fields({}, "email")

    assert param.value == ""


def test_post_parameter_with_errors_returns_copy():
    param = PostParameter(name="email", value="nope")
    flagged = param.with_errors("Email is invalid.", "Email is taken.")

    assert flagged.errors == ("Email is invalid.", "Email is taken.")
    assert flagged.has_errors is True
    assert param.errors == ()
    assert param.has_errors is False


def test_post_parameter_str_is_value():
    assert str(PostParameter(name="city", value="Linz")) == "Linz"


def test_post_parameter_accepts_non_string_value():
    param = PostParameter(name="age", value=42)

    assert param.get_value() == 42
    assert str(param) == "42"
    assert template_value(param) is param
