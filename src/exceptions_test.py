from docschema.exceptions import (
    ConfigurationError,
    InvalidTypeError,
    MissingPairedOptionError,
    NoValidClassError,
    SchemaException,
    TypeMismatchError,
)


def test_configuration_errors_share_base():
    error = MissingPairedOptionError("Cat", "name", "get", "set")

    assert isinstance(error, ConfigurationError)
    assert isinstance(error, SchemaException)
    assert error.error == "Missing Paired Option"
    assert error.location == "Cat.name"
    assert '"Cat.name"' in str(error)


def test_type_mismatch_names_both_types():
    error = TypeMismatchError("Cat", "tags", "array<string>", "map<string>")

    assert "array<string>" in str(error)
    assert "map<string>" in str(error)


def test_invalid_type_reason_is_appended():
    error = InvalidTypeError("Cat", "value", "Union[str, int]", "ambiguous union")

    assert str(error).endswith("(ambiguous union)")


def test_no_valid_class_is_a_type_error():
    error = NoValidClassError(42, "Cat", "owner")

    assert isinstance(error, TypeError)
    assert error.value == 42
    assert str(error).startswith('"42" is not a class!')


def test_location_with_class_only():
    assert SchemaException("boom", class_name="Cat").location == "Cat"
    assert SchemaException("boom").location is None
