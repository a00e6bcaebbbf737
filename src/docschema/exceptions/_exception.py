from typing import Any, Iterable, Optional


# ----------------- Excepción base -----------------


class SchemaException(Exception):
    """
    Excepción base del compilador.
    Lleva la clase y la propiedad afectadas para poder localizar el error.
    """

    def __init__(
        self,
        message: str,
        class_name: Optional[str] = None,
        property_name: Optional[str] = None,
        error: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.class_name = class_name
        self.property_name = property_name
        self.error = error or self.__class__.__name__
        self.cause = cause

    @property
    def location(self) -> Optional[str]:
        if self.class_name and self.property_name:
            return f"{self.class_name}.{self.property_name}"
        return self.class_name or self.property_name


def _where(class_name: Optional[str], property_name: Optional[str]) -> str:
    if class_name and property_name:
        return f'"{class_name}.{property_name}"'
    return f'"{class_name or property_name}"'


# ----------------- Errores de configuración -----------------


class ConfigurationError(SchemaException):
    """Combinación de opciones inválida o inconsistente."""


class NotNumberTypeError(ConfigurationError):
    def __init__(self, class_name: str, property_name: str, option: str, actual: str):
        super().__init__(
            f"Type of {_where(class_name, property_name)} is not a number "
            f'(option "{option}" needs a number, resolved type is "{actual}").',
            class_name,
            property_name,
            error="Not a Number Type",
        )
        self.option = option
        self.actual = actual


class NotStringTypeError(ConfigurationError):
    def __init__(self, class_name: str, property_name: str, option: str, actual: str):
        super().__init__(
            f"Type of {_where(class_name, property_name)} is not a string "
            f'(option "{option}" needs a string, resolved type is "{actual}").',
            class_name,
            property_name,
            error="Not a String Type",
        )
        self.option = option
        self.actual = actual


class MissingPairedOptionError(ConfigurationError):
    def __init__(self, class_name: str, property_name: str, present: str, missing: str):
        super().__init__(
            f'{_where(class_name, property_name)} has option "{present}" without "{missing}"! '
            f'Options "{present}" and "{missing}" must be used together.',
            class_name,
            property_name,
            error="Missing Paired Option",
        )
        self.present = present
        self.missing = missing


class NotAllVirtualPopulateOptionsError(ConfigurationError):
    def __init__(self, class_name: str, property_name: str, missing: Iterable[str], needed: Iterable[str]):
        self.missing = list(missing)
        self.needed = list(needed)
        super().__init__(
            f"{_where(class_name, property_name)} has not all needed Virtual Populate Options! "
            f"Missing: {', '.join(self.missing)}. Needed are: {', '.join(self.needed)}",
            class_name,
            property_name,
            error="Incomplete Virtual Populate",
        )


class InvalidEnumError(ConfigurationError):
    def __init__(self, class_name: str, property_name: str, reason: str):
        super().__init__(
            f"Enum of {_where(class_name, property_name)} is invalid: {reason}",
            class_name,
            property_name,
            error="Invalid Enum",
        )


class InvalidOptionError(ConfigurationError):
    def __init__(self, class_name: Optional[str], property_name: Optional[str], option: str, reason: str):
        super().__init__(
            f'Option "{option}" of {_where(class_name, property_name)} is invalid: {reason}',
            class_name,
            property_name,
            error="Invalid Option",
        )
        self.option = option


class DuplicateDiscriminatorError(ConfigurationError):
    def __init__(self, root_name: str, value: str, existing: str, new: str):
        super().__init__(
            f'Discriminator value "{value}" of "{root_name}" is already registered to "{existing}". '
            f'Cannot register it to "{new}".',
            root_name,
            error="Duplicate Discriminator",
        )
        self.value = value


# ----------------- Errores de tipos -----------------


class NoMetadataError(SchemaException):
    def __init__(self, class_name: str, property_name: str, cause: Optional[BaseException] = None):
        super().__init__(
            f"There is no type metadata for the {_where(class_name, property_name)} property.\n"
            "Check that the property is annotated, that forward references (string "
            "annotations) name classes that exist when the schema is built, or that a "
            "nested class is not declared after its first usage. "
            'As a last resort pass an explicit "type" option.',
            class_name,
            property_name,
            error="No Metadata",
            cause=cause,
        )


class TypeMismatchError(SchemaException):
    def __init__(self, class_name: str, property_name: str, expected: str, actual: str):
        super().__init__(
            f'{_where(class_name, property_name)} declares "{expected}" but the '
            f'explicit type is "{actual}".',
            class_name,
            property_name,
            error="Type Mismatch",
        )
        self.expected = expected
        self.actual = actual


class InvalidTypeError(SchemaException):
    def __init__(self, class_name: str, property_name: str, type_: Any, reason: Optional[str] = None):
        message = f'{_where(class_name, property_name)}\'s Type is invalid! Type is: "{type_}"'
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, class_name, property_name, error="Invalid Type")
        self.type = type_


class NoValidClassError(SchemaException, TypeError):
    def __init__(self, value: Any, class_name: Optional[str] = None, property_name: Optional[str] = None):
        message = f'"{value}" is not a class!'
        if class_name or property_name:
            message = f"{message} (used in {_where(class_name, property_name)})"
        super().__init__(message, class_name, property_name, error="No Valid Class")
        self.value = value
