from typing import Any, Dict, Type

from ._constants import KNOWN_OPTIONS, OptionKeys
from ._plan import FieldPlan
from ._resolver import TypeResolver
from ._validator import OptionValidator


class PropertyCompiler:
    """Resuelve el tipo, valida las opciones y monta el FieldPlan de una propiedad."""

    def __init__(self, resolver: TypeResolver, validator: OptionValidator):
        self.resolver = resolver
        self.validator = validator

    def compile(self, cls: Type, key: str, options: Dict[str, Any]) -> FieldPlan:
        resolution = self.resolver.resolve(cls, key, options)
        validated = self.validator.validate(cls.__name__, key, resolution.stored, options)

        extra = {option: value for option, value in options.items() if option not in KNOWN_OPTIONS}

        return FieldPlan(
            name=key,
            type=resolution.stored,
            exposed_type=resolution.exposed,
            type_source=resolution.source,
            required=validated.required,
            has_default=OptionKeys.DEFAULT in options,
            default=options.get(OptionKeys.DEFAULT),
            index=validated.index,
            unique=validated.unique,
            validators=validated.validators,
            transform=validated.transform,
            alias=validated.alias,
            suppress_id=validated.suppress_id,
            enum=resolution.enum_values,
            constraints=validated.constraints,
            virtual=validated.virtual,
            extra=extra,
        )
