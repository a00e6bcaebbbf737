from typing import Any, Dict, FrozenSet, List, NamedTuple, Optional, Tuple
import re

from docschema.exceptions import (
    InvalidOptionError,
    MissingPairedOptionError,
    NotAllVirtualPopulateOptionsError,
    NotNumberTypeError,
    NotStringTypeError,
)
from ._constants import (
    BOOLEAN_OPTIONS,
    NUMBER_ONLY_OPTIONS,
    OptionKeys,
    PAIRED_OPTIONS,
    STRING_ONLY_OPTIONS,
    StorageTypes,
    TypeKinds,
    VIRTUAL_REQUIRED_OPTIONS,
    VIRTUAL_TRIGGER_OPTIONS,
)
from ._plan import Transform, Validator, VirtualPopulate
from ._types import Primitive, ResolvedType

# Opciones específicas permitidas por tipo; lo que no aparece aquí es genérico
PERMITTED_OPTIONS: Dict[str, FrozenSet[str]] = {
    StorageTypes.STRING: STRING_ONLY_OPTIONS,
    StorageTypes.NUMBER: NUMBER_ONLY_OPTIONS,
    StorageTypes.DECIMAL: NUMBER_ONLY_OPTIONS,
}


class ValidatedOptions(NamedTuple):
    required: Any
    index: bool
    unique: bool
    validators: Tuple[Validator, ...]
    transform: Optional[Transform]
    alias: Optional[str]
    suppress_id: bool
    constraints: Dict[str, Any]
    virtual: Optional[VirtualPopulate]


def permitted_options(resolved: ResolvedType) -> FrozenSet[str]:
    """Opciones específicas de tipo permitidas para el tipo hoja."""
    leaf = resolved.leaf()
    if isinstance(leaf, Primitive):
        return PERMITTED_OPTIONS.get(leaf.storage, frozenset())
    return frozenset()


class OptionValidator:
    """Comprueba la coherencia de las opciones de una propiedad con su tipo resuelto."""

    def validate(self, class_name: str, key: str, resolved: ResolvedType, options: Dict[str, Any]) -> ValidatedOptions:
        self._check_type_specific(class_name, key, resolved, options)
        self._check_pairs(class_name, key, options)
        self._check_booleans(class_name, key, options)
        self._check_ref_type(class_name, key, options)

        constraints = {
            option: options[option]
            for option in (STRING_ONLY_OPTIONS | NUMBER_ONLY_OPTIONS)
            if option in options
        }
        self._check_constraint_values(class_name, key, constraints)

        index, unique = self._index_and_unique(options)

        return ValidatedOptions(
            required=self._required(class_name, key, options),
            index=index,
            unique=unique,
            validators=self.normalize_validators(class_name, key, options.get(OptionKeys.VALIDATE)),
            transform=self._transform(options),
            alias=self._alias(class_name, key, options),
            suppress_id=self._suppress_id(resolved, options),
            constraints=constraints,
            virtual=self._virtual(class_name, key, options),
        )

    # ==================== TYPE SPECIFIC ====================

    def _check_type_specific(self, class_name: str, key: str, resolved: ResolvedType, options: Dict[str, Any]):
        permitted = permitted_options(resolved)
        actual = resolved.leaf().describe()
        for option in options:
            if option in permitted:
                continue
            if option in STRING_ONLY_OPTIONS:
                raise NotStringTypeError(class_name, key, option, actual)
            if option in NUMBER_ONLY_OPTIONS:
                raise NotNumberTypeError(class_name, key, option, actual)

    def _check_constraint_values(self, class_name: str, key: str, constraints: Dict[str, Any]):
        for option in (OptionKeys.MAXLENGTH, OptionKeys.MINLENGTH):
            value = constraints.get(option)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                raise InvalidOptionError(class_name, key, option, "must be a non-negative integer")

        match = constraints.get(OptionKeys.MATCH)
        if match is not None and not isinstance(match, (str, re.Pattern)):
            raise InvalidOptionError(class_name, key, OptionKeys.MATCH, "must be a regular expression")

        for option in (OptionKeys.MIN, OptionKeys.MAX):
            value = constraints.get(option)
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise InvalidOptionError(class_name, key, option, "must be a number")

    # ==================== GENERIC OPTIONS ====================

    def _check_pairs(self, class_name: str, key: str, options: Dict[str, Any]):
        for first, second in PAIRED_OPTIONS:
            has_first = options.get(first) is not None
            has_second = options.get(second) is not None
            if has_first and not has_second:
                raise MissingPairedOptionError(class_name, key, first, second)
            if has_second and not has_first:
                raise MissingPairedOptionError(class_name, key, second, first)
            for option in (first, second):
                if has_first and not callable(options[option]):
                    raise InvalidOptionError(class_name, key, option, "must be callable")

    def _check_booleans(self, class_name: str, key: str, options: Dict[str, Any]):
        for option in BOOLEAN_OPTIONS:
            if options.get(option) is not None and not isinstance(options[option], bool):
                raise InvalidOptionError(class_name, key, option, "must be a boolean")

    def _required(self, class_name: str, key: str, options: Dict[str, Any]) -> Any:
        required = options.get(OptionKeys.REQUIRED, False)
        if not isinstance(required, bool) and not callable(required):
            raise InvalidOptionError(class_name, key, OptionKeys.REQUIRED, "must be a boolean or a callable")
        return required

    def _index_and_unique(self, options: Dict[str, Any]) -> Tuple[bool, bool]:
        unique = options.get(OptionKeys.UNIQUE) or False
        index = options.get(OptionKeys.INDEX)
        if index is None:
            # unique implica índice salvo index=False explícito
            index = unique
        return index, unique

    def _transform(self, options: Dict[str, Any]) -> Optional[Transform]:
        if options.get(OptionKeys.GET) is None:
            return None
        return Transform(get=options[OptionKeys.GET], set=options[OptionKeys.SET])

    def _alias(self, class_name: str, key: str, options: Dict[str, Any]) -> Optional[str]:
        alias = options.get(OptionKeys.ALIAS)
        if alias is None:
            return None
        if not isinstance(alias, str) or not alias:
            raise InvalidOptionError(class_name, key, OptionKeys.ALIAS, "must be a non-empty string")
        if alias == key:
            raise InvalidOptionError(class_name, key, OptionKeys.ALIAS, "must differ from the property name")
        return alias

    def _suppress_id(self, resolved: ResolvedType, options: Dict[str, Any]) -> bool:
        if options.get(OptionKeys.ID) is not False:
            return False
        leaf_container = resolved.item if resolved.kind == TypeKinds.ARRAY else resolved
        return leaf_container.kind == TypeKinds.NESTED

    # ==================== VALIDATE ====================

    def normalize_validators(self, class_name: str, key: str, validate: Any) -> Tuple[Validator, ...]:
        """
        Normaliza la opción validate a una tupla de Validator.

        Acepta un predicado, un dict {validator, message}, una regex o
        una lista de cualquiera de ellos.
        """
        if validate is None:
            return ()
        items = validate if isinstance(validate, (list, tuple)) else [validate]
        return tuple(self._normalize_validator(class_name, key, item) for item in items)

    def _normalize_validator(self, class_name: str, key: str, item: Any) -> Validator:
        if isinstance(item, Validator):
            return item
        if isinstance(item, re.Pattern):
            return Validator(validator=item)
        if isinstance(item, dict):
            validator = item.get("validator")
            message = item.get("message")
            if validator is None or not (callable(validator) or isinstance(validator, re.Pattern)):
                raise InvalidOptionError(class_name, key, OptionKeys.VALIDATE, '"validator" must be callable or a regex')
            if message is not None and not isinstance(message, str):
                raise InvalidOptionError(class_name, key, OptionKeys.VALIDATE, '"message" must be a string')
            return Validator(validator=validator, message=message)
        if callable(item):
            return Validator(validator=item)
        raise InvalidOptionError(class_name, key, OptionKeys.VALIDATE, f"unsupported validator {item!r}")

    # ==================== VIRTUAL POPULATE ====================

    def _virtual(self, class_name: str, key: str, options: Dict[str, Any]) -> Optional[VirtualPopulate]:
        if not any(options.get(option) is not None for option in VIRTUAL_TRIGGER_OPTIONS):
            return None

        missing: List[str] = []
        if options.get(OptionKeys.REF) is None and options.get(OptionKeys.REF_PATH) is None:
            missing.append(OptionKeys.REF)
        for option in (OptionKeys.LOCAL_FIELD, OptionKeys.FOREIGN_FIELD):
            if options.get(option) is None:
                missing.append(option)
        if missing:
            raise NotAllVirtualPopulateOptionsError(class_name, key, missing, VIRTUAL_REQUIRED_OPTIONS)

        for option in (OptionKeys.LOCAL_FIELD, OptionKeys.FOREIGN_FIELD):
            if not isinstance(options[option], str) or not options[option]:
                raise InvalidOptionError(class_name, key, option, "must be a non-empty string")

        return VirtualPopulate(
            ref=options.get(OptionKeys.REF),
            ref_path=options.get(OptionKeys.REF_PATH),
            local_field=options[OptionKeys.LOCAL_FIELD],
            foreign_field=options[OptionKeys.FOREIGN_FIELD],
            just_one=options.get(OptionKeys.JUST_ONE, False),
            count=options.get(OptionKeys.COUNT, False),
        )

    def _check_ref_type(self, class_name: str, key: str, options: Dict[str, Any]):
        if options.get(OptionKeys.REF_TYPE) is not None and (
            options.get(OptionKeys.REF) is None and options.get(OptionKeys.REF_PATH) is None
        ):
            raise InvalidOptionError(class_name, key, OptionKeys.REF_TYPE, 'needs "ref" or "ref_path"')
