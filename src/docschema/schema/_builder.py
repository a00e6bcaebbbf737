from typing import Any, Callable, Dict, List, Optional, Type

from docschema.metadata import DecoratorKeys
from ._compiler import ClassCompiler, get_compiler
from ._constants import SchemaKeys, TypeKinds
from ._plan import FieldPlan, SchemaPlan, Validator, VirtualPopulate
from ._types import ArrayOf, MapOf, Nested, Primitive, Reference, ResolvedType, iter_types

# ==================== SCHEMA BUILDERS ====================


class SchemaBuilder:
    """Factory de las definiciones planas que consume el driver"""

    @staticmethod
    def build_type(resolved: ResolvedType, entity_name: Callable[[type], str]) -> Dict[str, Any]:
        if isinstance(resolved, Primitive):
            return {SchemaKeys.TYPE: resolved.storage}
        if isinstance(resolved, ArrayOf):
            return {
                SchemaKeys.TYPE: TypeKinds.ARRAY,
                SchemaKeys.ITEMS: SchemaBuilder.build_type(resolved.item, entity_name),
            }
        if isinstance(resolved, MapOf):
            return {
                SchemaKeys.TYPE: TypeKinds.MAP,
                SchemaKeys.OF: SchemaBuilder.build_type(resolved.value, entity_name),
            }
        if isinstance(resolved, Nested):
            return {SchemaKeys.TYPE: TypeKinds.NESTED, SchemaKeys.ENTITY: entity_name(resolved.target)}
        if isinstance(resolved, Reference):
            return SchemaBuilder.build_reference(resolved, entity_name)
        return {SchemaKeys.TYPE: TypeKinds.MIXED}

    @staticmethod
    def build_reference(resolved: Reference, entity_name: Callable[[type], str]) -> Dict[str, Any]:
        schema: Dict[str, Any] = {SchemaKeys.TYPE: TypeKinds.REFERENCE, SchemaKeys.REF_TYPE: resolved.ref_type}
        if isinstance(resolved.target, str):
            schema[SchemaKeys.REF] = resolved.target
        elif resolved.target is not None:
            schema[SchemaKeys.REF] = entity_name(resolved.target)
        if resolved.path is not None:
            schema[SchemaKeys.REF_PATH] = resolved.path
        return schema

    @staticmethod
    def build_validators(validators: List[Validator]) -> List[Dict[str, Any]]:
        return [
            {SchemaKeys.VALIDATOR: item.validator, SchemaKeys.MESSAGE: item.message}
            if item.message is not None
            else {SchemaKeys.VALIDATOR: item.validator}
            for item in validators
        ]

    @staticmethod
    def build_virtual(virtual: VirtualPopulate, entity_name: Callable[[type], str]) -> Dict[str, Any]:
        schema: Dict[str, Any] = {
            SchemaKeys.LOCAL_FIELD: virtual.local_field,
            SchemaKeys.FOREIGN_FIELD: virtual.foreign_field,
            SchemaKeys.JUST_ONE: virtual.just_one,
            SchemaKeys.COUNT: virtual.count,
        }
        if virtual.ref_path is not None:
            schema[SchemaKeys.REF_PATH] = virtual.ref_path
        elif isinstance(virtual.ref, type):
            schema[SchemaKeys.REF] = entity_name(virtual.ref)
        else:
            schema[SchemaKeys.REF] = virtual.ref
        return schema

    @staticmethod
    def build_entity_schema(
        fields: Dict[str, Any], virtuals: Dict[str, Any], entity_metadata: Dict[str, Any]
    ) -> Dict[str, Any]:
        schema = {SchemaKeys.FIELDS: fields, SchemaKeys.ENTITY_METADATA: entity_metadata}
        if virtuals:
            schema[SchemaKeys.VIRTUALS] = virtuals
        return schema


# ==================== DEFINITION GENERATOR ====================


class DefinitionGenerator:
    """
    Genera las definiciones planas de una clase y de todo lo que anida.

    El resultado se indexa por nombre de entidad; las entidades anidadas
    aparecen una sola vez aunque se usen desde varios campos.
    """

    def __init__(self, compiler: ClassCompiler):
        self.compiler = compiler

    def generate(self, cls: Type) -> Dict[str, Any]:
        definitions: Dict[str, Any] = {}
        pending: List[type] = [cls]
        visited: List[type] = []

        while pending:
            current = pending.pop(0)
            if current in visited:
                continue
            visited.append(current)

            plan = self.compiler.compile(current)
            definitions[plan.name] = self.build_entity(plan)
            pending.extend(plan.nested_classes)
            pending.extend(self._discriminator_children(current))

        return definitions

    def build_entity(self, plan: SchemaPlan) -> Dict[str, Any]:
        fields = {
            field_plan.name: self.build_field(field_plan)
            for field_plan in plan.stored_fields
        }
        virtuals = {
            field_plan.name: SchemaBuilder.build_virtual(field_plan.virtual, self._entity_name)
            for field_plan in plan.virtual_fields
        }
        return SchemaBuilder.build_entity_schema(fields, virtuals, self.build_entity_metadata(plan))

    def build_field(self, field_plan: FieldPlan) -> Dict[str, Any]:
        schema = SchemaBuilder.build_type(field_plan.type, self._entity_name)

        if field_plan.required is not False:
            schema[SchemaKeys.REQUIRED] = field_plan.required
        if field_plan.has_default:
            schema[SchemaKeys.DEFAULT] = field_plan.default
        if field_plan.index:
            schema[SchemaKeys.INDEX] = True
        if field_plan.unique:
            schema[SchemaKeys.UNIQUE] = True
        if field_plan.validators:
            schema[SchemaKeys.VALIDATORS] = SchemaBuilder.build_validators(field_plan.validators)
        if field_plan.transform is not None:
            schema[SchemaKeys.GET] = field_plan.transform.get
            schema[SchemaKeys.SET] = field_plan.transform.set
        if field_plan.alias is not None:
            schema[SchemaKeys.ALIAS] = field_plan.alias
        if field_plan.suppress_id:
            schema[SchemaKeys.ID] = False
        if field_plan.enum is not None:
            schema[SchemaKeys.ENUM] = list(field_plan.enum)

        schema.update(field_plan.constraints)
        schema.update(field_plan.extra)
        return schema

    def build_entity_metadata(self, plan: SchemaPlan) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {SchemaKeys.ENTITY_NAME: plan.name}

        if plan.schema_options:
            metadata[SchemaKeys.SCHEMA_OPTIONS] = plan.schema_options
        if plan.discriminator_key is not None:
            metadata[SchemaKeys.DISCRIMINATOR_KEY] = plan.discriminator_key
        if plan.discriminator_value is not None:
            metadata[SchemaKeys.DISCRIMINATOR_VALUE] = plan.discriminator_value

        children = self._discriminator_children(plan.cls)
        if children:
            group = self.compiler.get_discriminator_group(plan.cls)
            # la raíz pudo compilarse antes de registrar sus hijos
            metadata[SchemaKeys.DISCRIMINATOR_KEY] = group.key
            metadata[SchemaKeys.DISCRIMINATORS] = {
                value: child.name for value, child in group.children.items()
            }
        if plan.plugins:
            metadata[SchemaKeys.PLUGINS] = [item.fn for item in plan.plugins]
        if plan.hooks:
            metadata[SchemaKeys.HOOKS] = [
                {"kind": hook.kind, "method": hook.method, "fn": hook.fn} for hook in plan.hooks
            ]
        if plan.aliases:
            metadata[SchemaKeys.ALIASES] = dict(plan.aliases)

        dependencies = self._dependencies(plan)
        if dependencies:
            metadata[SchemaKeys.DEPENDENCIES] = dependencies
        return metadata

    def _dependencies(self, plan: SchemaPlan) -> Dict[str, List[str]]:
        """Entidades anidadas y referenciadas, ordenadas y sin duplicados."""
        embedded = set()
        references = set()
        for field_plan in plan.fields:
            for resolved in iter_types(field_plan.type):
                if isinstance(resolved, Nested):
                    embedded.add(self._entity_name(resolved.target))
                elif isinstance(resolved, Reference) and resolved.target is not None:
                    references.add(
                        resolved.target if isinstance(resolved.target, str) else self._entity_name(resolved.target)
                    )

        dependencies: Dict[str, List[str]] = {}
        if embedded:
            dependencies[SchemaKeys.EMBEDDED] = sorted(embedded)
        if references:
            dependencies[SchemaKeys.REFERENCES] = sorted(references)
        return dependencies

    def _discriminator_children(self, cls: type) -> List[type]:
        return list(self.compiler.store.get(cls, DecoratorKeys.DISCRIMINATORS) or [])

    def _entity_name(self, target: type) -> str:
        return self.compiler.entity_name(target)


# ==================== HELPER FUNCTION ====================


def generate_definitions(cls: Type, compiler: Optional[ClassCompiler] = None) -> Dict[str, Any]:
    """Definiciones planas de cls y sus entidades anidadas"""
    generator = DefinitionGenerator(compiler or get_compiler())
    return generator.generate(cls)
