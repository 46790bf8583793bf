"""JSON Schema of tree snapshots."""

from functools import cache
from json import dumps
from typing import TYPE_CHECKING

from pydantic.json_schema import GenerateJsonSchema, JsonSchemaValue

from branchrun.schema import Branch

if TYPE_CHECKING:
    from pydantic_core import core_schema as core


class SchemaGenerator(GenerateJsonSchema):
    """Custom JSON Schema generator for branchrun models.

    Payloads and deferred assignment values are callables bound when the
    tree is built, and faults are exceptions: neither has a static JSON
    shape. They are represented as unconstrained values.
    """

    @classmethod
    @cache
    def make_schema(cls, indent: int | str | None = 4) -> str:
        """Generate the JSON Schema of a serialized branch.

        Args:
            indent: Indentation level used for JSON formatting.

        Returns:
            Serialized JSON Schema string.
        """
        schema = {
            **Branch.model_json_schema(schema_generator=cls),
            'title': 'branchrun',
            'description': 'JSON Schema for branches served by a branchrun Tree',
            '$schema': cls.schema_dialect,
        }

        return dumps(
            schema,
            ensure_ascii=False,
            sort_keys=True,
            indent=indent,
        )

    def callable_schema(self, schema: 'core.CallableSchema') -> JsonSchemaValue:  # noqa: ARG002
        """Generate JSON Schema for payloads and deferred values.

        Args:
            schema: Pydantic core schema describing a callable.

        Returns:
            A permissive JSON Schema fragment.
        """
        return {'description': 'Runtime value'}

    def is_instance_schema(self, schema: 'core.IsInstanceSchema') -> JsonSchemaValue:
        """Generate JSON Schema for recorded faults.

        Args:
            schema: Pydantic core schema describing an instance check.

        Returns:
            A permissive JSON Schema fragment naming the expected class.
        """
        return {'description': f'Runtime {schema['cls'].__name__}'}
