"""Validation and cleanup of JSON schemas generated for tool inputs."""

from typing import Any, Dict, Set

from ...exceptions import ToolValidationError
from ...logger import get_logger

logger = get_logger(__name__)

_METADATA_KEYS = ("$defs", "$schema", "$id", "title", "definitions")


class SchemaValidator:
    """
    Helper class for validating and sanitizing JSON schemas for Claude tools.
    """

    @staticmethod
    def assert_no_recursive_refs(schema: Dict[str, Any]) -> None:
        """
        Checks if the schema contains recursive references by traversing the graph.

        Args:
            schema: The JSON schema to check.

        Raises:
            ToolValidationError: If a recursive reference is found.
        """
        defs = schema.get("$defs", {}) or schema.get("definitions", {})

        def check(node: Any, path: Set[str]) -> None:
            if isinstance(node, dict):
                if "$ref" in node:
                    ref = node["$ref"]
                    if ref in path:
                        msg = (
                            f"Recursive structure detected: {ref}. "
                            "Recursive structures are not allowed in tool inputs."
                        )
                        logger.error(msg)
                        raise ToolValidationError(msg)

                    # Follow local refs, e.g. #/$defs/MyModel
                    if ref.startswith("#"):
                        def_name = ref.split("/")[-1]
                        if def_name in defs:
                            check(defs[def_name], path | {ref})
                    return

                for value in node.values():
                    check(value, path)
            elif isinstance(node, list):
                for item in node:
                    check(item, path)

        check(schema, set())

    @staticmethod
    def sanitize_schema(schema: Any) -> Any:
        """
        Cleans up a generated schema before it is sent to the provider.

        Removes pydantic metadata ($defs, $schema, $id, title) and collapses
        ``Optional[X]`` (anyOf with null) into ``X``. Keys of a ``properties`` map are
        parameter names, not schema keywords, and are left untouched.

        Args:
            schema: The JSON schema to sanitize.

        Returns:
            The sanitized schema.
        """
        if not isinstance(schema, dict):
            return schema

        new_schema = {key: value for key, value in schema.items() if key not in _METADATA_KEYS}

        if "anyOf" in new_schema:
            non_null = [option for option in new_schema["anyOf"] if option.get("type") != "null"]
            if len(non_null) == 1 and isinstance(non_null[0], dict):
                merged = {key: value for key, value in new_schema.items() if key != "anyOf"}
                merged.update(non_null[0])
                if "description" in new_schema:
                    merged["description"] = new_schema["description"]
                return SchemaValidator.sanitize_schema(merged)

        for key, value in new_schema.items():
            if key == "properties" and isinstance(value, dict):
                new_schema[key] = {name: SchemaValidator.sanitize_schema(prop) for name, prop in value.items()}
            elif isinstance(value, dict):
                new_schema[key] = SchemaValidator.sanitize_schema(value)
            elif isinstance(value, list):
                new_schema[key] = [SchemaValidator.sanitize_schema(item) for item in value]

        return new_schema
