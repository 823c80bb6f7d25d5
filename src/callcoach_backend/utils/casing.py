"""Key casing helpers: documents are stored snake_case, the JSON API speaks camelCase."""

from typing import Any

from pydantic.alias_generators import to_camel, to_snake


def camel_case_keys(value: Any) -> Any:
    """Recursively rename dict keys to camelCase. ``_id`` is left alone."""
    if isinstance(value, dict):
        return {
            (key if key.startswith("_") else to_camel(key)): camel_case_keys(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [camel_case_keys(item) for item in value]
    return value


def snake_case_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            (key if key.startswith("_") else to_snake(key)): snake_case_keys(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [snake_case_keys(item) for item in value]
    return value


def to_snake_path(path: str) -> str:
    """``overallPerformance.score`` -> ``overall_performance.score``"""
    return ".".join(to_snake(part) for part in path.split("."))
