"""
Request body validation utilities for API endpoints.
"""

import re
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from src.core.exceptions.base import ValidationError

TWITTER_HANDLE_PATTERN = re.compile(r'@?[A-Za-z0-9_]{1,15}')

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def is_valid_twitter_handle(value: str) -> bool:
    """Twitter handle: optional leading @ followed by 1-15 letters, digits or underscores."""
    return bool(value) and TWITTER_HANDLE_PATTERN.fullmatch(value) is not None


def _format_errors(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    validation_errors = []
    for error in exc.errors():
        field = '.'.join(str(loc) for loc in error['loc']) or 'body'
        message = error['msg']
        # Strip pydantic's "Value error, " prefix from custom validator messages
        if error['type'] == 'value_error' and message.startswith('Value error, '):
            message = message[len('Value error, '):]
        validation_errors.append({'field': field, 'message': message})
    return validation_errors


def validate_request(
    payload: Any,
    schema: Type[SchemaT]
) -> Tuple[Optional[List[Dict[str, Any]]], Optional[SchemaT]]:
    """
    Validate a request body against a schema in a single pass.

    Every violation is collected, unknown fields are tolerated and dropped
    from the accepted value.

    Returns:
        (errors, None) when the payload is rejected, (None, value) otherwise
    """
    try:
        return None, schema.model_validate(payload)
    except PydanticValidationError as exc:
        return _format_errors(exc), None


def validate_or_raise(payload: Any, schema: Type[SchemaT]) -> SchemaT:
    """Same as validate_request but raises ValidationError with the aggregated errors."""
    errors, value = validate_request(payload, schema)
    if errors:
        raise ValidationError(errors)
    return value
