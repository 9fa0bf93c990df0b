"""Resource id parsing shared by the resource services."""

import uuid

from app.exceptions import InvalidArgumentError


def parse_resource_id(raw: str, resource: str) -> uuid.UUID:
    """
    Parse a path id into a UUID.

    A malformed id is a client error (400), kept distinct from a well-formed
    id that matches nothing (404).
    """
    try:
        return uuid.UUID(str(raw))
    except (ValueError, AttributeError, TypeError):
        raise InvalidArgumentError(
            message=f"Invalid {resource} ID",
            field="id",
            context={"resource": resource, "value": str(raw)[:64]},
        )
