"""Event type to message model registry.

Each event type owns the schema of its payload. Features register their
message models at import time; the worker uses the registry to turn a
stored ``event_data`` back into the message the publisher sends.

Example:
    message_registry.register("product.created", ProductMessage)

    message = message_registry.parse(event)  # -> ProductMessage
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ValidationError

if TYPE_CHECKING:
    from outbox_service.infra.events.outbox.models import OutboxEvent


class MessageDecodeError(Exception):
    """Stored event data could not be turned into a publishable message."""

    def __init__(self, event_type: str, reason: str) -> None:
        self.event_type = event_type
        self.reason = reason
        super().__init__(f"cannot decode '{event_type}' event: {reason}")


class MessageRegistry:
    """Mapping of event type to the pydantic model of its payload."""

    def __init__(self) -> None:
        self._models: dict[str, type[BaseModel]] = {}

    def register(self, event_type: str, model: type[BaseModel]) -> None:
        """Register ``model`` as the payload schema of ``event_type``.

        Raises:
            ValueError: If the event type is already bound to another model.
        """
        existing = self._models.get(event_type)
        if existing is not None and existing is not model:
            raise ValueError(
                f"event type '{event_type}' is already registered to {existing.__name__}"
            )
        self._models[event_type] = model

    def get(self, event_type: str) -> type[BaseModel] | None:
        return self._models.get(event_type)

    def __contains__(self, event_type: object) -> bool:
        return event_type in self._models

    @property
    def event_types(self) -> frozenset[str]:
        return frozenset(self._models)

    def parse(self, event: OutboxEvent) -> BaseModel:
        """Validate an event's stored data against its registered model.

        Raises:
            MessageDecodeError: If the event type is unknown or the data does
                not match the model.
        """
        model = self._models.get(event.event_type)
        if model is None:
            raise MessageDecodeError(event.event_type, "unknown event type")
        try:
            return model.model_validate(event.event_data)
        except ValidationError as e:
            raise MessageDecodeError(
                event.event_type, f"{e.error_count()} validation error(s)"
            ) from e


# Process-wide registry populated by feature modules
message_registry = MessageRegistry()


__all__ = ["MessageDecodeError", "MessageRegistry", "message_registry"]
