"""Mutate a resource and stage its outbox event in one transaction."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from outbox_service.infra.events.outbox.repository import OutboxRepository

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from pydantic import BaseModel

    from outbox_service.core.database import TransactionScope, UnitOfWork


async def create_with_event[T](
    unit_of_work: UnitOfWork,
    mutation: Callable[[TransactionScope], Awaitable[T]],
    event_type: str,
    build_payload: Callable[[T], BaseModel | Mapping[str, Any]],
) -> T:
    """Run ``mutation`` and append a pending event describing its result.

    The payload is built from what the mutation returned, so identifiers
    generated by the mutation end up in the event. The result is returned
    only after both writes committed; if either fails, neither persists.

    Args:
        unit_of_work: Transaction factory
        mutation: Performs the create/delete through the scope's repositories
        event_type: Event type identifier (e.g., "product.created")
        build_payload: Turns the mutation result into the event data

    Returns:
        The mutation result
    """
    async with unit_of_work.transaction() as tx:
        result = await mutation(tx)
        await tx.repository(OutboxRepository).create_event(event_type, build_payload(result))
    return result


__all__ = ["create_with_event"]
