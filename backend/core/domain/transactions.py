"""
core.domain.transactions — Helpers for safe state transitions.

Wraps ``select_for_update`` so that every state-changing service reads
the row it is about to mutate under a lock.

Usage::

    from django.db import transaction
    from core.domain.transactions import lock_for_update

    with transaction.atomic():
        fir = lock_for_update(FIR, fir_id)
        ...validate...
        fir.save(update_fields=[...])
"""

from __future__ import annotations

from typing import Any, TypeVar

from django.db import models

from core.domain.exceptions import NotFound

M = TypeVar("M", bound=models.Model)


def lock_for_update(model_class: type[M], pk: Any) -> M:
    """
    Acquire a row-level lock on the given model instance.

    Convenience wrapper around ``select_for_update().get(pk=pk)``
    that must be called inside an ``atomic()`` block.

    Args:
        model_class: The Django model class.
        pk:          Primary key value.

    Returns:
        The locked model instance.

    Raises:
        NotFound: If no row with that PK exists.
    """
    try:
        return model_class.objects.select_for_update().get(pk=pk)
    except model_class.DoesNotExist:
        raise NotFound(f"{model_class.__name__} with pk={pk} does not exist.")
