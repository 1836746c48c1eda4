"""
Entity model binding for page handlers.

A page handler that takes an entity identifier from the URL asks the provider for
a binder for the entity type and gets the loaded entity back. Only the types
listed in ``models.ENTITY_TYPES`` are bindable; the capability check is explicit
rather than inferred from the class hierarchy.
"""

import logging
from typing import Any, Optional, Type

from models import ENTITY_TYPES
from services.base_service import ContextProvider
from services.errors import NotFoundError
from services.unit_of_work import get_school_context

logger = logging.getLogger(__name__)


class EntityModelBinder:
    """Loads an entity by primary key through the request's data context."""

    def __init__(self, context_provider: Optional[ContextProvider] = None) -> None:
        self._context_provider = context_provider or get_school_context

    def bind(self, model_type: Type[Any], value: Any) -> Any:
        """
        Args:
            model_type: Entity class to load
            value: Raw identifier (URL segment or form value)

        Raises:
            NotFoundError: If the identifier is malformed or no entity has it
        """
        try:
            identifier = int(value)
        except (TypeError, ValueError):
            raise NotFoundError(
                f"{model_type.__name__} '{value}' not found",
                error_code='ENTITY_NOT_FOUND'
            ) from None

        entity = self._context_provider().session.get(model_type, identifier)
        if entity is None:
            raise NotFoundError(
                f"{model_type.__name__} {identifier} not found",
                error_code='ENTITY_NOT_FOUND'
            )
        return entity


class EntityModelBinderProvider:
    """Hands out an EntityModelBinder for bindable entity types, None otherwise."""

    def __init__(self, context_provider: Optional[ContextProvider] = None) -> None:
        self._binder = EntityModelBinder(context_provider)

    def get_binder(self, model_type: Type[Any]) -> Optional[EntityModelBinder]:
        if model_type in ENTITY_TYPES:
            return self._binder
        return None


_provider = EntityModelBinderProvider()


def bind_entity(model_type: Type[Any], value: Any) -> Any:
    """
    Bind ``value`` to an entity of ``model_type`` for the current request.

    Raises:
        TypeError: If ``model_type`` is not bindable
        NotFoundError: If the entity does not exist
    """
    binder = _provider.get_binder(model_type)
    if binder is None:
        raise TypeError(f"{model_type.__name__} is not a bindable entity type")
    return binder.bind(model_type, value)
