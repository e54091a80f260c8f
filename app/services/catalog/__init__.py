"""Model catalog services."""

from app.services.catalog.model_grouping import (
    GroupedModel,
    RemoteModel,
    RemoteModelLister,
    group_models,
)

__all__ = ["GroupedModel", "RemoteModel", "RemoteModelLister", "group_models"]
