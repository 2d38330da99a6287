"""Dividend data provider registry."""

from __future__ import annotations

from divcalendar.config import DividendProviderType
from divcalendar.providers.base import BaseDividendProvider

# Lazy registry: classes are imported on demand so optional SDKs are
# only required when their provider is used.
PROVIDER_CLASSES: dict[DividendProviderType, str] = {
    DividendProviderType.POLYGON: "divcalendar.providers.polygon.PolygonProvider",
    DividendProviderType.MOCK: "divcalendar.providers.mock.MockProvider",
}


def create_provider(
    provider_type: DividendProviderType,
    **kwargs,
) -> BaseDividendProvider:
    """Instantiate a provider by type, forwarding kwargs to its constructor."""
    import importlib

    dotted = PROVIDER_CLASSES[provider_type]
    module_path, cls_name = dotted.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls = getattr(module, cls_name)
    return cls(**kwargs)


__all__ = ["BaseDividendProvider", "PROVIDER_CLASSES", "create_provider"]
