from .base import HttpTimingProvider, TimingProvider
from .horizons import HorizonsTimingProvider
from .local import LocalTimingSource
from .opale import OpaleTimingProvider
from .usno import UsnoTimingProvider

_PROVIDER_CLASSES = {
    "usno": UsnoTimingProvider,
    "horizons": HorizonsTimingProvider,
    "opale": OpaleTimingProvider,
}


def get_timing_providers(config=None) -> list[TimingProvider]:
    """Network providers in configured priority order (highest first)."""
    if config is None:
        return [cls() for cls in _PROVIDER_CLASSES.values()]
    if not config.providers_enabled:
        return []
    providers = []
    for name in config.provider_order:
        cls = _PROVIDER_CLASSES.get(name)
        if cls is None:
            raise ValueError(f"Unknown timing provider: {name}")
        providers.append(cls(timeout_s=config.provider_timeout_s))
    return providers


__all__ = [
    "TimingProvider",
    "HttpTimingProvider",
    "UsnoTimingProvider",
    "HorizonsTimingProvider",
    "OpaleTimingProvider",
    "LocalTimingSource",
    "get_timing_providers",
]
