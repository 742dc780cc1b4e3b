from typing import Optional

from ..errors import ConfigurationError
from ..settings import settings
from .base import Gateway
from .bni.adapter import BniAdapter
from .bri.adapter import BriMpmDynamicAdapter

# Adapters are built from settings at import
_registry = {
    "BNI": BniAdapter(),
    "BRI_MPM_DYNAMIC": BriMpmDynamicAdapter(),
}

# Provider name aliases → canonical registry keys
_aliases = {
    # BNI
    "bni": "BNI",
    "bni_qris": "BNI",

    # BRI
    "bri": "BRI_MPM_DYNAMIC",
    "bri_mpm": "BRI_MPM_DYNAMIC",
    "bri-mpm": "BRI_MPM_DYNAMIC",
    "bri_mpm_dynamic": "BRI_MPM_DYNAMIC",
    "brimpm": "BRI_MPM_DYNAMIC",
}

def get_provider_by_name(name: Optional[str]) -> Optional[Gateway]:
    if not name:
        return None
    key = _aliases.get(name.strip().lower(), name)
    return _registry.get(key)

def get_gateway(name: Optional[str] = None) -> Gateway:
    lookup = name or settings.DEFAULT_PROVIDER
    provider = get_provider_by_name(lookup)
    if provider is None:
        raise ConfigurationError(f"unknown QRIS provider {lookup!r}")
    return provider
