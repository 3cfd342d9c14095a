"""Domain policy: approved domains, competitor blacklist and search tiers."""

from .registry import DomainRegistry, get_default_registry

__all__ = ["DomainRegistry", "get_default_registry"]
