"""Known server registry for NetPolGen."""

from .finder import KnownServersFinder, KnownServersResolver
from .models import KnownServer, KnownServerEntry

__all__ = ["KnownServersFinder", "KnownServersResolver", "KnownServer", "KnownServerEntry"]
