"""Permission entity - a single granular capability."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Permission:
    """Permission definition. Immutable once seeded."""

    code: str
    name: str
    description: str
    category: str
    action: str
