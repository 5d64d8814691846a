"""
Status of a studio pricing configuration set.

Sets are append-only.  A new version of a studio's pricing is published
as a new set and the previous one is marked SUPERSEDED in its YAML; past
quotes can still be re-priced against the set that governed them.  Only
PUBLISHED sets are selected by ``get_active_config``.
"""

from enum import Enum, unique


@unique
class ConfigStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    SUPERSEDED = "superseded"

    @property
    def is_selectable(self) -> bool:
        return self is ConfigStatus.PUBLISHED
