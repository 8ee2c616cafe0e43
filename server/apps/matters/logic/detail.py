"""Ancestry of a matter, for presentation and move validation."""

import dataclasses
import logging

from server.apps.matters.models import MATTER_ROOT, Matter

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class MatterDetail:
    """A matter together with its ancestors.

    ``ancestors`` runs from the direct parent up to the top-level
    directory; it is empty for top-level matters.
    """

    matter: Matter
    ancestors: tuple[Matter, ...]

    @property
    def breadcrumbs(self) -> list[str]:
        """Names from the top-level directory down to the matter."""
        return [
            ancestor.name for ancestor in reversed(self.ancestors)
        ] + [self.matter.name]


def get_ancestors(matter: Matter) -> list[Matter]:
    """Walk up the parents of a matter.

    Read-only: the given matter and the loaded rows are not modified.

    Args:
        matter: Matter to start from.

    Returns:
        Ancestor rows, nearest first. Empty for top-level matters and
        for the root itself.

    Raises:
        Matter.DoesNotExist: If a parent row is missing.
    """
    ancestors: list[Matter] = []
    parent_uuid = matter.parent_uuid
    while parent_uuid != MATTER_ROOT:
        parent = Matter.objects.check_by_uuid(parent_uuid)
        ancestors.append(parent)
        parent_uuid = parent.parent_uuid
    return ancestors


def lineage_uuids(matter: Matter) -> list[str]:
    """Identifiers of a matter and all its ancestors, ending with the root.

    Example: ['<dest uuid>', '<parent uuid>', 'root']
    """
    lineage = [matter.uuid]
    lineage.extend(ancestor.uuid for ancestor in get_ancestors(matter))
    if lineage[-1] != MATTER_ROOT:
        lineage.append(MATTER_ROOT)
    return lineage


def is_same_or_descendant(candidate: Matter, ancestor: Matter) -> bool:
    """Check if ``candidate`` is ``ancestor`` itself or lives below it."""
    return ancestor.uuid in lineage_uuids(candidate)


def get_detail(matter_uuid: str) -> MatterDetail:
    """Load a matter with its ancestor chain.

    Args:
        matter_uuid: Identifier of the matter.

    Returns:
        MatterDetail for the matter.

    Raises:
        Matter.DoesNotExist: If the matter or one of its parents is missing.
    """
    matter = Matter.objects.check_by_uuid(matter_uuid)
    ancestors = get_ancestors(matter)
    logger.debug(
        'Loaded detail of %s with %d ancestors',
        matter_uuid,
        len(ancestors),
    )
    return MatterDetail(matter=matter, ancestors=tuple(ancestors))
