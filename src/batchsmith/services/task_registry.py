"""Ordered catalogue of generation tasks."""
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class TaskDefinition:
    """
    One catalogue entry.

    ``id`` is the identity persisted with each execution record; ``name``
    is the key used to look up the task's work function.
    """

    id: str
    name: str
    description: str


FUNNEL_TASKS: Tuple[TaskDefinition, ...] = (
    TaskDefinition("1", "lead_magnet_part_1", "Lead Magnet: Cover + Chapters 1-3"),
    TaskDefinition("2", "lead_magnet_part_2", "Lead Magnet: Chapters 4-5 + Bridge + CTA"),
    TaskDefinition("3", "frontend_part_1", "Front-End: Cover + Chapters 1-3"),
    TaskDefinition("4", "frontend_part_2", "Front-End: Chapters 4-6 + Bridge + CTA"),
    TaskDefinition("5", "bump_full", "Bump: Full product (short)"),
    TaskDefinition("6", "upsell1_part_1", "Upsell 1: Cover + First half"),
    TaskDefinition("7", "upsell1_part_2", "Upsell 1: Second half + Bridge + CTA"),
    TaskDefinition("8", "upsell2_part_1", "Upsell 2: Cover + First half"),
    TaskDefinition("9", "upsell2_part_2", "Upsell 2: Second half + Bridge + CTA"),
    TaskDefinition("10", "all_tldrs", "All 5 product TLDRs"),
    TaskDefinition("11", "marketplace_batch_1", "Marketplace: Lead Magnet + Front-End + Bump"),
    TaskDefinition("12", "marketplace_batch_2", "Marketplace: Upsell 1 + Upsell 2"),
    TaskDefinition("13", "all_emails", "All 6 emails"),
    TaskDefinition("14", "bundle_listing", "Bundle listing"),
)


class TaskRegistry:
    """
    Read-only, ordered catalogue of task definitions.

    Iteration order is execution order. The registry is fixed at
    construction; there are no mutation operations.
    """

    def __init__(self, definitions: Iterable[TaskDefinition]):
        """
        Initialize registry from an ordered sequence of definitions.

        Args:
            definitions: Task definitions in execution order

        Raises:
            ValueError: If a task id or name appears more than once
        """
        self._definitions: Tuple[TaskDefinition, ...] = tuple(definitions)

        seen_ids = set()
        seen_names = set()
        for definition in self._definitions:
            if definition.id in seen_ids:
                raise ValueError(f"Duplicate task id '{definition.id}' in catalogue")
            if definition.name in seen_names:
                raise ValueError(f"Duplicate task name '{definition.name}' in catalogue")
            seen_ids.add(definition.id)
            seen_names.add(definition.name)

    def __iter__(self) -> Iterator[TaskDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    @property
    def definitions(self) -> Tuple[TaskDefinition, ...]:
        """Catalogue entries in execution order."""
        return self._definitions

    def get(self, task_id: str) -> Optional[TaskDefinition]:
        """Return the definition with the given id, or None."""
        for definition in self._definitions:
            if definition.id == task_id:
                return definition
        return None

    def get_by_name(self, name: str) -> Optional[TaskDefinition]:
        """Return the definition with the given name, or None."""
        for definition in self._definitions:
            if definition.name == name:
                return definition
        return None

    def names(self) -> List[str]:
        """List task names in execution order."""
        return [definition.name for definition in self._definitions]


def default_task_registry() -> TaskRegistry:
    """Return the funnel catalogue."""
    return TaskRegistry(FUNNEL_TASKS)
