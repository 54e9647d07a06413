"""
Inventory hierarchy and container-aware weight.

The record stores inventory as a flat list where each row names the entity
holding it: the character itself for carried items, or a container item.
Weight contributed by an item is its unit weight times quantity, times the
multiplier of every container above it; a multiplier of 0 (Bag of Holding)
makes everything inside weightless.
"""

import math
from collections import defaultdict
from typing import Optional

from ..config.defaults import InventoryParams, ResolutionConfig, get_default_config
from ..data.models import CharacterRecord, InventoryItem
from ..errors import PartialRecordDataError
from ..logging.config import get_logger
from ..models.resolved import (
    ContainerItem,
    CurrencyResult,
    InventoryResult,
    InventoryStatistics,
    ResolvedItem,
    SkippedEntry,
)

logger = get_logger(__name__)

ZERO_QUANTITY = "Zero quantity"


def check_item(item: InventoryItem) -> None:
    """
    Check that an inventory row is usable.

    Raises:
        PartialRecordDataError: If the id, definition, name or quantity is unusable
    """
    missing = []
    if item.id <= 0:
        missing.append("id")
    if not item.has_definition:
        missing.append("definition")
    elif not item.name:
        missing.append("name")
    if math.isnan(item.quantity):
        missing.append("quantity")

    if missing:
        raise PartialRecordDataError(
            f"Inventory item {item.id} is missing {', '.join(missing)}",
            missing_fields=missing,
            context={"item_id": item.id},
        )


def _resolve_item(item: InventoryItem, multiplier: float) -> ResolvedItem:
    own_weight = item.unit_weight * item.quantity
    return ResolvedItem(
        id=item.id,
        name=item.name,
        quantity=item.quantity,
        unit_weight=item.unit_weight,
        effective_weight=0.0 if multiplier == 0 else own_weight * multiplier,
        container_id=item.container_id,
        equipped=item.equipped,
        attuned=item.attuned,
        is_magic=item.is_magic,
        item_type=item.item_type,
        cost=item.cost,
    )


class _HierarchyBuilder:
    """Walks the container partition once per resolution."""

    def __init__(self, partition: dict[Optional[int], list[InventoryItem]], params: InventoryParams):
        self.partition = partition
        self.params = params
        self.containers: list[ContainerItem] = []
        self.placed: set[int] = set()
        self.cut_off: set[int] = set()                 # Below a container past the depth limit
        self.warnings: list[str] = []
        self.item_count = 0

    def place(self, item: InventoryItem, multiplier: float, depth: int) -> tuple[ResolvedItem, float]:
        """
        Resolve one item and, if it is a container, its contents.

        Args:
            item: Inventory row
            multiplier: Product of the multipliers of every enclosing container
            depth: Nesting depth (0 for carried items)

        Returns:
            (resolved item, total weight the item and its contents add)
        """
        resolved = _resolve_item(item, multiplier)
        self.placed.add(item.id)
        self.item_count += 1
        contributed = resolved.effective_weight

        if not item.is_container:
            return resolved, contributed

        inner_multiplier = multiplier * item.weight_multiplier
        contents = []
        contents_weight = 0.0

        if depth >= self.params.max_container_depth:
            self.warnings.append(f"Container {item.id} exceeds nesting depth {self.params.max_container_depth}")
            self._cut_off(item.id)
        else:
            for child in self.partition.get(item.id, []):
                if child.id in self.placed:
                    self.warnings.append(f"Container {child.id} is nested inside itself")
                    continue
                child_resolved, child_weight = self.place(child, inner_multiplier, depth + 1)
                contents.append(child_resolved)
                contents_weight += child_weight

        self.containers.append(ContainerItem(
            item=resolved,
            weight_multiplier=item.weight_multiplier,
            contents=tuple(contents),
            contents_weight=contents_weight,
        ))
        return resolved, contributed + contents_weight

    def _cut_off(self, container_id: int) -> None:
        """Mark everything below a container past the depth limit as handled."""
        pending = [container_id]
        while pending:
            for child in self.partition.get(pending.pop(), []):
                if child.id not in self.cut_off:
                    self.cut_off.add(child.id)
                    pending.append(child.id)


def resolve_inventory(
    record: CharacterRecord,
    config: Optional[ResolutionConfig] = None
) -> InventoryResult:
    """
    Rebuild the container hierarchy and compute carried weight.

    Items held by something that is neither the character nor a known
    container, or by containers that only hold each other, are treated as
    carried and reported in a warning.

    Args:
        record: Parsed character record
        config: Resolution configuration

    Returns:
        InventoryResult
    """
    params = (config or get_default_config()).inventory

    skipped: list[SkippedEntry] = []
    usable: list[InventoryItem] = []

    for item in record.inventory:
        try:
            check_item(item)
        except PartialRecordDataError as e:
            skipped.append(SkippedEntry(source="inventory", key=str(item.id), reason=str(e),
                                        label=item.name or None))
            continue

        if item.quantity == 0 and not params.include_zero_quantity_items:
            skipped.append(SkippedEntry(source="inventory", key=str(item.id), reason=ZERO_QUANTITY,
                                        label=item.name))
            continue

        usable.append(item)

    container_ids = {item.id for item in usable if item.is_container}

    partition: dict[Optional[int], list[InventoryItem]] = defaultdict(list)
    carried: list[InventoryItem] = []
    orphaned = 0
    for item in usable:
        if item.container_id in (None, record.id):
            carried.append(item)
        elif item.container_id in container_ids and item.container_id != item.id:
            partition[item.container_id].append(item)
        else:
            orphaned += 1
            carried.append(item)

    builder = _HierarchyBuilder(partition, params)
    root_items = []
    total_weight = 0.0
    for item in carried:
        resolved, weight = builder.place(item, 1.0, 0)
        root_items.append(resolved)
        total_weight += weight

    # Containers holding each other are unreachable from the character
    for item in usable:
        if item.id in builder.placed or item.id in builder.cut_off:
            continue
        orphaned += 1
        resolved, weight = builder.place(item, 1.0, 0)
        root_items.append(resolved)
        total_weight += weight

    warnings = list(builder.warnings)
    if orphaned:
        warnings.append(
            f"{orphaned} items reference an unknown or unreachable container and were treated as carried"
        )
    invalid = [entry for entry in skipped if entry.reason != ZERO_QUANTITY]
    if invalid:
        warnings.append(f"{len(invalid)} items skipped due to missing data")

    containers = tuple(sorted(builder.containers, key=lambda container: container.item.id))
    every_item = list(root_items) + [child for container in containers for child in container.contents]

    statistics = InventoryStatistics(
        total_items=builder.item_count,
        root_items=len(root_items),
        container_count=len(containers),
        magic_containers=sum(1 for container in containers if container.is_magic),
        equipped_items=sum(1 for item in every_item if item.equipped),
        attuned_items=sum(1 for item in every_item if item.attuned),
    )

    logger.debug(
        "Resolved inventory",
        character_id=record.id,
        total_weight=total_weight,
        items=statistics.total_items,
        containers=statistics.container_count,
        skipped=len(skipped),
    )

    return InventoryResult(
        root_items=tuple(root_items),
        containers=containers,
        total_weight=total_weight,
        statistics=statistics,
        skipped=tuple(skipped),
        warnings=tuple(warnings),
    )


def resolve_currency(record: CharacterRecord) -> CurrencyResult:
    """Coins by denomination."""
    coins = record.currencies
    return CurrencyResult(pp=coins.pp, gp=coins.gp, ep=coins.ep, sp=coins.sp, cp=coins.cp)
