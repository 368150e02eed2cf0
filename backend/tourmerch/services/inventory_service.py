"""
Inventory service: hard items, sized soft items and bundles.

ITEM VARIANTS
=============

  hard    single scalar stock in inventory.quantity
  soft    stock partitioned by size in inventory_sizes, inventory.quantity is null
  bundle  composition rows in bundle_items; inventory.quantity holds the
          displayed quantity derived from the components when the bundle
          was created

Bundle quantity derivation:
  Each component's availability is snapshotted at creation time (hard: its
  quantity, soft: the smallest of its size quantities). The bundle shows the
  minimum of those snapshots, the scarcest component limits how many bundles
  can be assembled. BUNDLE_QUANTITY_POLICY=sum switches to the sum of the
  snapshots.

Every operation is scoped to the caller: items whose tour belongs to another
user are reported as not found.
"""

from collections import defaultdict
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from tourmerch.core.config import get_settings
from tourmerch.core.logging import get_logger
from tourmerch.core.metrics import record_inventory_operation
from tourmerch.core.security import CurrentUser
from tourmerch.db.session import transaction
from tourmerch.models import BundleItem, InventoryItem, InventorySize, Sale, Tour
from tourmerch.schemas.inventory import BundleCreate, InventoryCreate, InventoryUpdate, StockAdjust
from tourmerch.services.tour_service import get_owned_tour

logger = get_logger(__name__)


async def get_owned_item(db: AsyncSession, item_id: int, user: CurrentUser) -> InventoryItem:
    result = await db.execute(
        select(InventoryItem)
        .join(Tour, InventoryItem.tour_id == Tour.id)
        .where(InventoryItem.id == item_id, Tour.user_id == user.id)
        .execution_options(populate_existing=True)
    )
    item = result.scalar_one_or_none()
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Item not found",
        )
    return item


async def sizes_by_item(db: AsyncSession, item_ids: list[int]) -> dict[int, list[dict]]:
    sizes: dict[int, list[dict]] = defaultdict(list)
    if not item_ids:
        return sizes

    result = await db.execute(
        select(InventorySize)
        .where(InventorySize.inventory_id.in_(item_ids))
        .order_by(InventorySize.id.asc())
        .execution_options(populate_existing=True)
    )
    for row in result.scalars().all():
        sizes[row.inventory_id].append({"size": row.size, "quantity": row.quantity})
    return sizes


async def _bundle_components(db: AsyncSession, bundle_ids: list[int]) -> dict[int, list[dict]]:
    """Resolve composition rows into component descriptions, keyed by bundle."""
    components: dict[int, list[dict]] = defaultdict(list)
    if not bundle_ids:
        return components

    result = await db.execute(
        select(BundleItem.bundle_id, BundleItem.quantity, InventoryItem)
        .join(InventoryItem, BundleItem.item_id == InventoryItem.id)
        .where(BundleItem.bundle_id.in_(bundle_ids))
        .order_by(BundleItem.id.asc())
    )
    rows = result.all()

    soft_ids = [item.id for _, _, item in rows if item.type == "soft"]
    sizes = await sizes_by_item(db, soft_ids)

    for bundle_id, snapshot, item in rows:
        components[bundle_id].append({
            "id": item.id,
            "name": item.name,
            "type": item.type,
            "price": item.price,
            "image_url": item.image_url,
            "quantity": snapshot,
            "sizes": sizes.get(item.id, []) if item.type == "soft" else None,
        })
    return components


def _base_payload(item: InventoryItem) -> dict:
    return {
        "id": item.id,
        "tour_id": item.tour_id,
        "name": item.name,
        "type": item.type,
        "price": item.price,
        "image_url": item.image_url,
        "quantity": item.quantity,
        "created_at": item.created_at,
    }


async def describe_items(db: AsyncSession, items: list[InventoryItem]) -> list[dict]:
    """Serialize items, attaching sizes to soft items and components to bundles."""
    sizes = await sizes_by_item(db, [i.id for i in items if i.type == "soft"])
    components = await _bundle_components(db, [i.id for i in items if i.type == "bundle"])

    described = []
    for item in items:
        payload = _base_payload(item)
        if item.type == "soft":
            payload["sizes"] = sizes.get(item.id, [])
        elif item.type == "bundle":
            payload["items"] = components.get(item.id, [])
        described.append(payload)
    return described


async def describe_item(db: AsyncSession, item: InventoryItem) -> dict:
    return (await describe_items(db, [item]))[0]


async def _ensure_unique_name(
    db: AsyncSession,
    tour_id: int,
    name: str,
    item_type: str,
    exclude_id: Optional[int] = None,
) -> None:
    query = select(InventoryItem.id).where(
        InventoryItem.tour_id == tour_id,
        InventoryItem.name == name,
        InventoryItem.type == item_type,
    )
    if exclude_id is not None:
        query = query.where(InventoryItem.id != exclude_id)

    if (await db.execute(query)).first():
        logger.warning("inventory_duplicate", tour_id=tour_id, name=name, type=item_type)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"A {item_type} item named '{name}' already exists for this tour",
        )


async def create_item(db: AsyncSession, data: InventoryCreate, user: CurrentUser) -> dict:
    await get_owned_tour(db, data.tour_id, user)

    if data.type == "soft" and not data.sizes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Soft items require at least one size",
        )
    if data.type == "hard" and data.quantity is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Hard items require a quantity",
        )
    if data.type == "soft":
        labels = [s.size for s in data.sizes]
        if len(labels) != len(set(labels)):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Size labels must be unique",
            )

    await _ensure_unique_name(db, data.tour_id, data.name, data.type)

    item = InventoryItem(
        tour_id=data.tour_id,
        name=data.name,
        type=data.type,
        price=data.price,
        image_url=data.image_url,
        quantity=data.quantity if data.type == "hard" else None,
    )
    async with transaction(db, "Failed to add inventory"):
        db.add(item)
        await db.flush()
        if data.type == "soft":
            db.add_all([
                InventorySize(inventory_id=item.id, size=s.size, quantity=s.quantity)
                for s in data.sizes
            ])
            await db.flush()
    await db.refresh(item)

    record_inventory_operation("create")
    logger.info("inventory_created", inventory_id=item.id, tour_id=item.tour_id, type=item.type)
    return await describe_item(db, item)


async def _available_quantity(db: AsyncSession, item: InventoryItem) -> int:
    if item.type == "hard":
        return item.quantity or 0
    result = await db.execute(
        select(func.min(InventorySize.quantity)).where(InventorySize.inventory_id == item.id)
    )
    return result.scalar() or 0


def derive_bundle_quantity(snapshots: list[int], policy: str = "min") -> int:
    if not snapshots:
        return 0
    if policy == "sum":
        return sum(snapshots)
    return min(snapshots)


async def create_bundle(db: AsyncSession, data: BundleCreate, user: CurrentUser) -> dict:
    """
    Create a bundle and snapshot each component's availability.

    Unknown component ids are skipped. The whole bundle is written in one
    transaction.
    """
    settings = get_settings()
    await get_owned_tour(db, data.tour_id, user)
    await _ensure_unique_name(db, data.tour_id, data.name, "bundle")

    async with transaction(db, "Failed to create bundle"):
        bundle = InventoryItem(
            tour_id=data.tour_id,
            name=data.name,
            type="bundle",
            price=data.price,
            image_url=data.image_url,
            quantity=0,
        )
        db.add(bundle)
        await db.flush()

        snapshots = []
        for ref in data.items:
            result = await db.execute(
                select(InventoryItem).where(
                    InventoryItem.id == ref.item_id,
                    InventoryItem.tour_id == data.tour_id,
                )
            )
            component = result.scalar_one_or_none()
            if not component:
                logger.warning("bundle_component_missing", bundle_id=bundle.id, item_id=ref.item_id)
                continue
            if component.type == "bundle":
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Bundles cannot contain other bundles",
                )

            snapshot = await _available_quantity(db, component)
            snapshots.append(snapshot)
            db.add(BundleItem(bundle_id=bundle.id, item_id=component.id, quantity=snapshot))

        bundle.quantity = derive_bundle_quantity(snapshots, settings.BUNDLE_QUANTITY_POLICY)
        await db.flush()

    record_inventory_operation("create_bundle")
    logger.info(
        "bundle_created",
        bundle_id=bundle.id,
        components=len(snapshots),
        quantity=bundle.quantity,
        policy=settings.BUNDLE_QUANTITY_POLICY,
    )
    return {"bundle_id": bundle.id, "quantity": bundle.quantity}


async def list_items(db: AsyncSession, tour_id: int, user: CurrentUser) -> list[dict]:
    await get_owned_tour(db, tour_id, user)

    result = await db.execute(
        select(InventoryItem)
        .where(InventoryItem.tour_id == tour_id)
        .order_by(InventoryItem.id.asc())
        .execution_options(populate_existing=True)
    )
    return await describe_items(db, list(result.scalars().all()))


async def get_bundle(db: AsyncSession, bundle_id: int, user: CurrentUser) -> dict:
    bundle = await get_owned_item(db, bundle_id, user)
    if bundle.type != "bundle":
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bundle not found",
        )

    described = await describe_item(db, bundle)
    return {"bundle": described, "items": described["items"]}


async def update_item(
    db: AsyncSession, item_id: int, data: InventoryUpdate, user: CurrentUser
) -> dict:
    """
    Overwrite name/price/image, then the stock of the item's variant.

    Hard items take ``quantity``; soft items take per-size quantities, and a
    size label the item does not have yet is added.
    """
    item = await get_owned_item(db, item_id, user)

    if data.name is not None and data.name != item.name:
        await _ensure_unique_name(db, item.tour_id, data.name, item.type, exclude_id=item.id)

    async with transaction(db, "Failed to update inventory"):
        if data.name is not None:
            item.name = data.name
        if data.price is not None:
            item.price = data.price
        if "image_url" in data.model_fields_set:
            item.image_url = data.image_url

        if item.type == "hard" and data.quantity is not None:
            item.quantity = data.quantity
        elif item.type == "soft" and data.sizes:
            for entry in data.sizes:
                result = await db.execute(
                    update(InventorySize)
                    .where(
                        InventorySize.inventory_id == item.id,
                        InventorySize.size == entry.size,
                    )
                    .values(quantity=entry.quantity)
                )
                if result.rowcount == 0:
                    db.add(InventorySize(inventory_id=item.id, size=entry.size, quantity=entry.quantity))
        await db.flush()
    await db.refresh(item)

    record_inventory_operation("update")
    logger.info("inventory_updated", inventory_id=item.id, type=item.type)
    return await describe_item(db, item)


async def adjust_stock(db: AsyncSession, data: StockAdjust, user: CurrentUser) -> dict:
    """Quick restock of a hard item, optionally repricing it."""
    item = await get_owned_item(db, data.inventory_id, user)
    if item.type != "hard":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only hard items carry a single quantity",
        )

    async with transaction(db, "Failed to update inventory"):
        item.quantity = data.new_quantity
        if data.new_price is not None:
            item.price = data.new_price
        await db.flush()
    await db.refresh(item)

    record_inventory_operation("adjust")
    logger.info("inventory_adjusted", inventory_id=item.id, quantity=item.quantity)
    return await describe_item(db, item)


async def delete_item(db: AsyncSession, item_id: int, user: CurrentUser) -> int:
    """
    Delete an item and every bundle that contains it.

    Returns how many bundles were removed along with the item. Sales of the
    removed items stay on record with their item reference cleared.
    """
    item = await get_owned_item(db, item_id, user)

    async with transaction(db, "Failed to delete inventory item"):
        result = await db.execute(
            select(BundleItem.bundle_id).where(BundleItem.item_id == item.id).distinct()
        )
        bundle_ids = list(result.scalars().all())
        doomed = bundle_ids + [item.id]

        await db.execute(
            update(Sale).where(Sale.inventory_id.in_(doomed)).values(inventory_id=None)
        )
        await db.execute(delete(BundleItem).where(BundleItem.bundle_id.in_(doomed)))
        await db.execute(delete(InventorySize).where(InventorySize.inventory_id == item.id))
        if bundle_ids:
            await db.execute(
                delete(InventoryItem).where(
                    InventoryItem.id.in_(bundle_ids),
                    InventoryItem.type == "bundle",
                )
            )
        await db.execute(delete(InventoryItem).where(InventoryItem.id == item.id))

    record_inventory_operation("delete")
    logger.info("inventory_deleted", inventory_id=item_id, bundles_deleted=len(bundle_ids))
    return len(bundle_ids)
