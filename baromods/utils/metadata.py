from collections import defaultdict

from loguru import logger
from msgspec import structs

from baromods.models.metadata.metadata_structure import ModDescriptor, WorkshopItem
from baromods.utils.exception import MergeAmbiguityError
from baromods.utils.steam.webapi.wrapper import WorkshopClient


def workshop_ids(mods: list[ModDescriptor]) -> list[int]:
    """Return the distinct published workshop ids of a mod collection, in collection order."""
    return list(
        dict.fromkeys(m.steam_workshop_id for m in mods if m.steam_workshop_id)
    )


def check_unique_workshop_ids(mods: list[ModDescriptor]) -> None:
    """
    Raise MergeAmbiguityError if two published mods share a workshop id.
    Unpublished mods (id 0) never take part in a merge and may repeat.
    """
    names_by_id: defaultdict[int, list[str]] = defaultdict(list)
    for mod in mods:
        if mod.steam_workshop_id:
            names_by_id[mod.steam_workshop_id].append(mod.name)
    for workshop_id, names in names_by_id.items():
        if len(names) > 1:
            raise MergeAmbiguityError(workshop_id, names)


def apply_workshop_item(mod: ModDescriptor, item: WorkshopItem) -> ModDescriptor:
    """Return a copy of mod with its Steam Workshop fields taken from item."""
    return structs.replace(
        mod,
        size=item.file_size,
        last_modified=item.time_updated,
        description=item.description,
        preview_image=item.preview_image,
        subscribers=item.subscriptions,
        likes=item.favorited,
        creator=item.creator,
        tags=item.tag_names(),
    )


def merge_workshop_metadata(
    mods: list[ModDescriptor], items: list[WorkshopItem]
) -> list[ModDescriptor]:
    """
    Left join local mods with Workshop items on the workshop id.

    Matched mods are returned as updated copies, the others are returned as is.
    The result keeps the order of mods, and neither input is modified.

    :raises MergeAmbiguityError: if two local mods share a workshop id
    """
    check_unique_workshop_ids(mods)
    items_by_id = {item.publishedfileid: item for item in items}

    merged = []
    matched = 0
    for mod in mods:
        item = items_by_id.get(mod.steam_workshop_id) if mod.steam_workshop_id else None
        if item is None:
            merged.append(mod)
        else:
            merged.append(apply_workshop_item(mod, item))
            matched += 1

    logger.debug(f"Merged Workshop metadata into {matched}/{len(mods)} mods")
    return merged


def retrieve_mod_metadata(
    mods: list[ModDescriptor], client: WorkshopClient, batch_size: int
) -> list[ModDescriptor]:
    """
    Fetch Workshop metadata for a mod collection and merge it in.

    :raises MergeAmbiguityError: before any request if local workshop ids repeat
    :raises NetworkError: if a batch request cannot be completed
    :raises ApiError: if Steam reports a failure for a batch
    """
    check_unique_workshop_ids(mods)
    items = client.get_items_batched(workshop_ids(mods), batch_size)
    return merge_workshop_metadata(mods, items)
