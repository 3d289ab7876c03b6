"""Conversion helpers between configuration values and API structures."""

import zlib
from typing import Dict, Iterable, List, Tuple

from sdk.common import tags
from utility.log import Log

LOG = Log(__name__)


def expand_to_string_list(values: Iterable) -> List[str]:
    """Return the non empty values as strings."""
    return [str(v) for v in values or [] if v not in (None, "")]


def expand_resource_tags(tag_map: Dict) -> List[Dict]:
    """Convert a tag map into the API list of key/value pairs, sorted by key."""
    return [{"key": k, "value": str(tag_map[k])} for k in sorted(tag_map or {})]


def tags_to_map(tag_list: List[Dict]) -> Dict:
    """Convert the API list of key/value pairs into a tag map."""
    result = {}
    for tag in tag_list or []:
        result[tag["key"]] = tag.get("value") or ""
    return result


def merge_tags(*tag_maps: Dict) -> Dict:
    """Merge tag maps, later maps overriding earlier ones."""
    merged = {}
    for tag_map in tag_maps:
        merged.update(tag_map or {})
    return merged


def diff_tags(old: Dict, new: Dict) -> Tuple[List[Dict], List[Dict]]:
    """Return the pairs to remove and to add to go from old to new.

    A changed value shows up in both lists: the old pair is removed and the
    new one is added.
    """
    old = old or {}
    new = new or {}
    removed = {k: v for k, v in old.items() if k not in new or new[k] != v}
    added = {k: v for k, v in new.items() if k not in old or old[k] != v}
    return expand_resource_tags(removed), expand_resource_tags(added)


def update_resource_tags(client, d, resource_type: str, resource_id: str) -> None:
    """Apply the change of the ``tags`` attribute through the tag API."""
    old, new = d.get_change("tags")
    removed, added = diff_tags(old, new)

    if removed:
        LOG.debug(f"Removing tags {removed} from {resource_type} {resource_id}")
        tags.delete(client, resource_type, resource_id, removed)

    if added:
        LOG.debug(f"Adding tags {added} to {resource_type} {resource_id}")
        tags.create(client, resource_type, resource_id, added)


def hashcode_strings(values: Iterable[str]) -> str:
    """Return a stable ID derived from a list of strings."""
    checksum = zlib.crc32("".join(f"{v}-" for v in values).encode("utf-8"))
    return str(checksum)
