"""Index maintenance for the users collection.

Earlier deployments created plain unique indexes on ``email`` and
``phone_number``. A plain unique index treats a missing field as ``null``, so
it rejects a second phone-only (or email-only) account even when the partial
index that replaced it would accept it. Startup therefore drops such
superseded indexes before creating the wanted ones.
"""

from logging import getLogger

from pymongo.errors import OperationFailure

logger = getLogger(__name__)

# Server error codes for an index that exists under another name or spec
INDEX_OPTIONS_CONFLICT = 85
INDEX_KEY_SPECS_CONFLICT = 86

_COMPARED_OPTIONS = ('unique', 'partialFilterExpression')


def create_index_safe(collection, keys: list, name: str, **options) -> bool:
    """Create an index, replacing older indexes that conflict with it.

    Returns False when the server reports a conflict that no existing index
    explains.
    """
    if options.get('unique'):
        drop_superseded_unique(collection, keys, name, options.get('partialFilterExpression'))
    try:
        collection.create_index(keys, name=name, **options)
        return True
    except OperationFailure as e:
        if e.code not in (INDEX_OPTIONS_CONFLICT, INDEX_KEY_SPECS_CONFLICT):
            raise
        return _resolve_conflict(collection, keys, name, **options)


def drop_superseded_unique(collection, keys: list, name: str, partial_filter: dict | None) -> list[str]:
    """Drop other unique indexes on the same keys whose partial filter differs.

    The server allows these to coexist with the wanted index, so no conflict
    error is raised for them.
    """
    wanted = dict(keys)
    dropped = []
    for idx_name, info in collection.index_information().items():
        if idx_name in ('_id_', name) or not info.get('unique'):
            continue
        if dict(info.get('key', [])) != wanted:
            continue
        if info.get('partialFilterExpression') == partial_filter:
            continue
        logger.warning(
            "Dropping superseded unique index",
            extra={"index": idx_name, "replacement": name},
        )
        collection.drop_index(idx_name)
        dropped.append(idx_name)
    return dropped


def _resolve_conflict(collection, keys: list, name: str, **options) -> bool:
    """Drop the index the server reported as conflicting and recreate ours."""
    wanted = dict(keys)
    for idx_name, info in collection.index_information().items():
        if idx_name == '_id_':
            continue
        if idx_name != name and dict(info.get('key', [])) != wanted:
            continue
        logger.warning(
            "Replacing conflicting index",
            extra={"index": idx_name, "replacement": name, "drift": index_drift(info, keys, options)},
        )
        collection.drop_index(idx_name)
        collection.create_index(keys, name=name, **options)
        return True

    logger.error("Index conflict could not be resolved", extra={"index": name})
    return False


def index_drift(info: dict, keys: list, options: dict) -> list[str]:
    """Name the parts of an existing index that differ from the wanted spec."""
    drift = []
    if dict(info.get('key', [])) != dict(keys):
        drift.append('key')
    for option in _COMPARED_OPTIONS:
        if info.get(option) != options.get(option):
            drift.append(option)
    return drift
