# workflow_dashboard/engine/hierarchy.py

from typing import Any, Dict, Iterator, List, Tuple

import pandas as pd

from workflow_dashboard.config import BATCH_FIELD, NO_BATCH_LABEL
from workflow_dashboard.engine.records import has_batch, records_from_frame
from workflow_dashboard.engine.utils import as_text

# ---------------------------------------------------------
# COMPONENT HIERARCHY
# ---------------------------------------------------------


def build_hierarchy(df: pd.DataFrame) -> Dict[str, Any]:
    """
    Group records into nested dicts:

      Component -> [Batch ->] Grade/Level -> Unit -> Week -> [record, ...]

    The Batch level is decided once from the first record (see has_batch);
    rows without a Batch value land under "No Batch". Leaf lists keep input
    order and nothing is de-duplicated.
    """
    tree: Dict[str, Any] = {}
    batched = has_batch(df)

    for record in records_from_frame(df):
        keys = [record["Component"]]
        if batched:
            keys.append(as_text(record.get(BATCH_FIELD)) or NO_BATCH_LABEL)
        keys += [record["Grade/Level"], record["Unit"], record["Week"]]

        node = tree
        for key in keys[:-1]:
            node = node.setdefault(key, {})
        node.setdefault(keys[-1], []).append(record)

    return tree


def iter_leaves(tree: Dict[str, Any]) -> Iterator[Tuple[tuple, List[dict]]]:
    """Yield (path, records) for every leaf list, in insertion order."""
    stack = [((), tree)]
    while stack:
        path, node = stack.pop()
        if isinstance(node, list):
            yield path, node
            continue
        for key, child in reversed(list(node.items())):
            stack.append((path + (key,), child))


def count_leaf_records(tree: Dict[str, Any]) -> int:
    return sum(len(records) for _, records in iter_leaves(tree))


def hierarchy_depth(tree: Dict[str, Any]) -> int:
    """Number of key levels above the leaf lists (4 or 5; 0 when empty)."""
    depth = 0
    node = tree
    while isinstance(node, dict) and node:
        depth += 1
        node = next(iter(node.values()))
    return depth
