"""Ancestor/descendant resolution over an in-memory batch collection."""

MAX_DEPTH = 50


def ancestors(batch, batches, max_depth: int = MAX_DEPTH) -> list:
    """Parents of *batch*, oldest first.

    Stops at a missing parent, a repeated id, or after *max_depth* hops.
    """
    by_id = {b.id: b for b in batches}
    chain = []
    seen = {batch.id}
    current = batch
    hops = 0
    while current.parent_id and hops < max_depth:
        parent = by_id.get(current.parent_id)
        if parent is None or parent.id in seen:
            break
        chain.insert(0, parent)
        seen.add(parent.id)
        current = parent
        hops += 1
    return chain


def children(batch_id: str, batches) -> list:
    return [b for b in batches if b.parent_id == batch_id]


def descendants(batch, batches, max_depth: int = MAX_DEPTH) -> list:
    """All batches whose parent chain leads back to *batch*, depth-first."""
    result = []
    seen = {batch.id}

    def collect(parent_id, depth):
        if depth >= max_depth:
            return
        for child in children(parent_id, batches):
            if child.id in seen:
                continue
            seen.add(child.id)
            result.append(child)
            collect(child.id, depth + 1)

    collect(batch.id, 0)
    return result


def lineage(batch, batches) -> list:
    """Ancestors, the batch itself and descendants, oldest first, no repeats."""
    combined = ancestors(batch, batches) + [batch] + descendants(batch, batches)
    unique = {}
    for item in combined:
        unique.setdefault(item.id, item)
    return sorted(unique.values(), key=lambda b: b.created_date)
