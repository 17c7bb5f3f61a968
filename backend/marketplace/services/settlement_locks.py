"""Settlement Locks — in-process exclusive locks keyed by item id or wallet address.

Invariants:
    - At most one settlement critical section per key runs at a time in this process
    - Idle locks are dropped automatically (weak references)

Design Decisions:
    - Module-level registry: single-process uvicorn shares one event loop; the
      compare-and-set UPDATEs in the repositories cover multi-process deployments
    - WeakValueDictionary: a lock lives exactly as long as someone holds or awaits it,
      so the registry never grows with the catalog
"""

import asyncio
from weakref import WeakValueDictionary

_locks: "WeakValueDictionary[str, asyncio.Lock]" = WeakValueDictionary()


def lock_for(kind: str, key: str) -> asyncio.Lock:
    """Return the shared lock for (kind, key), creating it on first use."""
    name = f"{kind}:{key}"
    lock = _locks.get(name)
    if lock is None:
        lock = asyncio.Lock()
        _locks[name] = lock
    return lock


def item_lock(item_id: str) -> asyncio.Lock:
    return lock_for("item", str(item_id))


def wallet_lock(address: str) -> asyncio.Lock:
    return lock_for("wallet", address)
