from typing import Dict, Optional


class CollectionIdCache:
    """Collection name to server id mapping owned by a single client.

    Entries never expire. A collection renamed or recreated by another
    client keeps its old id here until ``invalidate`` is called or the
    owning client is discarded. Not thread-safe.
    """

    def __init__(self) -> None:
        self._ids: Dict[str, str] = {}

    def get(self, name: str) -> Optional[str]:
        return self._ids.get(name)

    def set(self, name: str, collection_id: str) -> None:
        self._ids[name] = collection_id

    def invalidate(self, name: Optional[str] = None) -> None:
        """Drop one cached name, or every entry when ``name`` is None."""
        if name is None:
            self._ids.clear()
        else:
            self._ids.pop(name, None)

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    def __len__(self) -> int:
        return len(self._ids)
