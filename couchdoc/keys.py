"""Storage key derivation and id generation."""

from __future__ import annotations

import uuid
from typing import Any


class KeyCodec:
    """Builds `<collection><separator><id>` keys for one collection."""

    def __init__(self, collection: str, separator: str = "::") -> None:
        self.collection = collection
        self.separator = separator

    def derive_key(self, id_value: Any) -> str:
        """Join collection name and id. The id is not validated."""
        return self.separator.join((self.collection, str(id_value)))

    @staticmethod
    def ensure_id(entity: dict[str, Any], id_field: str) -> Any:
        """
        Return the entity's id, generating a random UUID4 if it has none.

        Mutates entity in place when an id is generated.
        """
        if id_field not in entity:
            entity[id_field] = str(uuid.uuid4())
        return entity[id_field]
