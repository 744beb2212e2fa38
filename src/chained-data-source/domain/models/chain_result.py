"""ChainResult value object."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ChainResult:
    """Result of one chain execution.

    One item per configured link, in link order. An item is either the
    link's decoded JSON response or an empty object placeholder; the two
    are not distinguished here.
    """

    items: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"items": list(self.items)}
