from dataclasses import dataclass, field

from healthlog.schemas.health_log import CanonicalLogItem


@dataclass
class SourcePage:
    """One page of canonical log items plus the source's full match count."""

    items: list[CanonicalLogItem] = field(default_factory=list)
    total: int = 0

    @property
    def values(self) -> list[float]:
        return [item.value for item in self.items]
