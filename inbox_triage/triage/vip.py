"""VIP sender-domain registry."""

from collections.abc import Iterable, Iterator


class VipRegistry:
    """Insertion-ordered set of sender domains treated as high priority.

    Lives only as long as the process that owns it; nothing is persisted.
    Domains are stored exactly as given (no case or whitespace normalization).
    """

    def __init__(self, initial: Iterable[str] = ()) -> None:
        self._domains: dict[str, None] = {}
        for domain in initial:
            self.add(domain)

    def add(self, domain: str) -> bool:
        """Add a domain. Returns False if it was already present."""
        if domain in self._domains:
            return False
        self._domains[domain] = None
        return True

    def list(self) -> list[str]:
        return list(self._domains)

    def __contains__(self, domain: object) -> bool:
        return domain in self._domains

    def __iter__(self) -> Iterator[str]:
        return iter(self.list())

    def __len__(self) -> int:
        return len(self._domains)
