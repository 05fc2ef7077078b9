"""Raw author email -> team member resolution.

One IdentityResolver is created per walk. It holds the registered and
manually curated emails, plus whatever the walk learns from anchor-resolved
commits. Nothing is shared between walks.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from .models import ResolutionSource


def normalize_email(email: str) -> str:
    return email.strip().lower()


class IdentityResolver:
    """Resolves raw commit emails to member ids.

    Lookup order for a raw email: manual override, registered member email,
    learned mapping. Overrides win over registered emails so staff can fix a
    wrong registration without touching the roster.
    """

    def __init__(
        self,
        registered: Mapping[str, str],
        overrides: Optional[Mapping[str, str]] = None,
        members: Optional[Iterable[str]] = None,
    ):
        self._registered = {normalize_email(e): m for e, m in registered.items() if e}
        self._overrides = {normalize_email(e): m for e, m in (overrides or {}).items() if e}
        self._learned: dict[str, list[str]] = {}

        if members is None:
            self._members: Optional[set[str]] = None
        else:
            self._members = set(members)
            self._members.update(self._registered.values())
            self._members.update(self._overrides.values())

    def is_member(self, member_id: str) -> bool:
        """True if member_id belongs to the team. Unknown rosters accept everyone."""
        return self._members is None or member_id in self._members

    def direct(self, email: str) -> Optional[tuple[str, ResolutionSource]]:
        key = normalize_email(email)
        if key in self._overrides:
            return self._overrides[key], ResolutionSource.OVERRIDE
        if key in self._registered:
            return self._registered[key], ResolutionSource.REGISTERED
        return None

    def learn(self, email: str, member_id: str) -> bool:
        """Record that an anchor-resolved commit by ``email`` belongs to ``member_id``.

        Emails that already resolve directly are not learned. Returns True if
        a new mapping was added.
        """
        key = normalize_email(email)
        if not key or self.direct(key) is not None:
            return False
        candidates = self._learned.setdefault(key, [])
        if member_id in candidates:
            return False
        candidates.append(member_id)
        return True

    def learned_candidates(self, email: str) -> tuple[str, ...]:
        return tuple(self._learned.get(normalize_email(email), ()))

    def resolve(
        self, email: str, nearest_member: Optional[str] = None
    ) -> Optional[tuple[str, ResolutionSource]]:
        """Resolve a raw email without anchor evidence on the commit itself.

        When a learned email maps to several members, ``nearest_member`` (the
        member of the closest descendant anchor) breaks the tie if it is one
        of them; otherwise the first learned member is used.
        """
        hit = self.direct(email)
        if hit is not None:
            return hit

        candidates = self.learned_candidates(email)
        if not candidates:
            return None
        if len(candidates) > 1 and nearest_member in candidates:
            return nearest_member, ResolutionSource.LEARNED
        return candidates[0], ResolutionSource.LEARNED

    def claims(self, email: str, member_id: str) -> bool:
        """True if ``email`` is known to belong to ``member_id`` from any source."""
        hit = self.direct(email)
        if hit is not None:
            return hit[0] == member_id
        return member_id in self.learned_candidates(email)

    def learned_mappings(self) -> dict[str, tuple[str, ...]]:
        return {email: tuple(members) for email, members in sorted(self._learned.items())}
