"""Builder for item site-link updates."""

from __future__ import annotations

from wikibase_update.exceptions import ValidationError, require
from wikibase_update.models import SiteLink
from wikibase_update.updates import SiteLinkUpdate


class SiteLinkUpdateBuilder:
    """Accumulates site-link changes keyed by site key.

    Links are not compared with the current revision; every call is kept.
    Not safe for concurrent use from several threads.
    """

    def __init__(self) -> None:
        self._modified: dict[str, SiteLink] = {}
        self._removed: set[str] = set()

    @classmethod
    def create(cls) -> SiteLinkUpdateBuilder:
        return cls()

    def set_site_link(self, link: SiteLink) -> SiteLinkUpdateBuilder:
        """Add or replace the link for its site, overriding earlier changes."""
        require(link, "Site link")
        self._modified[link.site_key] = link
        self._removed.discard(link.site_key)
        return self

    def remove_site_link(self, site_key: str) -> SiteLinkUpdateBuilder:
        """Remove the link for *site_key*, overriding earlier changes."""
        require(site_key, "Site key")
        if not site_key.strip():
            raise ValidationError("Site key cannot be blank")
        self._removed.add(site_key)
        self._modified.pop(site_key, None)
        return self

    def apply(self, update: SiteLinkUpdate) -> SiteLinkUpdateBuilder:
        require(update, "Site link update")
        for link in update.modified.values():
            self.set_site_link(link)
        for site_key in update.removed:
            self.remove_site_link(site_key)
        return self

    def build(self) -> SiteLinkUpdate:
        return SiteLinkUpdate(
            modified=dict(self._modified), removed=frozenset(self._removed)
        )
