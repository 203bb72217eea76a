from abc import ABC, abstractmethod
from dataclasses import dataclass

from virtual_museum.models.artifact import Artifact


@dataclass(frozen=True)
class CatalogArtifact:
    id: str
    owner_id: str
    name: str
    status: str
    category: str = None
    description: str = None
    image: str = None
    featured: bool = False


class ArtifactCatalog(ABC):
    """Read-only view of the external artifact catalog."""

    @abstractmethod
    def find_by_ids(self, ids):
        """Return the ``CatalogArtifact`` for each known id; unknown ids are skipped."""

    @abstractmethod
    def list_for_owner(self, owner_id, statuses=None):
        """Return the owner's artifacts, optionally limited to ``statuses``."""


class SqlArtifactCatalog(ArtifactCatalog):
    """Catalog backed by the local ``artifacts`` replica table."""

    def find_by_ids(self, ids):
        ids = list(ids)
        if not ids:
            return []
        rows = Artifact.query.filter(Artifact.id.in_(ids)).all()
        return [self._to_catalog(row) for row in rows]

    def list_for_owner(self, owner_id, statuses=None):
        q = Artifact.query.filter(Artifact.museum_id == owner_id)
        if statuses:
            q = q.filter(Artifact.status.in_(list(statuses)))
        return [self._to_catalog(row) for row in q.order_by(Artifact.name.asc()).all()]

    @staticmethod
    def _to_catalog(row):
        return CatalogArtifact(
            id=row.id,
            owner_id=row.museum_id,
            name=row.name,
            status=row.status,
            category=row.category,
            description=row.description,
            image=row.image,
            featured=bool(row.featured),
        )
