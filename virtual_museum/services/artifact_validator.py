import logging

from virtual_museum.utils.exceptions import ReferentialIntegrityError

logger = logging.getLogger(__name__)


class ArtifactReferenceValidator:
    """Checks that referenced artifacts exist and belong to one museum.

    The check runs against the catalog's current state once, right before a
    write; it is not repeated inside the write transaction.
    """

    def __init__(self, catalog):
        self.catalog = catalog

    def validate(self, museum_id, artifact_ids):
        ids = set(artifact_ids)
        if not ids:
            return []

        found = {a.id: a for a in self.catalog.find_by_ids(ids)}
        missing = ids - set(found)
        foreign = {aid for aid, artifact in found.items() if artifact.owner_id != museum_id}

        if missing or foreign:
            logger.warning(
                "Artifact reference check failed for museum %s: missing=%s foreign=%s",
                museum_id, sorted(missing), sorted(foreign),
            )
            raise ReferentialIntegrityError(missing=missing, foreign=foreign)

        return [found[aid] for aid in sorted(ids)]
