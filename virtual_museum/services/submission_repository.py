import logging
from datetime import datetime

from sqlalchemy import case, delete, func, select, update

from virtual_museum.models.submission import (
    Submission,
    SubmissionArtifact,
    SubmissionStatus,
)
from virtual_museum.utils.pagination import paginate_query

logger = logging.getLogger(__name__)

# request groups whose keys map 1:1 onto submission columns
NESTED_GROUPS = ("theme", "accessibility", "media", "interactive_content", "seo")


def flatten_content(payload):
    """Turn a loaded create/update payload into submission column values."""
    values = {}
    for key, value in payload.items():
        if key == "artifacts":
            continue
        if key in NESTED_GROUPS:
            values.update(value or {})
        else:
            values[key] = value
    return values


def build_artifact_rows(submission_id, references):
    return [
        SubmissionArtifact(
            submission_id=submission_id,
            artifact_id=ref["artifact_id"],
            display_order=ref.get("display_order", 0),
            custom_description=ref.get("custom_description"),
            featured=ref.get("featured", False),
        )
        for ref in references
    ]


class SubmissionRepository:
    """Persistence boundary for submissions.

    Every read starts from ``live_query`` so soft-deleted rows are filtered in
    SQL. Status changes go through ``compare_and_set`` which only writes when
    the stored status still equals the expected one.
    """

    def __init__(self, db):
        self.db = db

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------
    def live_query(self):
        return Submission.query.filter(Submission.is_deleted.is_(False))

    def public_query(self):
        return self.live_query().filter(
            Submission.is_public.is_(True),
            Submission.status == SubmissionStatus.PUBLISHED,
        )

    def get_by_id(self, submission_id, museum_id=None):
        q = self.live_query().filter(Submission.id == submission_id)
        if museum_id is not None:
            q = q.filter(Submission.museum_id == museum_id)
        return q.first()

    def get_public(self, submission_id):
        return self.public_query().filter(Submission.id == submission_id).first()

    def list_by_organization(self, museum_id, status=None, page=1, limit=10):
        q = self.live_query().filter(Submission.museum_id == museum_id)
        if status:
            q = q.filter(Submission.status == status)
        return paginate_query(q.order_by(Submission.submission_date.desc(), Submission.id.desc()), page, limit)

    def list_by_status(self, status=None, page=1, limit=10):
        q = self.live_query()
        if status:
            q = q.filter(Submission.status == status)
        return paginate_query(q.order_by(Submission.submission_date.asc(), Submission.id.asc()), page, limit)

    def list_public(self, page=1, limit=12, featured_only=False, ordering=()):
        q = self.public_query()
        if featured_only:
            q = q.filter(Submission.featured.is_(True))
        if ordering:
            q = q.order_by(*ordering)
        return paginate_query(q, page, limit)

    def organization_stats(self, museum_id):
        base = self.db.session.query(Submission).filter(
            Submission.museum_id == museum_id,
            Submission.is_deleted.is_(False),
        )
        totals = base.with_entities(
            func.count(Submission.id),
            func.coalesce(func.sum(Submission.views), 0),
            func.coalesce(func.sum(Submission.favorites), 0),
            func.avg(Submission.average_rating),
            func.coalesce(func.sum(case((Submission.status == SubmissionStatus.APPROVED, 1), else_=0)), 0),
            func.coalesce(func.sum(case((Submission.status == SubmissionStatus.PENDING, 1), else_=0)), 0),
        ).one()
        by_status = dict(
            base.with_entities(Submission.status, func.count(Submission.id))
            .group_by(Submission.status)
            .all()
        )
        return totals, by_status

    # ------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------
    def create(self, submission, references=()):
        self.db.session.add(submission)
        self.db.session.flush()
        self.db.session.add_all(build_artifact_rows(submission.id, references))
        self.db.session.commit()
        return submission

    def compare_and_set(self, submission_id, expected_status, values, museum_id=None, require_artifacts=False):
        """Write ``values`` only if the stored status is ``expected_status``.

        Leaves the transaction open on success so callers can add more
        statements; rolls back and returns False when no row matched.
        """
        values = dict(values)
        values.setdefault("last_modified", datetime.utcnow())

        stmt = (
            update(Submission)
            .where(
                Submission.id == submission_id,
                Submission.status == expected_status,
                Submission.is_deleted.is_(False),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if museum_id is not None:
            stmt = stmt.where(Submission.museum_id == museum_id)
        if require_artifacts:
            stmt = stmt.where(
                select(SubmissionArtifact.id)
                .where(SubmissionArtifact.submission_id == submission_id)
                .exists()
            )

        result = self.db.session.execute(stmt)
        if result.rowcount != 1:
            self.db.session.rollback()
            logger.warning(
                "Status compare-and-set missed for %s (expected %s)",
                submission_id, getattr(expected_status, "value", expected_status),
            )
            return False
        return True

    def replace_artifacts(self, submission_id, references):
        self.db.session.execute(
            delete(SubmissionArtifact)
            .where(SubmissionArtifact.submission_id == submission_id)
            .execution_options(synchronize_session=False)
        )
        self.db.session.add_all(build_artifact_rows(submission_id, references))

    def update(self, submission, patch, expected_status, new_status, museum_id=None):
        values = flatten_content(patch)
        values["status"] = new_status

        # keep SEO fields derived while they are absent
        title = values.get("title", submission.title)
        description = values.get("description", submission.description)
        if not values.get("meta_title", submission.meta_title):
            values["meta_title"] = title[:60]
        if not values.get("meta_description", submission.meta_description):
            values["meta_description"] = description[:160]

        if not self.compare_and_set(submission.id, expected_status, values, museum_id=museum_id):
            return None
        if "artifacts" in patch:
            self.replace_artifacts(submission.id, patch["artifacts"])
        self.db.session.commit()
        return submission

    def soft_delete(self, submission_id, expected_status, actor_id, museum_id=None):
        now = datetime.utcnow()
        ok = self.compare_and_set(
            submission_id,
            expected_status,
            {"is_deleted": True, "deleted_at": now, "deleted_by": actor_id, "last_modified": now},
            museum_id=museum_id,
        )
        if ok:
            self.db.session.commit()
        return ok

    def transition(self, submission_id, expected_status, values, museum_id=None, require_artifacts=False):
        ok = self.compare_and_set(
            submission_id,
            expected_status,
            values,
            museum_id=museum_id,
            require_artifacts=require_artifacts,
        )
        if ok:
            self.db.session.commit()
        return ok

    def refresh(self, submission):
        self.db.session.refresh(submission)
        return submission
