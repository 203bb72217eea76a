import logging
from datetime import datetime

from virtual_museum.models.submission import Submission, SubmissionStatus
from virtual_museum.services import transitions
from virtual_museum.services.artifact_catalog import SqlArtifactCatalog
from virtual_museum.services.artifact_validator import ArtifactReferenceValidator
from virtual_museum.services.discovery_service import DiscoveryFeed
from virtual_museum.services.metrics_service import MetricsAggregator
from virtual_museum.services.submission_repository import SubmissionRepository, flatten_content
from virtual_museum.services.transitions import TransitionGuard
from virtual_museum.utils.exceptions import (
    EmptyContentError,
    InvalidTransitionError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


class SubmissionService:
    """Entry point for every virtual museum submission operation.

    Each method takes the caller's ``AccessScope``; public operations take
    none.
    """

    def __init__(self, repository, validator, guard, metrics, feed, catalog, available_statuses=()):
        self.repository = repository
        self.validator = validator
        self.guard = guard
        self.metrics = metrics
        self.feed = feed
        self.catalog = catalog
        self.available_statuses = tuple(available_statuses)

    @classmethod
    def from_config(cls, db, config):
        repository = SubmissionRepository(db)
        catalog = SqlArtifactCatalog()
        metrics = MetricsAggregator(db)
        return cls(
            repository=repository,
            validator=ArtifactReferenceValidator(catalog),
            guard=TransitionGuard(resubmitted_as_pending=config.get("TREAT_RESUBMITTED_AS_PENDING", False)),
            metrics=metrics,
            feed=DiscoveryFeed(repository, metrics),
            catalog=catalog,
            available_statuses=config.get("AVAILABLE_ARTIFACT_STATUSES", ()),
        )

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------
    def _load(self, scope, submission_id, museum_id=None):
        if museum_id is None:
            museum_id = scope.read_filter()
        submission = self.repository.get_by_id(submission_id, museum_id=museum_id)
        if not submission:
            raise NotFoundError()
        return submission

    def attach_catalog(self, submissions):
        """Resolve catalog details for every artifact reference in one lookup.

        Each reference gets a ``catalog_item`` attribute holding its
        ``CatalogArtifact``, or None when the catalog no longer knows the id.
        """
        references = [ref for submission in submissions for ref in submission.artifacts]
        if not references:
            return submissions
        found = {a.id: a for a in self.catalog.find_by_ids({ref.artifact_id for ref in references})}
        for ref in references:
            ref.catalog_item = found.get(ref.artifact_id)
        return submissions

    def _with_catalog(self, submission):
        self.attach_catalog([submission])
        return submission

    def _page_with_catalog(self, page):
        items, total = page
        return self.attach_catalog(items), total

    def _lost_race(self, scope, submission_id, operation, museum_id=None):
        """Explain a compare-and-set miss using the record's current state."""
        current = self._load(scope, submission_id, museum_id=museum_id)
        if operation == transitions.SUBMIT_FOR_REVIEW and self.guard.is_allowed(operation, current.status):
            raise EmptyContentError()
        raise InvalidTransitionError(current.status.value, operation)

    # ------------------------------------------------------------
    # Organization-scoped operations
    # ------------------------------------------------------------
    def list_own(self, scope, status=None, page=1, limit=10):
        museum_id = scope.require_museum()
        return self._page_with_catalog(
            self.repository.list_by_organization(museum_id, status=status, page=page, limit=limit)
        )

    def get(self, scope, submission_id):
        return self._with_catalog(self._load(scope, submission_id))

    def create(self, scope, payload):
        museum_id = scope.require_museum()
        references = payload.get("artifacts") or []
        self.validator.validate(museum_id, [ref["artifact_id"] for ref in references])

        now = datetime.utcnow()
        submission = Submission(
            museum_id=museum_id,
            submitted_by=scope.actor_id,
            status=SubmissionStatus.PENDING,
            submission_date=now,
            last_modified=now,
            **flatten_content(payload),
        )
        submission.derive_seo()
        self.repository.create(submission, references)

        logger.info(
            "Submission %s created by %s for museum %s",
            submission.id, scope.actor_id, museum_id,
        )
        return self._with_catalog(submission)

    def update(self, scope, submission_id, patch):
        museum_id = scope.require_museum()
        submission = self._load(scope, submission_id, museum_id=museum_id)
        current = submission.status
        target = self.guard.check(transitions.UPDATE, current)

        if "artifacts" in patch:
            self.validator.validate(museum_id, [ref["artifact_id"] for ref in patch["artifacts"]])

        updated = self.repository.update(submission, patch, current, target, museum_id=museum_id)
        if updated is None:
            self._lost_race(scope, submission_id, transitions.UPDATE, museum_id=museum_id)

        logger.info(
            "Submission %s edited by %s (%s -> %s)",
            submission_id, scope.actor_id, current.value, target.value,
        )
        return self._with_catalog(updated)

    def submit_for_review(self, scope, submission_id):
        museum_id = scope.require_museum()
        submission = self._load(scope, submission_id, museum_id=museum_id)
        current = submission.status
        target = self.guard.check(transitions.SUBMIT_FOR_REVIEW, current)

        if submission.artifact_count == 0:
            raise EmptyContentError()

        ok = self.repository.transition(
            submission_id,
            current,
            {"status": target},
            museum_id=museum_id,
            require_artifacts=True,
        )
        if not ok:
            self._lost_race(scope, submission_id, transitions.SUBMIT_FOR_REVIEW, museum_id=museum_id)

        logger.info("Submission %s submitted for review by %s", submission_id, scope.actor_id)
        return self._with_catalog(self.repository.refresh(submission))

    def delete(self, scope, submission_id):
        museum_id = scope.require_museum()
        submission = self._load(scope, submission_id, museum_id=museum_id)
        current = submission.status
        self.guard.check(transitions.DELETE, current)

        if not self.repository.soft_delete(submission_id, current, scope.actor_id, museum_id=museum_id):
            self._lost_race(scope, submission_id, transitions.DELETE, museum_id=museum_id)

        logger.info("Submission %s deleted by %s", submission_id, scope.actor_id)

    def organization_stats(self, scope):
        museum_id = scope.require_museum()
        totals, by_status = self.repository.organization_stats(museum_id)
        total, views, favorites, avg_rating, approved, pending = totals
        return {
            "total_submissions": total,
            "approved_submissions": int(approved),
            "pending_submissions": int(pending),
            "total_views": int(views),
            "total_favorites": int(favorites),
            "average_rating": round(float(avg_rating), 1) if avg_rating is not None else 0,
            "by_status": {s.value: by_status.get(s, 0) for s in SubmissionStatus},
        }

    def available_artifacts(self, scope):
        museum_id = scope.require_museum()
        return self.catalog.list_for_owner(museum_id, self.available_statuses)

    # ------------------------------------------------------------
    # Elevated operations
    # ------------------------------------------------------------
    def review_queue(self, scope, status=SubmissionStatus.UNDER_REVIEW, page=1, limit=10):
        scope.require_elevated()
        return self._page_with_catalog(self.repository.list_by_status(status=status, page=page, limit=limit))

    def apply_review(self, scope, submission_id, decision):
        reviewer_id = scope.require_elevated()
        submission = self._load(scope, submission_id)
        current = submission.status
        target = self.guard.check(transitions.REVIEW, current, decision=decision["decision"])

        values = {
            "status": target,
            "reviewed_by": reviewer_id,
            "reviewed_at": datetime.utcnow(),
            "review_feedback": decision.get("feedback"),
            "review_rating": decision.get("rating"),
            "rejection_reason": (
                decision["rejection_reason"].strip() if target == SubmissionStatus.REJECTED else None
            ),
        }
        if not self.repository.transition(submission_id, current, values):
            self._lost_race(scope, submission_id, transitions.REVIEW)

        logger.info("Submission %s reviewed by %s: %s", submission_id, reviewer_id, target.value)
        return self._with_catalog(self.repository.refresh(submission))

    def publish(self, scope, submission_id, options=None):
        publisher_id = scope.require_elevated()
        options = options or {}
        submission = self._load(scope, submission_id)
        current = submission.status
        target = self.guard.check(transitions.PUBLISH, current)

        values = {
            "status": target,
            "published_at": datetime.utcnow(),
            "published_by": publisher_id,
            "is_public": True,
        }
        if "featured" in options:
            values["featured"] = options["featured"]
        if "tags" in options:
            values["tags"] = options["tags"]

        if not self.repository.transition(submission_id, current, values):
            self._lost_race(scope, submission_id, transitions.PUBLISH)

        logger.info("Submission %s published by %s", submission_id, publisher_id)
        return self._with_catalog(self.repository.refresh(submission))

    # ------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------
    def list_public(self, page=1, limit=12, featured_only=False):
        return self._page_with_catalog(self.feed.list(page=page, limit=limit, featured_only=featured_only))

    def view_public(self, submission_id):
        return self._with_catalog(self.feed.view(submission_id))

    def rate_public(self, submission_id, rating):
        submission = self.feed.get(submission_id)
        if not self.metrics.add_rating(submission.id, rating, public_only=True):
            raise NotFoundError()
        return self._with_catalog(self.repository.refresh(submission))

    def count_public(self, submission_id, counter):
        submission = self.feed.get(submission_id)
        if not self.metrics.increment(submission.id, counter, public_only=True):
            raise NotFoundError()
        return self._with_catalog(self.repository.refresh(submission))
