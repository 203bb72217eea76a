import logging
from datetime import datetime

from sqlalchemy import Numeric, cast, func, update

from virtual_museum.models.submission import Submission, SubmissionStatus
from virtual_museum.utils.exceptions import ValidationFailed

logger = logging.getLogger(__name__)

COUNTERS = ("views", "favorites", "shares")


class MetricsAggregator:
    """Engagement counters applied as single UPDATE statements.

    Values are computed by the database from the stored row, never from a
    copy read earlier in the request, so concurrent writers do not lose
    updates.
    """

    def __init__(self, db):
        self.db = db

    def _apply(self, submission_id, values, public_only):
        stmt = (
            update(Submission)
            .where(Submission.id == submission_id, Submission.is_deleted.is_(False))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if public_only:
            stmt = stmt.where(
                Submission.is_public.is_(True),
                Submission.status == SubmissionStatus.PUBLISHED,
            )
        result = self.db.session.execute(stmt)
        self.db.session.commit()
        return result.rowcount == 1

    def increment(self, submission_id, counter, public_only=False):
        if counter not in COUNTERS:
            raise ValueError(f"Unknown counter: {counter}")
        column = getattr(Submission, counter)
        now = datetime.utcnow()
        values = {counter: column + 1, "last_modified": now}
        if counter == "views":
            values["last_viewed"] = now
        return self._apply(submission_id, values, public_only)

    def increment_view(self, submission_id, public_only=False):
        return self.increment(submission_id, "views", public_only=public_only)

    def add_rating(self, submission_id, rating, public_only=False):
        """Fold ``rating`` into the running average, rounded to one decimal."""
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationFailed({"rating": ["Must be an integer between 1 and 5."]})

        total = Submission.total_ratings
        new_average = (Submission.average_rating * total + rating) / (total + 1)
        values = {
            "average_rating": func.round(cast(new_average, Numeric), 1),
            "total_ratings": total + 1,
            "last_modified": datetime.utcnow(),
        }
        ok = self._apply(submission_id, values, public_only)
        if ok:
            logger.info("Rating %s recorded for submission %s", rating, submission_id)
        return ok
