from virtual_museum.models.submission import Submission
from virtual_museum.utils.exceptions import NotFoundError

FEED_ORDER = (
    Submission.featured.desc(),
    Submission.views.desc(),
    Submission.submission_date.desc(),
    Submission.id.desc(),
)


class DiscoveryFeed:
    """Public listing of published, public, live submissions."""

    def __init__(self, repository, metrics):
        self.repository = repository
        self.metrics = metrics

    def list(self, page=1, limit=12, featured_only=False):
        return self.repository.list_public(
            page=page,
            limit=limit,
            featured_only=featured_only,
            ordering=FEED_ORDER,
        )

    def get(self, submission_id):
        submission = self.repository.get_public(submission_id)
        if not submission:
            raise NotFoundError()
        return submission

    def view(self, submission_id):
        """Return a public submission and count the view."""
        submission = self.get(submission_id)
        if not self.metrics.increment_view(submission.id, public_only=True):
            # unpublished or deleted between the read and the increment
            raise NotFoundError()
        return self.repository.refresh(submission)
