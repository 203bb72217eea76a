"""Rating math and concurrent counter updates."""
import concurrent.futures

import pytest

from virtual_museum.extensions import db
from virtual_museum.models.submission import Submission
from virtual_museum.utils.exceptions import ValidationFailed


@pytest.fixture
def published(create_submission, advance):
    submission = create_submission()
    advance(submission["id"], "published")
    return submission["id"]


def _metrics(app, submission_id):
    with app.app_context():
        row = db.session.get(Submission, submission_id)
        return row.views, row.average_rating, row.total_ratings, row.favorites, row.shares


def _run_concurrently(app, fn, args_list, workers=8):
    def _task(args):
        with app.app_context():
            try:
                return fn(*args)
            finally:
                db.session.remove()

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(_task, args_list))


@pytest.mark.parametrize("ratings", [[4, 5], [5, 4]])
def test_average_of_four_and_five(app, service, published, ratings):
    with app.app_context():
        for rating in ratings:
            assert service.metrics.add_rating(published, rating)
    _, average, total, _, _ = _metrics(app, published)
    assert average == 4.5
    assert total == 2


def test_repeated_ratings_keep_average(app, service, published):
    with app.app_context():
        for rating in [3, 3, 3]:
            service.metrics.add_rating(published, rating)
    _, average, total, _, _ = _metrics(app, published)
    assert average == 3.0
    assert total == 3


def test_average_is_rounded_to_one_decimal(app, service, published):
    with app.app_context():
        for rating in [5, 4, 4]:
            service.metrics.add_rating(published, rating)
    _, average, total, _, _ = _metrics(app, published)
    assert average == 4.3
    assert total == 3


@pytest.mark.parametrize("rating", [0, 6, "4", True])
def test_out_of_range_rating_is_rejected(app, service, published, rating):
    with app.app_context():
        with pytest.raises(ValidationFailed):
            service.metrics.add_rating(published, rating)
    assert _metrics(app, published)[2] == 0


def test_concurrent_views_are_not_lost(app, service, published):
    results = _run_concurrently(app, service.metrics.increment_view, [(published,)] * 40)
    assert all(results)
    assert _metrics(app, published)[0] == 40


def test_concurrent_ratings_are_all_counted(app, service, published):
    _run_concurrently(app, service.metrics.add_rating, [(published, 4), (published, 5)], workers=2)
    _, average, total, _, _ = _metrics(app, published)
    assert total == 2
    assert average == 4.5


def test_favorites_and_shares_are_independent(app, service, published):
    with app.app_context():
        service.metrics.increment(published, "favorites")
        service.metrics.increment(published, "favorites")
        service.metrics.increment(published, "shares")
    views, _, _, favorites, shares = _metrics(app, published)
    assert (views, favorites, shares) == (0, 2, 1)


def test_unknown_counter(app, service, published):
    with app.app_context():
        with pytest.raises(ValueError):
            service.metrics.increment(published, "likes")


def test_public_only_skips_unpublished(app, service, create_submission):
    draft = create_submission()
    with app.app_context():
        assert service.metrics.increment_view(draft["id"], public_only=True) is False
    assert _metrics(app, draft["id"])[0] == 0
