from flask import Blueprint, request, current_app

from virtual_museum.schemas.submission_schema import (
    RatingSchema,
    submission_schema,
    submissions_schema,
)
from virtual_museum.utils.pagination import page_args, pagination_meta
from virtual_museum.utils.response_formatter import success_response

bp = Blueprint("virtual_museum_public", __name__, url_prefix="/api/v1/virtual-museum/public")

rating_schema = RatingSchema()


def service():
    return current_app.extensions["virtual_museum"]


# ------------------------------------------------------------
# GET /virtual-museum/public: Discovery feed (no auth)
# ------------------------------------------------------------
@bp.route("", methods=["GET"])
def list_public():
    page, limit = page_args(request.args, default_limit=current_app.config["PUBLIC_PAGE_SIZE"])
    featured_only = request.args.get("featured", "").lower() == "true"

    items, total = service().list_public(page=page, limit=limit, featured_only=featured_only)
    return success_response(
        {"data": submissions_schema.dump(items)},
        pagination=pagination_meta(total, page, limit),
    )


@bp.route("/<submission_id>", methods=["GET"])
def view_public(submission_id):
    submission = service().view_public(submission_id)
    return success_response({"data": submission_schema.dump(submission)})


@bp.route("/<submission_id>/rate", methods=["POST"])
def rate(submission_id):
    data = rating_schema.load(request.get_json(silent=True) or {})
    submission = service().rate_public(submission_id, data["rating"])
    return success_response({"data": submission_schema.dump(submission)}, message="Rating recorded")


@bp.route("/<submission_id>/favorite", methods=["POST"])
def favorite(submission_id):
    submission = service().count_public(submission_id, "favorites")
    return success_response({"data": submission_schema.dump(submission)})


@bp.route("/<submission_id>/share", methods=["POST"])
def share(submission_id):
    submission = service().count_public(submission_id, "shares")
    return success_response({"data": submission_schema.dump(submission)})
