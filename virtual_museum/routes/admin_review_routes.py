from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required

from virtual_museum.models.submission import SubmissionStatus
from virtual_museum.schemas.submission_schema import (
    PublishSchema,
    ReviewDecisionSchema,
    SubmissionListArgsSchema,
    submission_schema,
    submissions_schema,
)
from virtual_museum.services.access_scope import AccessScope
from virtual_museum.utils.pagination import page_args, pagination_meta
from virtual_museum.utils.response_formatter import success_response

bp = Blueprint("admin_virtual_museum", __name__, url_prefix="/api/v1/admin/virtual-museum")

review_schema = ReviewDecisionSchema()
publish_schema = PublishSchema()
list_args_schema = SubmissionListArgsSchema()


def service():
    return current_app.extensions["virtual_museum"]


# ------------------------------------------------------------
# GET /admin/virtual-museum/submissions: Review queue across museums
# ------------------------------------------------------------
@bp.route("/submissions", methods=["GET"])
@jwt_required()
def review_queue():
    args = list_args_schema.load(request.args)
    page, limit = page_args(request.args)

    items, total = service().review_queue(
        AccessScope.current(),
        status=args.get("status", SubmissionStatus.UNDER_REVIEW),
        page=page,
        limit=limit,
    )
    return success_response(
        {"data": submissions_schema.dump(items)},
        pagination=pagination_meta(total, page, limit),
    )


@bp.route("/submissions/<submission_id>/review", methods=["POST"])
@jwt_required()
def apply_review(submission_id):
    decision = review_schema.load(request.get_json(silent=True) or {})
    submission = service().apply_review(AccessScope.current(), submission_id, decision)
    return success_response(
        {"data": submission_schema.dump(submission)},
        message=f"Submission {submission.status.value}",
    )


@bp.route("/submissions/<submission_id>/publish", methods=["POST"])
@jwt_required()
def publish(submission_id):
    options = publish_schema.load(request.get_json(silent=True) or {})
    submission = service().publish(AccessScope.current(), submission_id, options)
    return success_response(
        {"data": submission_schema.dump(submission)},
        message="Submission published",
    )
