from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required

from virtual_museum.schemas.artifact_schema import catalog_artifacts_schema
from virtual_museum.schemas.submission_schema import (
    SubmissionCreateSchema,
    SubmissionListArgsSchema,
    SubmissionUpdateSchema,
    submission_schema,
    submissions_schema,
)
from virtual_museum.services.access_scope import AccessScope
from virtual_museum.utils.pagination import page_args, pagination_meta
from virtual_museum.utils.response_formatter import success_response

bp = Blueprint("virtual_museum", __name__, url_prefix="/api/v1/virtual-museum")

create_schema = SubmissionCreateSchema()
update_schema = SubmissionUpdateSchema()
list_args_schema = SubmissionListArgsSchema()


def service():
    return current_app.extensions["virtual_museum"]


# ------------------------------------------------------------
# GET /virtual-museum/submissions: List the caller's museum submissions
# ------------------------------------------------------------
@bp.route("/submissions", methods=["GET"])
@jwt_required()
def list_submissions():
    args = list_args_schema.load(request.args)
    page, limit = page_args(request.args)

    items, total = service().list_own(
        AccessScope.current(),
        status=args.get("status"),
        page=page,
        limit=limit,
    )
    return success_response(
        {"data": submissions_schema.dump(items)},
        pagination=pagination_meta(total, page, limit),
    )


# ------------------------------------------------------------
# POST /virtual-museum/submissions: Create a submission (status pending)
# ------------------------------------------------------------
@bp.route("/submissions", methods=["POST"])
@jwt_required()
def create_submission():
    payload = create_schema.load(request.get_json(silent=True) or {})
    submission = service().create(AccessScope.current(), payload)
    return success_response(
        {"data": submission_schema.dump(submission)},
        message="Virtual museum submission created successfully",
        status=201,
    )


@bp.route("/submissions/<submission_id>", methods=["GET"])
@jwt_required()
def get_submission(submission_id):
    submission = service().get(AccessScope.current(), submission_id)
    return success_response({"data": submission_schema.dump(submission)})


# ------------------------------------------------------------
# PUT /virtual-museum/submissions/<id>: Edit while pending or rejected
# ------------------------------------------------------------
@bp.route("/submissions/<submission_id>", methods=["PUT", "PATCH"])
@jwt_required()
def update_submission(submission_id):
    patch = update_schema.load(request.get_json(silent=True) or {})
    submission = service().update(AccessScope.current(), submission_id, patch)
    return success_response(
        {"data": submission_schema.dump(submission)},
        message="Virtual museum submission updated successfully",
    )


@bp.route("/submissions/<submission_id>", methods=["DELETE"])
@jwt_required()
def delete_submission(submission_id):
    service().delete(AccessScope.current(), submission_id)
    return success_response(message="Virtual museum submission deleted successfully")


@bp.route("/submissions/<submission_id>/submit", methods=["POST"])
@jwt_required()
def submit_for_review(submission_id):
    submission = service().submit_for_review(AccessScope.current(), submission_id)
    return success_response(
        {"data": submission_schema.dump(submission)},
        message="Submission submitted for review successfully",
    )


@bp.route("/stats", methods=["GET"])
@jwt_required()
def museum_stats():
    stats = service().organization_stats(AccessScope.current())
    return success_response({"data": stats})


@bp.route("/artifacts", methods=["GET"])
@jwt_required()
def available_artifacts():
    artifacts = service().available_artifacts(AccessScope.current())
    return success_response({"data": catalog_artifacts_schema.dump(artifacts)})
