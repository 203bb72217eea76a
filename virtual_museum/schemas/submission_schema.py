from marshmallow import EXCLUDE, fields, validate, validates_schema, post_load, ValidationError

from virtual_museum.extensions import ma
from virtual_museum.models.submission import (
    LayoutMode,
    SubmissionStatus,
    SubmissionType,
)

HEX_COLOR = validate.Regexp(r"^#(?:[0-9a-fA-F]{3}){1,2}$", error="Must be a hex colour such as #8B5A3C")
MODEL_FORMATS = ("gltf", "glb", "obj", "fbx")


def _normalize_words(values):
    return [v.strip().lower() for v in values if v and v.strip()]


# ------------------------------------------------------------
# Request payloads
# ------------------------------------------------------------
class ThemeSchema(ma.Schema):
    primary_color = fields.String(validate=HEX_COLOR)
    secondary_color = fields.String(validate=HEX_COLOR)
    font_family = fields.String(validate=validate.Length(min=1, max=100))


class AccessibilitySchema(ma.Schema):
    audio_descriptions = fields.Boolean()
    subtitles = fields.Boolean()
    high_contrast = fields.Boolean()
    screen_reader = fields.Boolean()
    keyboard_navigation = fields.Boolean()


class MediaSchema(ma.Schema):
    banner_image = fields.String(allow_none=True, validate=validate.Length(max=1024))
    thumbnail = fields.String(allow_none=True, validate=validate.Length(max=1024))
    background_music = fields.String(allow_none=True, validate=validate.Length(max=1024))
    intro_video = fields.String(allow_none=True, validate=validate.Length(max=1024))


class ModelFileSchema(ma.Schema):
    artifact_id = fields.String()
    model_url = fields.String(allow_none=True)
    texture_url = fields.String(allow_none=True)
    animation_url = fields.String(allow_none=True)
    file_size = fields.Integer(allow_none=True, validate=validate.Range(min=0))
    format = fields.String(validate=validate.OneOf(MODEL_FORMATS))


class InteractiveContentSchema(ma.Schema):
    has_3d_models = fields.Boolean()
    has_vr_support = fields.Boolean()
    has_ar_support = fields.Boolean()
    model_files = fields.List(fields.Nested(ModelFileSchema))


class ArtifactReferenceSchema(ma.Schema):
    artifact_id = fields.String(required=True, validate=validate.Length(min=1, max=50))
    display_order = fields.Integer(load_default=0, validate=validate.Range(min=0))
    custom_description = fields.String(allow_none=True, validate=validate.Length(max=500))
    featured = fields.Boolean(load_default=False)


class SeoSchema(ma.Schema):
    meta_title = fields.String(allow_none=True, validate=validate.Length(max=60))
    meta_description = fields.String(allow_none=True, validate=validate.Length(max=160))
    keywords = fields.List(fields.String(validate=validate.Length(max=50)))

    @post_load
    def normalize_keywords(self, data, **kwargs):
        if "keywords" in data:
            data["keywords"] = _normalize_words(data["keywords"])
        return data


class SubmissionUpdateSchema(ma.Schema):
    """Editable content of a submission; every field optional."""

    title = fields.String(validate=validate.Length(min=1, max=200))
    type = fields.Enum(SubmissionType, by_value=True)
    description = fields.String(validate=validate.Length(min=1, max=2000))
    artifacts = fields.List(fields.Nested(ArtifactReferenceSchema))
    layout = fields.Enum(LayoutMode, by_value=True)
    theme = fields.Nested(ThemeSchema)
    accessibility = fields.Nested(AccessibilitySchema)
    media = fields.Nested(MediaSchema)
    interactive_content = fields.Nested(InteractiveContentSchema)
    seo = fields.Nested(SeoSchema)

    @validates_schema
    def validate_unique_artifacts(self, data, **kwargs):
        seen = set()
        duplicates = []
        for ref in data.get("artifacts") or []:
            artifact_id = ref["artifact_id"]
            if artifact_id in seen and artifact_id not in duplicates:
                duplicates.append(artifact_id)
            seen.add(artifact_id)
        if duplicates:
            raise ValidationError(
                f"Artifact referenced more than once: {', '.join(duplicates)}",
                field_name="artifacts",
            )

    @post_load
    def strip_title(self, data, **kwargs):
        if "title" in data:
            data["title"] = data["title"].strip()
            if not data["title"]:
                raise ValidationError("Title cannot be blank", field_name="title")
        return data


class SubmissionCreateSchema(SubmissionUpdateSchema):
    title = fields.String(required=True, validate=validate.Length(min=1, max=200))
    type = fields.Enum(SubmissionType, by_value=True, required=True)
    description = fields.String(required=True, validate=validate.Length(min=1, max=2000))


class ReviewDecisionSchema(ma.Schema):
    decision = fields.String(
        required=True,
        validate=validate.OneOf([SubmissionStatus.APPROVED.value, SubmissionStatus.REJECTED.value]),
    )
    feedback = fields.String(allow_none=True, validate=validate.Length(max=1000))
    rating = fields.Integer(allow_none=True, strict=True, validate=validate.Range(min=1, max=5))
    rejection_reason = fields.String(allow_none=True, validate=validate.Length(max=500))

    @validates_schema
    def require_reason_on_reject(self, data, **kwargs):
        if data.get("decision") == SubmissionStatus.REJECTED.value:
            reason = (data.get("rejection_reason") or "").strip()
            if not reason:
                raise ValidationError("Rejection reason is required when rejecting", field_name="rejection_reason")


class PublishSchema(ma.Schema):
    featured = fields.Boolean()
    tags = fields.List(fields.String(validate=validate.Length(max=50)))

    @post_load
    def normalize_tags(self, data, **kwargs):
        if "tags" in data:
            data["tags"] = _normalize_words(data["tags"])
        return data


class RatingSchema(ma.Schema):
    rating = fields.Integer(required=True, strict=True, validate=validate.Range(min=1, max=5))


class SubmissionListArgsSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    status = fields.Enum(SubmissionStatus, by_value=True)
    page = fields.Integer(validate=validate.Range(min=1))
    limit = fields.Integer(validate=validate.Range(min=1))


# ------------------------------------------------------------
# Responses
# ------------------------------------------------------------
def _iso(value):
    return value.isoformat() + "Z" if value else None


def _catalog_value(attr):
    """Read ``attr`` from the catalog entry attached to a reference, if any."""

    def _get(ref):
        item = getattr(ref, "catalog_item", None)
        return getattr(item, attr) if item is not None else None

    return _get


class SubmissionArtifactSchema(ma.Schema):
    artifact_id = fields.String()
    display_order = fields.Integer()
    custom_description = fields.String(allow_none=True)
    featured = fields.Boolean()
    # catalog details, filled in by SubmissionService.attach_catalog
    name = fields.Function(_catalog_value("name"))
    image = fields.Function(_catalog_value("image"))
    category = fields.Function(_catalog_value("category"))
    status = fields.Function(_catalog_value("status"))


class SubmissionSchema(ma.Schema):
    id = fields.String()
    museum_id = fields.String()
    submitted_by = fields.String()
    title = fields.String()
    type = fields.Enum(SubmissionType, by_value=True)
    description = fields.String()
    status = fields.Enum(SubmissionStatus, by_value=True)
    layout = fields.Enum(LayoutMode, by_value=True)
    artifacts = fields.List(fields.Nested(SubmissionArtifactSchema))
    artifact_count = fields.Integer()
    has_3d_content = fields.Boolean()
    is_published = fields.Boolean()
    theme = fields.Method("get_theme")
    accessibility = fields.Method("get_accessibility")
    media = fields.Method("get_media")
    interactive_content = fields.Method("get_interactive_content")
    review = fields.Method("get_review")
    metrics = fields.Method("get_metrics")
    publishing = fields.Method("get_publishing")
    seo = fields.Method("get_seo")
    submission_date = fields.Method("get_submission_date")
    last_modified = fields.Method("get_last_modified")

    def get_theme(self, obj):
        return {
            "primary_color": obj.primary_color,
            "secondary_color": obj.secondary_color,
            "font_family": obj.font_family,
        }

    def get_accessibility(self, obj):
        return {
            "audio_descriptions": obj.audio_descriptions,
            "subtitles": obj.subtitles,
            "high_contrast": obj.high_contrast,
            "screen_reader": obj.screen_reader,
            "keyboard_navigation": obj.keyboard_navigation,
        }

    def get_media(self, obj):
        return {
            "banner_image": obj.banner_image,
            "thumbnail": obj.thumbnail,
            "background_music": obj.background_music,
            "intro_video": obj.intro_video,
        }

    def get_interactive_content(self, obj):
        return {
            "has_3d_models": obj.has_3d_models,
            "has_vr_support": obj.has_vr_support,
            "has_ar_support": obj.has_ar_support,
            "model_files": obj.model_files or [],
        }

    def get_review(self, obj):
        if not obj.reviewed_by:
            return None
        return {
            "reviewed_by": obj.reviewed_by,
            "reviewed_at": _iso(obj.reviewed_at),
            "feedback": obj.review_feedback,
            "rating": obj.review_rating,
            "rejection_reason": obj.rejection_reason,
        }

    def get_metrics(self, obj):
        return {
            "views": obj.views,
            "unique_visitors": obj.unique_visitors,
            "average_rating": obj.average_rating,
            "total_ratings": obj.total_ratings,
            "favorites": obj.favorites,
            "shares": obj.shares,
            "last_viewed": _iso(obj.last_viewed),
        }

    def get_publishing(self, obj):
        return {
            "published_at": _iso(obj.published_at),
            "published_by": obj.published_by,
            "is_public": obj.is_public,
            "featured": obj.featured,
            "tags": obj.tags or [],
        }

    def get_seo(self, obj):
        return {
            "meta_title": obj.meta_title,
            "meta_description": obj.meta_description,
            "keywords": obj.keywords or [],
        }

    def get_submission_date(self, obj):
        return _iso(obj.submission_date)

    def get_last_modified(self, obj):
        return _iso(obj.last_modified)


submission_schema = SubmissionSchema()
submissions_schema = SubmissionSchema(many=True)
