import enum
import uuid
from datetime import datetime

from virtual_museum.extensions import db


def gen_submission_id():
    return f"vms-{uuid.uuid4().hex[:12]}"


class SubmissionStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    RESUBMITTED = "resubmitted"
    PUBLISHED = "published"


class SubmissionType(str, enum.Enum):
    EXHIBITION = "Exhibition"
    EXPERIENCE_3D = "3D Experience"
    GALLERY = "Gallery"
    DIGITAL_ARCHIVE = "Digital Archive"
    INTERACTIVE_TOUR = "Interactive Tour"


class LayoutMode(str, enum.Enum):
    GRID = "grid"
    TIMELINE = "timeline"
    STORY = "story"
    GALLERY_3D = "3d_gallery"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


def _enum_column(enum_cls, name):
    return db.Enum(
        enum_cls,
        name=name,
        native_enum=False,
        validate_strings=True,
        values_callable=_enum_values,
        length=32,
    )


class Submission(db.Model):
    __tablename__ = "submissions"

    __table_args__ = (
        db.Index("idx_submissions_museum_status", "museum_id", "status"),
        db.Index("idx_submissions_submitted_by", "submitted_by"),
        db.Index("idx_submissions_public_featured", "is_public", "featured"),
        db.Index("idx_submissions_views", "views"),
    )

    id = db.Column(db.String(50), primary_key=True, default=gen_submission_id)
    museum_id = db.Column(db.String(50), nullable=False)
    submitted_by = db.Column(db.String(50), nullable=False)

    title = db.Column(db.String(200), nullable=False)
    type = db.Column(_enum_column(SubmissionType, "submission_type"), nullable=False)
    description = db.Column(db.String(2000), nullable=False)
    status = db.Column(
        _enum_column(SubmissionStatus, "submission_status"),
        nullable=False,
        default=SubmissionStatus.PENDING,
    )

    layout = db.Column(_enum_column(LayoutMode, "layout_mode"), nullable=False, default=LayoutMode.GRID)
    primary_color = db.Column(db.String(20), nullable=False, default="#8B5A3C")
    secondary_color = db.Column(db.String(20), nullable=False, default="#ffffff")
    font_family = db.Column(db.String(100), nullable=False, default="Inter")

    audio_descriptions = db.Column(db.Boolean, nullable=False, default=False)
    subtitles = db.Column(db.Boolean, nullable=False, default=False)
    high_contrast = db.Column(db.Boolean, nullable=False, default=False)
    screen_reader = db.Column(db.Boolean, nullable=False, default=False)
    keyboard_navigation = db.Column(db.Boolean, nullable=False, default=True)

    # opaque URLs owned by the media storage service
    banner_image = db.Column(db.String(1024))
    thumbnail = db.Column(db.String(1024))
    background_music = db.Column(db.String(1024))
    intro_video = db.Column(db.String(1024))

    has_3d_models = db.Column(db.Boolean, nullable=False, default=False)
    has_vr_support = db.Column(db.Boolean, nullable=False, default=False)
    has_ar_support = db.Column(db.Boolean, nullable=False, default=False)
    model_files = db.Column(db.JSON, nullable=False, default=list)

    reviewed_by = db.Column(db.String(50))
    reviewed_at = db.Column(db.DateTime)
    review_feedback = db.Column(db.String(1000))
    review_rating = db.Column(db.Integer)
    rejection_reason = db.Column(db.String(500))

    views = db.Column(db.Integer, nullable=False, default=0)
    unique_visitors = db.Column(db.Integer, nullable=False, default=0)
    average_rating = db.Column(db.Float, nullable=False, default=0.0)
    total_ratings = db.Column(db.Integer, nullable=False, default=0)
    favorites = db.Column(db.Integer, nullable=False, default=0)
    shares = db.Column(db.Integer, nullable=False, default=0)
    last_viewed = db.Column(db.DateTime)

    published_at = db.Column(db.DateTime)
    published_by = db.Column(db.String(50))
    is_public = db.Column(db.Boolean, nullable=False, default=False)
    featured = db.Column(db.Boolean, nullable=False, default=False)
    tags = db.Column(db.JSON, nullable=False, default=list)

    meta_title = db.Column(db.String(60))
    meta_description = db.Column(db.String(160))
    keywords = db.Column(db.JSON, nullable=False, default=list)

    submission_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    last_modified = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    is_deleted = db.Column(db.Boolean, nullable=False, default=False)
    deleted_at = db.Column(db.DateTime)
    deleted_by = db.Column(db.String(50))

    artifacts = db.relationship(
        "SubmissionArtifact",
        backref="submission",
        order_by="SubmissionArtifact.display_order",
        cascade="all, delete-orphan",
        lazy=True,
    )

    @property
    def artifact_count(self):
        return len(self.artifacts)

    @property
    def has_3d_content(self):
        return bool(self.has_3d_models or self.model_files)

    @property
    def is_published(self):
        return self.status == SubmissionStatus.PUBLISHED and self.is_public

    def derive_seo(self):
        if not self.meta_title and self.title:
            self.meta_title = self.title[:60]
        if not self.meta_description and self.description:
            self.meta_description = self.description[:160]


class SubmissionArtifact(db.Model):
    __tablename__ = "submission_artifacts"

    __table_args__ = (
        db.UniqueConstraint("submission_id", "artifact_id", name="uq_submission_artifact"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    submission_id = db.Column(
        db.String(50),
        db.ForeignKey("submissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    artifact_id = db.Column(db.String(50), nullable=False)
    display_order = db.Column(db.Integer, nullable=False, default=0)
    custom_description = db.Column(db.String(500))
    featured = db.Column(db.Boolean, nullable=False, default=False)
