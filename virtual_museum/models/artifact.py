from virtual_museum.extensions import db
from sqlalchemy.sql import func


class Artifact(db.Model):
    """Read replica of the artifact catalog, keyed by the catalog's own ids."""

    __tablename__ = "artifacts"

    __table_args__ = (
        db.Index("idx_artifacts_museum_status", "museum_id", "status"),
    )

    id = db.Column(db.String(50), primary_key=True)
    museum_id = db.Column(db.String(50), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    category = db.Column(db.String(50))
    status = db.Column(db.String(30), nullable=False, default="in_storage")
    image = db.Column(db.String(1024))
    featured = db.Column(db.Boolean, default=False)

    updated_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
