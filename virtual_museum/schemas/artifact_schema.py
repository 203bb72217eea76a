from marshmallow import fields

from virtual_museum.extensions import ma


class CatalogArtifactSchema(ma.Schema):
    id = fields.String()
    name = fields.String()
    description = fields.String(allow_none=True)
    image = fields.String(allow_none=True)
    category = fields.String(allow_none=True)
    status = fields.String()
    featured = fields.Boolean()


catalog_artifacts_schema = CatalogArtifactSchema(many=True)
