from marshmallow import Schema, fields

from models.schemas.common import validate_non_negative, validate_duration


class RunCreateSchema(Schema):
    # Only honoured for admins; everyone else records runs for themselves
    account_id = fields.String(data_key="accountId", load_default=None)
    pace = fields.Float(allow_none=True, validate=validate_non_negative)
    time = fields.String(allow_none=True, validate=validate_duration)
    distance = fields.Float(required=True, validate=validate_non_negative)
    lap = fields.Integer(allow_none=True, validate=validate_non_negative)
    incline = fields.Float(allow_none=True)


class RunUpdateSchema(Schema):
    pace = fields.Float(allow_none=True, validate=validate_non_negative)
    time = fields.String(allow_none=True, validate=validate_duration)
    distance = fields.Float(validate=validate_non_negative)
    lap = fields.Integer(allow_none=True, validate=validate_non_negative)
    incline = fields.Float(allow_none=True)


class RunOutSchema(Schema):
    id = fields.String(data_key="runId")
    account_id = fields.String(data_key="accountId")
    pace = fields.Float(allow_none=True)
    time = fields.String(allow_none=True)
    distance = fields.Float(allow_none=True)
    lap = fields.Integer(allow_none=True)
    incline = fields.Float(allow_none=True)
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
