from marshmallow import Schema, fields, pre_load, validates, ValidationError, validate

from models.account import ROLES
from models.schemas.common import normalize_email

MIN_PASSWORD_LENGTH = 8


def _check_password(value):
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")


class AccountCreateSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)
    first_name = fields.String(required=True, data_key="firstName", validate=validate.Length(min=1, max=255))
    last_name = fields.String(required=True, data_key="lastName", validate=validate.Length(min=1, max=255))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=normalize_email(data["email"]))
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        _check_password(value)


class LoginSchema(Schema):
    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=normalize_email(data["email"]))
        return data


class RefreshSchema(Schema):
    refresh_token = fields.String(required=True, data_key="refreshToken", validate=validate.Length(min=1))


class LogoutSchema(Schema):
    account_id = fields.String(data_key="accountId", load_default=None)


class AccountUpdateSchema(Schema):
    # email is accepted only so it can be rejected with a clear message
    email = fields.String(allow_none=True)
    first_name = fields.String(data_key="firstName", validate=validate.Length(min=1, max=255))
    last_name = fields.String(data_key="lastName", validate=validate.Length(min=1, max=255))
    password = fields.String(load_only=True)

    @validates("email")
    def validate_email(self, value, **kwargs):
        raise ValidationError("Email cannot be changed after signup.")

    @validates("password")
    def validate_password(self, value, **kwargs):
        _check_password(value)


class RoleSchema(Schema):
    role = fields.String(required=True, validate=validate.OneOf(ROLES))


class AccountOutSchema(Schema):
    id = fields.String(data_key="accountId")
    email = fields.String()
    first_name = fields.String(data_key="firstName", allow_none=True)
    last_name = fields.String(data_key="lastName", allow_none=True)
    role = fields.String()
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
