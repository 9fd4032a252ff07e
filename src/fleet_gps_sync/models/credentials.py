# fleet_gps_sync/models/credentials.py
"""
Per-vendor credential models.

Credentials are stored as a JSON object per provider type, serialized and
then encrypted by the CredentialVault. The JSON keys are camelCase (the
shape users type into the settings form); these models accept either the
camelCase alias or the snake_case field name.

Required fields must be present and non-blank. Optional base URLs fall
back to the vendor defaults in `VendorsConfig`.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

__all__: list[str] = [
    'SamsaraCredentials',
    'SkyBitzCredentials',
    'SpireonCredentials',
    'VendorCredentials',
]


def _normalize_base_url(value: Any) -> Any:
    # Blank optional URLs mean "use the vendor default".
    if isinstance(value, str):
        stripped: str = value.strip().rstrip('/')
        return stripped or None
    return value


class VendorCredentials(BaseModel):
    """Shared configuration for every vendor credential model."""

    model_config = ConfigDict(
        extra='ignore',
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        str_min_length=1,
    )


class SpireonCredentials(VendorCredentials):
    """
    Spireon NSpire credentials.

    Attributes:
        api_key: Application token sent as X-Nspire-AppToken.
        username: Basic-auth user.
        password: Basic-auth password.
        nspire_id: Account identifier issued by Spireon.
        base_url: Optional override of the REST root.
    """

    api_key: SecretStr = Field(alias='apiKey')
    username: str
    password: SecretStr
    nspire_id: str = Field(alias='nspireId')
    base_url: str | None = Field(default=None, alias='baseURL')

    @field_validator('api_key', 'password', mode='before')
    @classmethod
    def reject_blank_secret(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            raise ValueError('value cannot be blank')
        return value

    @field_validator('base_url', mode='before')
    @classmethod
    def normalize_base_url(cls, value: Any) -> Any:
        return _normalize_base_url(value)


class SkyBitzCredentials(VendorCredentials):
    """
    SkyBitz XML gateway credentials.

    The username is sent as the `customer` query parameter.
    """

    username: str
    password: SecretStr
    base_url: str | None = Field(default=None, alias='baseURL')

    @field_validator('password', mode='before')
    @classmethod
    def reject_blank_secret(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            raise ValueError('value cannot be blank')
        return value

    @field_validator('base_url', mode='before')
    @classmethod
    def normalize_base_url(cls, value: Any) -> Any:
        return _normalize_base_url(value)


class SamsaraCredentials(VendorCredentials):
    """
    Samsara API token credentials.

    Attributes:
        api_token: Bearer token.
        api_url: API root, e.g. 'https://api.samsara.com'. Required.
    """

    api_token: SecretStr = Field(alias='apiToken')
    api_url: str = Field(alias='apiUrl')

    @field_validator('api_token', mode='before')
    @classmethod
    def reject_blank_secret(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            raise ValueError('value cannot be blank')
        return value

    @field_validator('api_url', mode='before')
    @classmethod
    def normalize_api_url(cls, value: Any) -> Any:
        normalized: Any = _normalize_base_url(value)
        if normalized is None:
            raise ValueError('apiUrl cannot be blank')
        return normalized
