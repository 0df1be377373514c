"""Directory-related Pydantic schemas.

Field names follow the wire format used by existing clients (camelCase).
Required fields are declared optional so that missing values reach the
directory service and produce its 400 response instead of a generic 422.
"""

from pydantic import BaseModel, ConfigDict, Field


class ClaimIdRequest(BaseModel):
    """Schema for claiming or refreshing a human-readable id."""

    custom_id: str | None = Field(None, alias="customId", description="Full id, namespace included")
    full_invite_code: str | None = Field(None, alias="fullInviteCode", description="Opaque invite payload")
    persistence: str | None = Field(None, description='Either "temporary" or "permanent"')
    pub_key: str | None = Field(None, alias="pubKey", description="Identity key of the claimant")

    model_config = ConfigDict(populate_by_name=True)


class ClaimIdResponse(BaseModel):
    """Schema returned after a successful claim."""

    success: bool = True
    id: str


class InviteResponse(BaseModel):
    """Schema returned when an id resolves to an invite code."""

    full_invite_code: str = Field(..., alias="fullInviteCode")

    model_config = ConfigDict(populate_by_name=True)


class IdByPubkeyResponse(BaseModel):
    """Schema returned when looking up the id owned by a public key."""

    id: str
    permanent: bool


class DeleteIdRequest(BaseModel):
    """Schema for deleting the id owned by a public key."""

    pub_key: str | None = Field(None, alias="pubKey")

    model_config = ConfigDict(populate_by_name=True)


class DeleteIdResponse(BaseModel):
    """Schema returned after a delete request; deleting nothing is not an error."""

    success: bool = True
    message: str | None = None


class SuggestIdResponse(BaseModel):
    """Schema for a memorable id that is currently unclaimed."""

    id: str
