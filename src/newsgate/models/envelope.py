from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class EncryptedEnvelope(BaseModel):
    """Wire shape ``{"iv": ..., "encryptedData": ...}``, both hex encoded.

    Carries no authentication tag: tampering is not detectable by the client
    from the envelope alone.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    iv: str
    encrypted_data: str = Field(alias="encryptedData")

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)
