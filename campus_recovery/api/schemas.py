from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class RecoveryRequest(BaseModel):
    identity: str = Field(min_length=1, max_length=320)


class RecoveryRequestResponse(BaseModel):
    accepted: bool = True


class RecoveryVerify(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    identity: str = Field(min_length=1, max_length=320)
    code: str = Field(min_length=1, max_length=32)
    new_secret: str = Field(alias="newSecret", min_length=1, max_length=128)


class RecoveryVerifyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_token: str = Field(serialization_alias="sessionToken")
    expires_at: datetime = Field(serialization_alias="expiresAt")
    account_summary: Dict[str, Any] = Field(serialization_alias="accountSummary")
