"""
Push Models - Browser push subscription descriptors
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class PushKeys(BaseModel):
    """Encryption keys of a browser push subscription"""
    p256dh: str
    auth: str


class PushSubscriptionData(BaseModel):
    """Device-specific subscription as produced by PushSubscription.toJSON()"""
    model_config = ConfigDict(populate_by_name=True)

    endpoint: str = Field(..., min_length=1)
    expiration_time: Optional[float] = Field(None, alias="expirationTime")
    keys: PushKeys


class PushSubscribeRequest(BaseModel):
    """Request to enable push notifications for the calling user"""
    permission: str = Field("granted", description="Browser permission result: granted, denied or default")
    subscription: Optional[PushSubscriptionData] = Field(
        None,
        description="Subscription descriptor; missing when the browser does not support push"
    )


class PushStatusResponse(BaseModel):
    """Actual subscription state, plus a message for the user when relevant"""
    enabled: bool
    message: Optional[str] = None
