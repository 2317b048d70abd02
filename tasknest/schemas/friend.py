from typing import Optional

from pydantic import Field

from tasknest.schemas.common import ID_PATTERN, CamelModel, IsoDatetime
from tasknest.schemas.user import PublicProfile


class FriendRequestCreate(CamelModel):
    recipient_id: str = Field(pattern=ID_PATTERN)


class FriendRequestOut(CamelModel):
    id: str
    requester: PublicProfile
    recipient: PublicProfile
    status: str
    is_sent: Optional[bool] = None
    created_at: Optional[IsoDatetime] = None


class FriendOut(PublicProfile):
    friendship_id: str
    created_at: IsoDatetime
