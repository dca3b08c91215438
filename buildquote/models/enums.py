import enum


class ReplyItemStatus(str, enum.Enum):
    PENDING = "pending"
    AWARDED = "awarded"


class TokenScope(str, enum.Enum):
    VENDOR = "vendor"
    REQUESTER = "award"
