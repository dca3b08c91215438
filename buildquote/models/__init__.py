# Import all models so SQLAlchemy metadata is populated for Alembic autogenerate
from buildquote.models.enums import ReplyItemStatus, TokenScope
from buildquote.models.material import Material
from buildquote.models.rfq import Rfq
from buildquote.models.vendor import Vendor
from buildquote.models.vendor_reply_item import VendorReplyItem

__all__ = [
    "Material",
    "ReplyItemStatus",
    "Rfq",
    "TokenScope",
    "Vendor",
    "VendorReplyItem",
]
