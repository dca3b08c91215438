"""RFQ workflow constants."""

import re

# Deliberately loose: anything@anything.tld
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

RFQ_ID_PREFIX = "RFQ"
RFQ_ID_RANDOM_LENGTH = 10

# Multipart field carrying attachments on RFQ creation
ATTACHMENT_FIELD = "files"
# Vendor reply attachments arrive as files_<item index>
REPLY_FILE_FIELD_PREFIX = "files_"
