"""
Attachment framing for signed, encrypted and exported payloads.
"""

from dataclasses import dataclass
from email.message import MIMEPart

SIGNATURE_PROTOCOL = "application/pgp-signature"
ENCRYPTION_PROTOCOL = "application/pgp-encrypted"
KEY_EXCHANGE_PROTOCOL = "application/pgp-keys"
OCTET_STREAM = "application/octet-stream"


@dataclass(frozen=True, kw_only=True)
class MimeAttachment:
    """
    Opaque payload framed as a MIME attachment.

    Attributes:
        content_type: MIME type, e.g. ``application/pgp-keys``.
        content: Attachment bytes (ASCII armor for every producer here).
        filename: Suggested file name.
        disposition: Content disposition.
    """

    content_type: str
    content: bytes
    filename: str | None = None
    disposition: str = "attachment"

    @property
    def text(self) -> str:
        return self.content.decode("ascii")

    def to_mime_part(self) -> MIMEPart:
        maintype, _, subtype = self.content_type.partition("/")
        part = MIMEPart()
        part.set_content(
            self.content,
            maintype=maintype,
            subtype=subtype,
            disposition=self.disposition,
            filename=self.filename,
        )
        return part
