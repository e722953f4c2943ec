"""
Document attachment - validation, decoding and viewing of node attachments.

Files arrive as `FileHandle` objects carrying (name, type, size) metadata and
an async reader. Only the allowed MIME types are accepted; everything else is
rejected per file with a user-facing message. Text documents are decoded to
strings, all other documents are kept as base64 data URLs that a browser can
open directly. Binary formats are never parsed here.
"""

import base64
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from .models import ALLOWED_DOCUMENT_TYPES, TEXT_DOCUMENT_TYPES, Document


REJECTION_MESSAGE = (
    "File type {type} is not supported. Please upload PDF, TXT, MD, or DOC files."
)


@dataclass
class FileHandle:
    """An incoming file: metadata plus an async reader for its bytes."""
    name: str
    type: str
    read: Callable[[], Awaitable[bytes]]
    size: Optional[int] = None

    @classmethod
    def from_bytes(cls, name: str, type: str, data: bytes) -> "FileHandle":
        """Wrap in-memory bytes as a file handle."""
        async def read() -> bytes:
            return data

        return cls(name=name, type=type, read=read, size=len(data))

    @classmethod
    def from_upload(cls, upload) -> "FileHandle":
        """Wrap a Starlette/FastAPI UploadFile."""
        return cls(
            name=upload.filename or "",
            type=upload.content_type or "",
            read=upload.read,
            size=upload.size,
        )


@dataclass
class AttachmentRejection:
    """A file that was refused because of its type."""
    file_name: str
    file_type: str
    message: str

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "file_name": self.file_name,
            "file_type": self.file_type,
            "message": self.message,
        }


@dataclass
class AttachmentResult:
    """Outcome of attaching a batch of files to a node."""
    node_id: str
    attached: list[Document] = field(default_factory=list)
    rejected: list[AttachmentRejection] = field(default_factory=list)
    # Files read successfully after their node had been deleted
    discarded: list[str] = field(default_factory=list)
    # Files whose read raised
    failed: list[AttachmentRejection] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "node_id": self.node_id,
            "attached": [d.model_dump(exclude={"content"}) for d in self.attached],
            "rejected": [r.to_dict() for r in self.rejected],
            "discarded": list(self.discarded),
            "failed": [f.to_dict() for f in self.failed],
        }


@dataclass
class DocumentView:
    """What the viewer receives when a document is opened."""
    name: str
    media_type: str
    body: bytes


def is_allowed_type(mime_type: str) -> bool:
    """Check a MIME type against the attachment allow-list."""
    return mime_type in ALLOWED_DOCUMENT_TYPES


def check_file(file: FileHandle) -> Optional[AttachmentRejection]:
    """Return a rejection for the file, or None if it may be attached."""
    if is_allowed_type(file.type):
        return None
    return AttachmentRejection(
        file_name=file.name,
        file_type=file.type,
        message=REJECTION_MESSAGE.format(type=file.type or "(unknown)"),
    )


def read_failure(file: FileHandle, error: Exception) -> AttachmentRejection:
    """Entry for a file whose content could not be read."""
    return AttachmentRejection(
        file_name=file.name,
        file_type=file.type,
        message=f"Could not read {file.name}: {error}",
    )


def encode_data_url(mime_type: str, data: bytes) -> str:
    """Encode bytes as a self-describing data: URL."""
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def decode_data_url(url: str) -> tuple[str, bytes]:
    """
    Split a base64 data: URL into (media_type, payload).

    Raises:
        ValueError: if the string is not a base64 data URL
    """
    if not url.startswith("data:") or ";base64," not in url:
        raise ValueError("Not a base64 data URL")
    header, payload = url[len("data:"):].split(";base64,", 1)
    return header, base64.b64decode(payload)


def build_document(name: str, mime_type: str, data: bytes, size: Optional[int] = None) -> Document:
    """
    Turn raw file bytes into a Document.

    Text types are decoded as UTF-8 (undecodable bytes are replaced);
    everything else is stored as a data URL.
    """
    if mime_type in TEXT_DOCUMENT_TYPES:
        content = data.decode("utf-8", errors="replace")
    else:
        content = encode_data_url(mime_type, data)

    return Document(
        name=name,
        type=mime_type,
        size=size if size is not None else len(data),
        content=content,
    )


async def read_document(file: FileHandle) -> Document:
    """Read a file handle to completion and build its Document."""
    data = await file.read()
    return build_document(file.name, file.type, data, size=file.size)


def open_document(document: Document) -> DocumentView:
    """
    Produce a read-only view of a document.

    Text documents are rendered as their text; other documents are opened
    from their decoded payload.
    """
    if document.is_text:
        body = (document.content or "").encode("utf-8")
        return DocumentView(name=document.name, media_type=document.type, body=body)

    if not document.content:
        return DocumentView(name=document.name, media_type=document.type, body=b"")

    media_type, body = decode_data_url(document.content)
    return DocumentView(name=document.name, media_type=media_type or document.type, body=body)
