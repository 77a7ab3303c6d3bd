from __future__ import annotations

import logging
import mimetypes

from nicegui.events import UploadEventArguments

from .records import Attachment

logger = logging.getLogger(__name__)


def attachment_from_upload(event: UploadEventArguments) -> Attachment:
    """
    Turns a `ui.upload` event into an Attachment. The file is read whole and
    kept as-is; nothing here looks inside it.
    """
    content = event.content.read()
    # Browsers leave the type blank for some files, so fall back to the extension.
    media_type = event.type or mimetypes.guess_type(event.name)[0] or 'application/octet-stream'
    logger.info(f"Captured upload '{event.name}' ({media_type}, {len(content)} bytes).")
    return Attachment(filename=event.name, media_type=media_type, content=content)
