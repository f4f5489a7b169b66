"""E-mail dispatcher that appends messages to a JSON outbox file.

A mail relay (or a human) picks messages up from the outbox.  Writes
are bounded by ``timeout`` seconds; a slow disk counts as a failed send.

A timed-out write may still complete in its worker thread, so the outbox
holds at most one message per recipient and subject, and a retry of the
same notification is a no-op once the first write has landed.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from portal.domain.gateway.email_dispatcher import Attachment, EmailDispatcher

log = logging.getLogger(__name__)


class OutboxEmailDispatcher(EmailDispatcher):

    def __init__(self, file_path: Path, timeout: float = 10.0) -> None:
        self._file_path = file_path
        self._timeout = timeout

    async def send(
        self,
        recipient: str,
        subject: str,
        template_params: dict,
        attachment: Attachment | None = None,
    ) -> None:
        if not recipient:
            raise ValueError("No recipient configured for order e-mails")
        message = {
            "to": recipient,
            "subject": subject,
            "params": template_params,
            "queuedAt": datetime.now(timezone.utc).isoformat(),
            "attachment": None if attachment is None else {
                "filename": attachment.filename,
                "mimeType": attachment.mime_type,
                "content": attachment.content_base64,
            },
        }
        await asyncio.wait_for(asyncio.to_thread(self._append, message), self._timeout)
        log.debug("Queued '%s' for %s", subject, recipient)

    def _append(self, message: dict) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        messages = []
        if self._file_path.exists():
            messages = json.loads(self._file_path.read_text(encoding="utf-8"))
        for queued in messages:
            if queued["to"] == message["to"] and queued["subject"] == message["subject"]:
                log.info("'%s' is already queued for %s", message["subject"], message["to"])
                return
        messages.append(message)
        # write-then-rename so a reader never sees a half-written outbox
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        tmp_path.write_text(json.dumps(messages, indent=2) + "\n", encoding="utf-8")
        tmp_path.replace(self._file_path)
