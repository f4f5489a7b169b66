"""Abstract outbound e-mail gateway."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Attachment:

    filename: str
    content_base64: str
    mime_type: str = "application/pdf"


class EmailDispatcher(ABC):

    @abstractmethod
    async def send(
        self,
        recipient: str,
        subject: str,
        template_params: dict,
        attachment: Attachment | None = None,
    ) -> None:
        """Send a message; raise on any failure or timeout."""
