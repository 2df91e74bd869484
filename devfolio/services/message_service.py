"""
Contact message service.

Visitors submit messages through the contact form; the admin panel lists,
marks read and deletes them.
"""

import logging

from devfolio.backend.client import HostedBackend, Order, eq
from devfolio.exceptions import BackendError, MessageNotFoundError, ValidationError
from devfolio.schemas.content import ContactMessage, ContactMessageCreate
from devfolio.utils.metrics import record_content_operation
from devfolio.utils.sanitize import sanitize_plain_text

logger = logging.getLogger(__name__)

MESSAGES_TABLE = "contact_messages"


async def submit_message(backend: HostedBackend, data: ContactMessageCreate) -> ContactMessage:
    """
    Store a contact form submission.

    Markup is stripped from every free-text field.

    Raises:
        ValidationError: If a field is empty once markup is removed.
    """
    record = {
        "name": sanitize_plain_text(data.name),
        "email": str(data.email),
        "subject": sanitize_plain_text(data.subject),
        "message": sanitize_plain_text(data.message),
    }
    for field in ("name", "subject", "message"):
        if not record[field]:
            raise ValidationError(f"'{field}' must not be empty", field=field)

    rows = await backend.insert(MESSAGES_TABLE, record)
    if not rows:
        raise BackendError("Backend returned no row for submitted message", operation=f"insert:{MESSAGES_TABLE}")
    message = ContactMessage.model_validate(rows[0])
    record_content_operation("message", "create")
    logger.info(f"Contact message received: {message.id}")
    return message


async def list_messages(backend: HostedBackend) -> list[ContactMessage]:
    rows = await backend.select(MESSAGES_TABLE, order=Order("created_at", ascending=False))
    return [ContactMessage.model_validate(row) for row in rows]


async def mark_read(backend: HostedBackend, message_id: str, read: bool = True) -> ContactMessage:
    rows = await backend.update(MESSAGES_TABLE, {"read": read}, [eq("id", message_id)])
    if not rows:
        raise MessageNotFoundError(message_id)
    record_content_operation("message", "update")
    return ContactMessage.model_validate(rows[0])


async def delete_message(backend: HostedBackend, message_id: str) -> None:
    rows = await backend.select(MESSAGES_TABLE, columns="id", filters=[eq("id", message_id)], limit=1)
    if not rows:
        raise MessageNotFoundError(message_id)
    await backend.delete(MESSAGES_TABLE, [eq("id", message_id)])
    record_content_operation("message", "delete")
    logger.info(f"Contact message deleted: {message_id}")
