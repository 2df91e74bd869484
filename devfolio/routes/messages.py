"""
Contact Message Routes
"""

from fastapi import APIRouter, Depends, status

from devfolio.auth import get_current_admin
from devfolio.backend.client import HostedBackend
from devfolio.dependencies import get_backend
from devfolio.schemas.content import ContactMessage, ContactMessageCreate
from devfolio.services import message_service

router = APIRouter(tags=["Messages"])
admin_router = APIRouter(tags=["Admin: Messages"], dependencies=[Depends(get_current_admin)])


@router.post("/messages", response_model=ContactMessage, status_code=status.HTTP_201_CREATED)
async def submit_message(data: ContactMessageCreate, backend: HostedBackend = Depends(get_backend)):
    """Submit the contact form."""
    return await message_service.submit_message(backend, data)


@admin_router.get("/messages", response_model=list[ContactMessage])
async def list_messages(backend: HostedBackend = Depends(get_backend)):
    return await message_service.list_messages(backend)


@admin_router.patch("/messages/{message_id}/read", response_model=ContactMessage)
async def mark_message_read(message_id: str, read: bool = True, backend: HostedBackend = Depends(get_backend)):
    return await message_service.mark_read(backend, message_id, read=read)


@admin_router.delete("/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(message_id: str, backend: HostedBackend = Depends(get_backend)) -> None:
    await message_service.delete_message(backend, message_id)
