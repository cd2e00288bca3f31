"""Contact form endpoint."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from genproxy.api.v1.deps import get_contact_mailer
from genproxy.services.contact import ContactMailer, ContactMessage

router = APIRouter()


class ContactRequest(BaseModel):
    fullName: str = ""
    email: str = ""
    details: str = ""


@router.post("/contact")
async def send_contact(
    request: ContactRequest,
    mailer: ContactMailer = Depends(get_contact_mailer),
):
    message_id = await mailer.send(
        ContactMessage(full_name=request.fullName, email=request.email, details=request.details)
    )
    return {"success": True, "messageId": message_id}
