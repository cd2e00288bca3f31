"""Service wiring for the API routes.

``main.py`` installs the services during lifespan; routes resolve them
through these dependencies so tests can swap them with
``app.dependency_overrides``.
"""

from typing import Optional

from genproxy.config import settings
from genproxy.providers.wavespeed import WavespeedClient
from genproxy.services.contact import ContactMailer
from genproxy.services.generation import GenerationService

_generation_service: Optional[GenerationService] = None
_contact_mailer: Optional[ContactMailer] = None


def set_generation_service(service: Optional[GenerationService]) -> None:
    global _generation_service
    _generation_service = service


def set_contact_mailer(mailer: Optional[ContactMailer]) -> None:
    global _contact_mailer
    _contact_mailer = mailer


def get_generation_service() -> GenerationService:
    global _generation_service
    if _generation_service is None:
        _generation_service = GenerationService(WavespeedClient.from_settings(settings))
    return _generation_service


def get_contact_mailer() -> ContactMailer:
    global _contact_mailer
    if _contact_mailer is None:
        _contact_mailer = ContactMailer(settings)
    return _contact_mailer
