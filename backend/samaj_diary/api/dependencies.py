"""Dependencies: process-wide clients and per-request services for FastAPI.

Invariants:
    - One DocumentStoreClient, WhatsAppOtpGateway and ResilientAnthropicClient
      per process, created on startup (or lazily on first use) and closed on shutdown
    - DailyContentService and AdminSessions are singletons: they hold the
      in-memory content cache and the admin token table
    - Tests replace any of these via app.dependency_overrides
"""

import logging

from fastapi import Depends, Header

from samaj_diary.config import Settings, get_settings
from samaj_diary.core.repository_protocols import DocumentStore, OtpSender, TextGenerator
from samaj_diary.infrastructure.anthropic_client import ResilientAnthropicClient
from samaj_diary.infrastructure.document_store import DocumentStoreClient
from samaj_diary.infrastructure.messaging_gateway import WhatsAppOtpGateway
from samaj_diary.services.admin import AdminService
from samaj_diary.services.admin_auth import AdminSession, AdminSessions
from samaj_diary.services.daily_content import DailyContentService
from samaj_diary.services.registration import RegistrationService
from samaj_diary.services.repository import DirectoryRepository

logger = logging.getLogger(__name__)

_document_store: DocumentStoreClient | None = None
_otp_gateway: WhatsAppOtpGateway | None = None
_anthropic_client: ResilientAnthropicClient | None = None
_daily_content_service: DailyContentService | None = None
_admin_sessions: AdminSessions | None = None


def init_clients(settings: Settings) -> None:
    global _document_store, _otp_gateway, _anthropic_client
    _document_store = DocumentStoreClient(
        settings.document_store_url,
        auth_token=settings.document_store_auth,
        timeout_seconds=settings.document_store_timeout_seconds,
    )
    _otp_gateway = WhatsAppOtpGateway(
        settings.gateway_url,
        auth_key=settings.gateway_auth_key,
        message_id=settings.gateway_message_id,
        phone_number_id=settings.gateway_phone_number_id,
        timeout_seconds=settings.gateway_timeout_seconds,
    )
    _anthropic_client = ResilientAnthropicClient(
        api_key=settings.anthropic_api_key,
        model=settings.content_model,
        max_retries=settings.anthropic_max_retries,
        base_delay_ms=settings.anthropic_base_delay_ms,
        max_delay_ms=settings.anthropic_max_delay_ms,
        timeout_seconds=settings.anthropic_timeout_seconds,
    )


async def close_clients() -> None:
    global _document_store, _otp_gateway, _anthropic_client, _daily_content_service
    for client in (_document_store, _otp_gateway, _anthropic_client):
        if client is not None:
            await client.aclose()
    _document_store = _otp_gateway = _anthropic_client = None
    _daily_content_service = None


def _ensure_clients() -> None:
    if _document_store is None or _otp_gateway is None or _anthropic_client is None:
        init_clients(get_settings())


def get_document_store() -> DocumentStore:
    _ensure_clients()
    return _document_store


def get_otp_sender() -> OtpSender:
    _ensure_clients()
    return _otp_gateway


def get_text_generator() -> TextGenerator:
    _ensure_clients()
    return _anthropic_client


def get_repository(
    store: DocumentStore = Depends(get_document_store),
) -> DirectoryRepository:
    return DirectoryRepository(store)


def get_registration_service(
    repository: DirectoryRepository = Depends(get_repository),
    otp_sender: OtpSender = Depends(get_otp_sender),
) -> RegistrationService:
    return RegistrationService(repository, otp_sender, get_settings())


def get_admin_service(
    repository: DirectoryRepository = Depends(get_repository),
) -> AdminService:
    return AdminService(repository)


def get_daily_content_service() -> DailyContentService:
    global _daily_content_service
    if _daily_content_service is None:
        _daily_content_service = DailyContentService(
            DirectoryRepository(get_document_store()),
            get_text_generator(),
            get_settings(),
        )
    return _daily_content_service


def get_admin_sessions() -> AdminSessions:
    global _admin_sessions
    if _admin_sessions is None:
        _admin_sessions = AdminSessions(get_settings())
    return _admin_sessions


def bearer_token(authorization: str | None = Header(None)) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_admin(
    token: str | None = Depends(bearer_token),
    sessions: AdminSessions = Depends(get_admin_sessions),
) -> AdminSession:
    return sessions.validate(token)
