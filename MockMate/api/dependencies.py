import hmac
import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from packages.mm_auth.resolver import ICurrentUserResolver, StoreUserResolver, User
from packages.mm_core.config import MockMateConfig
from packages.mm_core.errors import AuthenticationError, ConfigurationError
from packages.mm_feedback.pipeline import FeedbackPipeline
from packages.mm_feedback.repository import FeedbackRepository
from packages.mm_interview.service import InterviewService
from packages.mm_providers.llm.base import IScoringProvider
from packages.mm_providers.llm.mock import MockScoringProvider
from packages.mm_providers.llm.openai_impl import OpenAIScoringProvider
from packages.mm_providers.question.base import QuestionGenerator
from packages.mm_providers.question.mock import MockQuestionGenerator
from packages.mm_providers.question.openai_impl import OpenAIQuestionGenerator
from packages.mm_providers.voice.base import IVoiceTransport
from packages.mm_providers.voice.inprocess import InProcessVoiceTransport
from packages.mm_providers.voice.vapi_impl import VapiVoiceTransport
from packages.mm_schedule.service import ScheduleService
from packages.mm_service.concurrency import ConcurrencyManager
from packages.mm_service.session_service import SessionService
from packages.mm_session.infrastructure.memory_registry import MemorySessionRegistry
from packages.mm_session.registry import SessionRegistry
from packages.mm_store.base import DocumentStore
from packages.mm_store.file_store import JsonFileDocumentStore
from packages.mm_store.memory_store import MemoryDocumentStore

logger = logging.getLogger("mockmate.api")


@lru_cache
def get_config() -> MockMateConfig:
    return MockMateConfig.load()


# --- Persistence ---

@lru_cache
def get_document_store() -> DocumentStore:
    """
    Singleton document store, shared across requests.
    """
    config = get_config()
    if config.STORE_BACKEND == "file":
        return JsonFileDocumentStore(base_dir=config.STORE_DIR)
    return MemoryDocumentStore()


@lru_cache
def get_session_registry() -> SessionRegistry:
    """
    Singleton live-session table. Must be shared across requests to keep sessions alive.
    """
    return MemorySessionRegistry()


def get_feedback_repository() -> FeedbackRepository:
    return FeedbackRepository(get_document_store())


@lru_cache
def get_concurrency_manager() -> ConcurrencyManager:
    """Per-session locks must outlive a single request."""
    return ConcurrencyManager()


# --- Providers (External Adapters) ---

@lru_cache
def get_scoring_provider() -> IScoringProvider:
    config = get_config()
    if config.USE_MOCK_PROVIDERS:
        logger.warning("Using mock scoring provider")
        return MockScoringProvider()
    if not config.OPENAI_API_KEY:
        raise ConfigurationError("OPENAI_API_KEY is required unless USE_MOCK_PROVIDERS is set")
    return OpenAIScoringProvider(api_key=config.OPENAI_API_KEY, model=config.SCORING_MODEL)


@lru_cache
def get_question_generator() -> QuestionGenerator:
    config = get_config()
    if config.USE_MOCK_PROVIDERS:
        return MockQuestionGenerator()
    if not config.OPENAI_API_KEY:
        raise ConfigurationError("OPENAI_API_KEY is required unless USE_MOCK_PROVIDERS is set")
    return OpenAIQuestionGenerator(api_key=config.OPENAI_API_KEY, model=config.QUESTION_MODEL)


def create_transport() -> IVoiceTransport:
    """One transport per session; never shared."""
    config = get_config()
    if config.VOICE_TRANSPORT == "vapi":
        if not config.VAPI_API_KEY:
            raise ConfigurationError("VAPI_API_KEY is required for the vapi transport")
        return VapiVoiceTransport(
            api_key=config.VAPI_API_KEY,
            base_url=config.VAPI_BASE_URL,
            default_workflow_id=config.VAPI_WORKFLOW_ID,
            timeout=config.VAPI_TIMEOUT_SEC,
            server_secret=config.VAPI_SERVER_SECRET,
        )
    return InProcessVoiceTransport()


# --- Domain Services (Application Logic) ---

def get_feedback_pipeline() -> FeedbackPipeline:
    return FeedbackPipeline(
        scorer=get_scoring_provider(),
        repository=get_feedback_repository(),
    )


def get_session_service() -> SessionService:
    """
    Transient Session Service over the singleton registry.
    """
    config = get_config()
    return SessionService(
        registry=get_session_registry(),
        transport_factory=create_transport,
        pipeline=get_feedback_pipeline(),
        workflow_id=config.VAPI_WORKFLOW_ID,
        concurrency_manager=get_concurrency_manager(),
        public_base_url=config.PUBLIC_BASE_URL,
        finished_ttl_sec=config.SESSION_FINISHED_TTL_SEC,
    )


def get_interview_service() -> InterviewService:
    return InterviewService(
        store=get_document_store(),
        question_generator=get_question_generator(),
        feedback_repo=get_feedback_repository(),
    )


def get_schedule_service() -> ScheduleService:
    return ScheduleService(store=get_document_store())


# --- Current user ---

def get_user_resolver(x_user_id: Optional[str] = Header(default=None)) -> ICurrentUserResolver:
    return StoreUserResolver(get_document_store(), x_user_id)


def get_current_user(resolver: ICurrentUserResolver = Depends(get_user_resolver)) -> User:
    return resolver.require_user()


def verify_vapi_secret(
    x_vapi_secret: Optional[str] = Header(default=None),
    config: MockMateConfig = Depends(get_config),
) -> None:
    """Webhook calls must carry the shared secret; without a configured secret the webhook is closed."""
    expected = config.VAPI_SERVER_SECRET
    if not expected:
        raise AuthenticationError("Vapi webhook secret is not configured")
    if not x_vapi_secret or not hmac.compare_digest(x_vapi_secret, expected):
        raise AuthenticationError("Invalid Vapi webhook secret")
