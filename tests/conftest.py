"""
Shared pytest fixtures for all tests.
"""
import pytest

from config import ChatSettings, ProviderCatalog, get_config, reset_provider_catalog
from core.credentials import CredentialStore
from core.chat import ModelResolver
from core.tools import ToolCallMediator, ToolRegistry
from server.state import set_chat_model, set_tool_registry

from fakes import ScriptedChatModel


@pytest.fixture(autouse=True)
def reset_process_state():
    """Drop the provider catalog, cached config and server state around each test."""
    reset_provider_catalog()
    get_config.cache_clear()
    yield
    reset_provider_catalog()
    get_config.cache_clear()
    set_chat_model(None)
    set_tool_registry(None)


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """sse-starlette keeps a shutdown event bound to the first event loop it saw."""
    from sse_starlette.sse import AppStatus

    if hasattr(AppStatus, "should_exit_event"):
        AppStatus.should_exit_event = None
    yield


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set up mock environment variables for testing."""
    # Set a test API key to avoid requiring real credentials
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key-123")
    monkeypatch.delenv("CHATFORGE_DEFAULT_PROVIDER", raising=False)
    monkeypatch.delenv("CHATFORGE_DEFAULT_MODEL", raising=False)
    return monkeypatch


@pytest.fixture
def settings() -> ChatSettings:
    return ChatSettings()


@pytest.fixture
def catalog() -> ProviderCatalog:
    catalog = ProviderCatalog()
    catalog.initialize()
    return catalog


@pytest.fixture
def credential_store(catalog) -> CredentialStore:
    return CredentialStore(catalog, api_keys={"Anthropic": "test-key-123"})


@pytest.fixture
def resolver(catalog, credential_store, settings) -> ModelResolver:
    return ModelResolver(catalog, credential_store, settings)


@pytest.fixture
def tool_registry() -> ToolRegistry:
    return ToolRegistry()


@pytest.fixture
def mediator(tool_registry) -> ToolCallMediator:
    return ToolCallMediator(tool_registry)


@pytest.fixture
def chat_model() -> ScriptedChatModel:
    """A model answering "Hello!" once with a small usage report."""
    return ScriptedChatModel()
