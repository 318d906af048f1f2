"""FastAPI dependencies for configuration and service access."""

from config.config import Config


def get_config() -> Config:
    """Dependency to get the configuration (singleton pattern)."""
    if not hasattr(get_config, "_instance"):
        get_config._instance = Config()
    return get_config._instance


def get_orchestrator():
    """Dependency to get orchestrator instance (singleton pattern)."""
    from orchestrator.core import SearchOrchestrator

    if not hasattr(get_orchestrator, "_instance"):
        get_orchestrator._instance = SearchOrchestrator(config=get_config())
    return get_orchestrator._instance


def get_oauth_service():
    """Dependency to get the OAuth service (singleton pattern)."""
    from auth.service import OAuthService

    if not hasattr(get_oauth_service, "_instance"):
        get_oauth_service._instance = OAuthService(config=get_config())
    return get_oauth_service._instance
