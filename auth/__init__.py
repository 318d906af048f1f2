"""OAuth 2.0 token exchange for the social networks used as sources."""

from .flow import AuthorizationRequest, OAuthFlowResult, OAuthStage
from .providers import PROVIDERS, OAuthProvider, get_provider
from .service import OAuthConfigError, OAuthService

__all__ = [
    "PROVIDERS",
    "AuthorizationRequest",
    "OAuthConfigError",
    "OAuthFlowResult",
    "OAuthProvider",
    "OAuthService",
    "OAuthStage",
    "get_provider",
]
