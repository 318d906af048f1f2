import os
from dotenv import load_dotenv
from pathlib import Path
from enum import Enum


class SearchMode(Enum):
    """Source scope for a search."""
    VERIFIED = "verified"
    OPEN = "open"


PROVIDER_KEYS = {
    "serper": "SERPER_API_KEY",
    "together": "TOGETHER_API_KEY",
    "perplexity": "PERPLEXITY_API_KEY",
}


class Config:
    """Configuration management for the application."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        env_path = Path(__file__).parent.parent / '.env'
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # Search / LLM providers
        self.SERPER_API_KEY = os.getenv('SERPER_API_KEY')
        self.TOGETHER_API_KEY = os.getenv('TOGETHER_API_KEY')
        self.PERPLEXITY_API_KEY = os.getenv('PERPLEXITY_API_KEY')

        # Public base URL, used to derive OAuth redirect URIs
        self.BASE_URL = os.getenv('NEXT_PUBLIC_BASE_URL', 'http://localhost:8000').rstrip('/')
        self.OAUTH_RELAY_TARGET = os.getenv('OAUTH_RELAY_TARGET', '').rstrip('/')
        self.COOKIE_SECURE = os.getenv('COOKIE_SECURE', 'false').lower() == 'true'

        # Pipeline tuning
        self.SOURCE_FETCH_TIMEOUT_SECONDS = float(os.getenv('SOURCE_FETCH_TIMEOUT_SECONDS', '10'))
        self.LLM_TIMEOUT_SECONDS = float(os.getenv('LLM_TIMEOUT_SECONDS', '60'))
        self.SEARCH_CACHE_TTL_SECONDS = int(os.getenv('SEARCH_CACHE_TTL_SECONDS', '600'))

    def missing_keys(self) -> list[str]:
        """
        Names of provider API keys that are not configured.

        Returns:
            list[str]: Environment variable names, in declaration order
        """
        return [env for env in PROVIDER_KEYS.values() if not os.getenv(env)]

    def api_key_for(self, provider: str) -> str | None:
        env_name = PROVIDER_KEYS.get(provider)
        return os.getenv(env_name) if env_name else None

    def callback_url(self, provider: str) -> str:
        """
        Default OAuth redirect URI for a provider.

        Returns:
            str: <base>/api/auth/<provider>/callback
        """
        return f"{self.BASE_URL}/api/auth/{provider}/callback"
