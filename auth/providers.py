"""Static OAuth 2.0 settings for each supported network."""

import os
from dataclasses import dataclass

from config.config import Config


@dataclass(frozen=True)
class OAuthProvider:
    name: str
    display_name: str
    authorize_url: str
    token_url: str
    profile_url: str
    scopes: tuple[str, ...]
    client_id_envs: tuple[str, ...]
    client_secret_env: str
    redirect_env: str
    scope_separator: str = " "
    token_method: str = "POST"
    basic_auth: bool = False  # client credentials in an Authorization header instead of the body
    use_pkce: bool = False
    profile_id_path: tuple[str, ...] = ("id",)
    extra_authorize_params: tuple[tuple[str, str], ...] = ()

    def client_id(self) -> str | None:
        for env in self.client_id_envs:
            value = os.getenv(env)
            if value:
                return value
        return None

    def client_secret(self) -> str | None:
        return os.getenv(self.client_secret_env)

    def redirect_uri(self, config: Config) -> str:
        return os.getenv(self.redirect_env) or config.callback_url(self.name)

    def user_id_from(self, profile: dict) -> str | None:
        node = profile
        for key in self.profile_id_path:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return str(node) if node is not None else None


PROVIDERS: dict[str, OAuthProvider] = {
    "linkedin": OAuthProvider(
        name="linkedin",
        display_name="LinkedIn",
        authorize_url="https://www.linkedin.com/oauth/v2/authorization",
        token_url="https://www.linkedin.com/oauth/v2/accessToken",
        profile_url="https://api.linkedin.com/v2/me",
        scopes=("r_emailaddress", "r_liteprofile"),
        client_id_envs=("LINKEDIN_CLIENT_ID",),
        client_secret_env="LINKEDIN_CLIENT_SECRET",
        redirect_env="LINKEDIN_REDIRECT_URI",
    ),
    "twitter": OAuthProvider(
        name="twitter",
        display_name="Twitter",
        authorize_url="https://twitter.com/i/oauth2/authorize",
        token_url="https://api.twitter.com/2/oauth2/token",
        profile_url="https://api.twitter.com/2/users/me",
        scopes=("tweet.read", "users.read", "follows.read", "offline.access"),
        client_id_envs=("TWITTER_CLIENT_ID", "TWITTER_API_KEY"),
        client_secret_env="TWITTER_CLIENT_SECRET",
        redirect_env="TWITTER_REDIRECT_URI",
        basic_auth=True,
        use_pkce=True,
        profile_id_path=("data", "id"),
    ),
    "facebook": OAuthProvider(
        name="facebook",
        display_name="Facebook",
        authorize_url="https://www.facebook.com/v18.0/dialog/oauth",
        token_url="https://graph.facebook.com/v18.0/oauth/access_token",
        profile_url="https://graph.facebook.com/v18.0/me?fields=id,name",
        scopes=("public_profile", "email"),
        client_id_envs=("FACEBOOK_APP_ID",),
        client_secret_env="FACEBOOK_APP_SECRET",
        redirect_env="FACEBOOK_REDIRECT_URI",
        scope_separator=",",
        token_method="GET",
    ),
    "reddit": OAuthProvider(
        name="reddit",
        display_name="Reddit",
        authorize_url="https://www.reddit.com/api/v1/authorize",
        token_url="https://www.reddit.com/api/v1/access_token",
        profile_url="https://oauth.reddit.com/api/v1/me",
        scopes=("identity", "read"),
        client_id_envs=("REDDIT_CLIENT_ID",),
        client_secret_env="REDDIT_CLIENT_SECRET",
        redirect_env="REDDIT_REDIRECT_URI",
        basic_auth=True,
        extra_authorize_params=(("duration", "permanent"),),
    ),
}


def get_provider(name: str) -> OAuthProvider | None:
    return PROVIDERS.get((name or "").strip().lower())
