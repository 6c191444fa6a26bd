# utils/google_oauth.py
import httpx
import logging
from urllib.parse import urlencode, urljoin
from config import settings

logger = logging.getLogger(__name__)


class GoogleOAuthError(Exception):
    pass


class GoogleOAuthClient:
    def __init__(self):
        # Initialize configuration and callback URL
        self.client_id = settings.GOOGLE_CLIENT_ID
        self.client_secret = settings.GOOGLE_CLIENT_SECRET
        self.auth_url = settings.GOOGLE_AUTH_URL
        self.token_url = settings.GOOGLE_TOKEN_URL
        self.userinfo_url = settings.GOOGLE_USERINFO_URL
        self.redirect_uri = urljoin(settings.BACKEND_URL, "/auth/callback")
        self.allowed_domain = settings.ALLOWED_EMAIL_DOMAIN

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "state": state,
            "prompt": "select_account",
        }
        # "hd" only preselects the account chooser; the domain is re-checked after the exchange
        if self.allowed_domain:
            params["hd"] = self.allowed_domain
        return f"{self.auth_url}?{urlencode(params)}"

    def email_allowed(self, email: str) -> bool:
        if not self.allowed_domain:
            return True
        return email.lower().rsplit("@", 1)[-1] == self.allowed_domain.lower()

    async def exchange_code(self, code: str) -> dict:
        # Trade the authorization code for tokens
        payload = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }
        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(self.token_url, data=payload)
                response.raise_for_status()
                return response.json()
            except (httpx.RequestError, httpx.HTTPStatusError) as e:
                logger.error(f"Google token exchange error: {e}")
                raise GoogleOAuthError("code_exchange_failed") from e

    async def fetch_userinfo(self, access_token: str) -> dict:
        headers = {"Authorization": f"Bearer {access_token}"}
        async with httpx.AsyncClient() as client:
            try:
                response = await client.get(self.userinfo_url, headers=headers)
                response.raise_for_status()
                return response.json()
            except (httpx.RequestError, httpx.HTTPStatusError) as e:
                logger.error(f"Google userinfo error: {e}")
                raise GoogleOAuthError("userinfo_failed") from e

    async def verified_identity(self, code: str) -> dict:
        """Exchange a code and return {"email", "name", "picture"} of a verified, domain-allowed account."""
        tokens = await self.exchange_code(code)
        access_token = tokens.get("access_token")
        if not access_token:
            raise GoogleOAuthError("no_access_token")

        info = await self.fetch_userinfo(access_token)
        email = (info.get("email") or "").strip().lower()
        if not email or not info.get("email_verified", False):
            raise GoogleOAuthError("email_not_verified")
        if not self.email_allowed(email):
            logger.warning("Google sign-in refused for %s: outside allowed domain", email)
            raise GoogleOAuthError("domain_not_allowed")

        return {"email": email, "name": info.get("name") or email.split("@")[0], "picture": info.get("picture")}


google_client = GoogleOAuthClient()
