import logging
from typing import Dict, Optional

import httpx

from ...errors import AuthenticationError
from ...schemas.common import ResponseMap
from ...token_cache import TokenCache
from ...utils.http import perform_request
from ...utils.security import HmacSigner, basic_auth
from ..base import QrisRequest
from .schemas import BniCredentials

logger = logging.getLogger(__name__)


class BniAdapter:
    """
    BNI QRIS (MPM):
    - POST /auth/get-token         password grant, client authenticated with Basic auth
    - POST /qr/generate-qr         X-Signature over request_id:merchant_id:qr_expired
    - POST /check-status/inquiry   X-Signature over request_id:merchant_id:bill_number
    Signatures are hex(HMAC-SHA512(hmac_key, message)). Responses are returned as-is.
    """

    name = "BNI"
    cache_key = "bni"

    def __init__(
        self,
        credentials: Optional[BniCredentials] = None,
        token_cache: Optional[TokenCache] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout_sec: Optional[float] = None,
    ):
        self.credentials = credentials or BniCredentials.from_settings()
        self.base_url = self.credentials.host.rstrip("/")
        self.token_cache = token_cache if token_cache is not None else TokenCache()
        self.signer = HmacSigner(self.credentials.hmac_key)
        self._transport = transport
        self._timeout_sec = timeout_sec

    async def _post(self, path: str, body: ResponseMap, headers: Dict[str, str]) -> ResponseMap:
        return await perform_request(
            f"{self.base_url}/{path}",
            body,
            headers,
            timeout=self._timeout_sec,
            transport=self._transport,
        )

    def _headers(self, access_token: str, message: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {access_token}",
            "X-Signature": self.signer.sign(message),
        }

    # ---- Auth ----
    async def get_access_token(self) -> str:
        # {"access_token": "jwy7GgloLqfqbZ9OnxGxmYOuGu85", "token_type": "Bearer", "expires_in": "899"}
        token = self.token_cache.get(self.cache_key)
        if token:
            return token

        async with self.token_cache.lock(self.cache_key):
            token = self.token_cache.get(self.cache_key)
            if token:
                return token

            logger.info("requesting access token", extra={"provider": self.name})
            body = ResponseMap(
                username=self.credentials.username,
                password=self.credentials.password,
                grant_type="password",
            )
            headers = {
                "Content-Type": "application/json",
                "Authorization": basic_auth(self.credentials.client_id, self.credentials.client_secret),
            }
            data = await self._post("auth/get-token", body, headers)
            if "access_token" not in data:
                err = AuthenticationError(self.name, data.get_value("code"), data.get_value("error"))
                logger.warning("authentication failed: %s", err, extra={"provider": self.name})
                raise err

            return self.token_cache.store(self.cache_key, data)

    # ---- Gateway API ----
    async def generate_qr_code(self, request: QrisRequest) -> ResponseMap:
        access_token = await self.get_access_token()

        body = request.payload()
        body.set_value_if_empty("merchant_id", self.credentials.merchant_id)
        body.set_value_if_empty("terminal_id", self.credentials.terminal_id)
        message = ":".join((
            body.get_value("request_id"),
            body.get_value("merchant_id"),
            body.get_value("qr_expired"),
        ))

        return await self._post("qr/generate-qr", body, self._headers(access_token, message))

    async def check_status_transaction(self, request: QrisRequest) -> ResponseMap:
        access_token = await self.get_access_token()

        body = request.payload()
        body.set_value_if_empty("mid", self.credentials.merchant_id)
        message = ":".join((
            body.get_value("request_id"),
            body.get_value("mid"),
            body.get_value("bill_number"),
        ))

        return await self._post("check-status/inquiry", body, self._headers(access_token, message))
