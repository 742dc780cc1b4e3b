import logging
import random
from datetime import datetime
from typing import Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx

from ...errors import AuthenticationError, ConfigurationError
from ...schemas.common import ResponseMap
from ...token_cache import TokenCache
from ...utils.http import encode_body, perform_request
from ...utils.security import HmacSigner, RsaSigner, sha256_hex
from ..base import QrisRequest
from .schemas import BriMpmDynamicCredentials

logger = logging.getLogger(__name__)

GENERATE_ENDPOINT = "v1.0/qr-dynamic-mpm/qr-mpm-generate-qr"
QUERY_ENDPOINT = "v1.0/qr-dynamic-mpm/qr-mpm-query"
TOKEN_ENDPOINT = "snap/v1.0/access-token/b2b"


def rfc3339(moment: datetime) -> str:
    s = moment.replace(microsecond=0).isoformat()
    if s.endswith("+00:00"):
        return s[:-6] + "Z"
    return s


class BriMpmDynamicAdapter:
    """
    BRI QRIS MPM Dynamic (SNAP):
    - POST /snap/v1.0/access-token/b2b                  client credentials, RSA signature over client_id|timestamp
    - POST /v1.0/qr-dynamic-mpm/qr-mpm-generate-qr
    - POST /v1.0/qr-dynamic-mpm/qr-mpm-query
    Business calls are signed with HMAC-SHA512(client_secret) over
    POST:/<endpoint>:<token>:<hex sha256(body)>:<timestamp>, so the signature
    binds the exact bytes sent.
    """

    name = "BRI_MPM_DYNAMIC"
    cache_key = "briMpm"

    def __init__(
        self,
        credentials: Optional[BriMpmDynamicCredentials] = None,
        token_cache: Optional[TokenCache] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout_sec: Optional[float] = None,
    ):
        self.credentials = credentials or BriMpmDynamicCredentials.from_settings()
        self.base_url = self.credentials.host.rstrip("/")
        self.token_cache = token_cache if token_cache is not None else TokenCache()
        self.token_signer = RsaSigner(self.credentials.private_key, self.credentials.private_key_path)
        self.signer = HmacSigner(self.credentials.client_secret)
        self._transport = transport
        self._timeout_sec = timeout_sec

    async def _post(
        self, path: str, body: ResponseMap, headers: Dict[str, str], content: Optional[bytes] = None
    ) -> ResponseMap:
        return await perform_request(
            f"{self.base_url}/{path}",
            body,
            headers,
            content=content,
            timeout=self._timeout_sec,
            transport=self._transport,
        )

    # ---- Utils ----
    def _timestamp(self) -> str:
        if not self.credentials.timezone:
            return rfc3339(datetime.now().astimezone())
        try:
            tz = ZoneInfo(self.credentials.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigurationError(f"unknown timezone {self.credentials.timezone!r}") from exc
        return rfc3339(datetime.now(tz))

    def _external_id(self) -> str:
        return str(random.randint(9999999999, 99999999998))

    async def _signed_post(self, endpoint: str, access_token: str, body: ResponseMap) -> ResponseMap:
        content = encode_body(body)
        timestamp = self._timestamp()
        message = f"POST:/{endpoint}:{access_token}:{sha256_hex(content)}:{timestamp}"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {access_token}",
            "X-TIMESTAMP": timestamp,
            "X-SIGNATURE": self.signer.sign(message),
            "X-PARTNER-ID": self.credentials.partner_id,
            "X-EXTERNAL-ID": self._external_id(),
            "CHANNEL-ID": self.credentials.channel_id,
        }
        return await self._post(endpoint, body, headers, content=content)

    # ---- Auth ----
    async def get_access_token(self) -> str:
        # {"accessToken": "jwy7GgloLqfqbZ9OnxGxmYOuGu85", "tokenType": "BearerToken", "expiresIn": "899"}
        token = self.token_cache.get(self.cache_key)
        if token:
            return token

        async with self.token_cache.lock(self.cache_key):
            token = self.token_cache.get(self.cache_key)
            if token:
                return token

            logger.info("requesting access token", extra={"provider": self.name})
            timestamp = self._timestamp()
            headers = {
                "Content-Type": "application/json",
                "X-CLIENT-KEY": self.credentials.client_id,
                "X-TIMESTAMP": timestamp,
                "X-SIGNATURE": self.token_signer.sign(f"{self.credentials.client_id}|{timestamp}"),
            }
            data = await self._post(TOKEN_ENDPOINT, ResponseMap(grantType="client_credentials"), headers)
            if not data.get_value("accessToken"):
                err = AuthenticationError(
                    "BRIMpmDynamic", data.get_value("responseCode"), data.get_value("responseMessage")
                )
                logger.warning("authentication failed: %s", err, extra={"provider": self.name})
                raise err

            return self.token_cache.store(self.cache_key, data)

    # ---- Gateway API ----
    async def generate_qr_code(self, request: QrisRequest) -> ResponseMap:
        access_token = await self.get_access_token()

        body = request.payload()
        body.set_value_if_empty("merchantId", self.credentials.merchant_id)
        body.set_value_if_empty("terminalId", self.credentials.terminal_id)

        return await self._signed_post(GENERATE_ENDPOINT, access_token, body)

    async def check_status_transaction(self, request: QrisRequest) -> ResponseMap:
        access_token = await self.get_access_token()

        body = request.payload()

        def _fill(info: ResponseMap) -> ResponseMap:
            info.set_value_if_empty("terminalId", self.credentials.terminal_id)
            return info

        body.set_value_if_empty_with("additionalInfo", _fill)

        return await self._signed_post(QUERY_ENDPOINT, access_token, body)
