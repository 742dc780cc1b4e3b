from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from ...schemas.common import ResponseMap, format_amount
from ...settings import Settings, settings


class BriMpmDynamicCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    client_id: str = ""
    client_secret: str = ""
    partner_id: str = ""
    private_key: str = ""
    private_key_path: str = ""
    merchant_id: str = ""
    terminal_id: str = ""
    channel_id: str = ""
    # IANA name, e.g. Asia/Jakarta; empty means the host's local time
    timezone: str = ""

    @classmethod
    def from_settings(cls, s: Settings = settings) -> "BriMpmDynamicCredentials":
        return cls(
            host=s.BRI_MPM_HOST,
            client_id=s.BRI_MPM_CLIENT_ID,
            client_secret=s.BRI_MPM_CLIENT_SECRET,
            partner_id=s.BRI_MPM_PARTNER_ID,
            private_key=s.BRI_MPM_PRIVATE_KEY,
            private_key_path=s.BRI_MPM_PRIVATE_KEY_PATH,
            merchant_id=s.BRI_MPM_MERCHANT_ID,
            terminal_id=s.BRI_MPM_TERMINAL_ID,
            channel_id=s.BRI_MPM_CHANNEL_ID,
            timezone=s.BRI_MPM_TIMEZONE,
        )


class BriMpmDynamicGenerateQRCodeRequest(BaseModel):
    partner_reference_no: str
    amount: str
    currency: str = "IDR"
    merchant_id: Optional[str] = None
    terminal_id: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v: Union[str, int, Decimal]) -> str:
        return format_amount(v)

    def payload(self) -> ResponseMap:
        body = ResponseMap(
            partnerReferenceNo=self.partner_reference_no,
            amount=ResponseMap(value=self.amount, currency=self.currency),
        )
        if self.merchant_id:
            body["merchantId"] = self.merchant_id
        if self.terminal_id:
            body["terminalId"] = self.terminal_id
        return body


class BriMpmDynamicCheckStatusTransactionRequest(BaseModel):
    """Takes referenceNo and the service code (responseCode[3:5]) of the generate response."""

    original_reference_no: str
    service_code: str
    terminal_id: Optional[str] = None

    def payload(self) -> ResponseMap:
        body = ResponseMap(
            originalReferenceNo=self.original_reference_no,
            serviceCode=self.service_code,
        )
        if self.terminal_id:
            body["additionalInfo"] = ResponseMap(terminalId=self.terminal_id)
        return body
