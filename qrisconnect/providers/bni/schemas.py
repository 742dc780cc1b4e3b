from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from ...schemas.common import ResponseMap, format_amount, format_local_datetime
from ...settings import Settings, settings


class BniCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    username: str = ""
    password: str = ""
    client_id: str = ""
    client_secret: str = ""
    hmac_key: str = ""
    merchant_id: str = ""
    terminal_id: str = ""

    @classmethod
    def from_settings(cls, s: Settings = settings) -> "BniCredentials":
        return cls(
            host=s.BNI_HOST,
            username=s.BNI_USERNAME,
            password=s.BNI_PASSWORD,
            client_id=s.BNI_CLIENT_ID,
            client_secret=s.BNI_CLIENT_SECRET,
            hmac_key=s.BNI_HMAC_KEY,
            merchant_id=s.BNI_MERCHANT_ID,
            terminal_id=s.BNI_TERMINAL_ID,
        )


class BniGenerateQRCodeRequest(BaseModel):
    # {"request_id": "10009121031000912103", "amount": "15001.00",
    #  "merchant_id": "1234567890", "terminal_id": "10049258", "qr_expired": "2022-06-23T15:01:28"}
    request_id: str
    amount: str
    qr_expired: str
    merchant_id: Optional[str] = None
    terminal_id: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v: Union[str, int, Decimal]) -> str:
        return format_amount(v)

    @field_validator("qr_expired", mode="before")
    @classmethod
    def _qr_expired(cls, v: Union[str, datetime]) -> str:
        return format_local_datetime(v)

    def payload(self) -> ResponseMap:
        body = ResponseMap(
            request_id=self.request_id,
            amount=self.amount,
            qr_expired=self.qr_expired,
        )
        if self.merchant_id:
            body["merchant_id"] = self.merchant_id
        if self.terminal_id:
            body["terminal_id"] = self.terminal_id
        return body


class BniCheckStatusTransactionRequest(BaseModel):
    request_id: str
    bill_number: str
    mid: Optional[str] = None

    def payload(self) -> ResponseMap:
        body = ResponseMap(request_id=self.request_id, bill_number=self.bill_number)
        if self.mid:
            body["mid"] = self.mid
        return body
