import random
import time
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional, Union

SUCCESS_CODES = frozenset({"00", "200"})
SUCCESS_MESSAGES = frozenset({"Successful", "Successfully", "success", "Payment Success"})

# BNI validates qr_expired in bank-local time without an offset
LOCAL_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


class ResponseMap(dict):
    """
    Decoded JSON object exchanged with the banks.

    BNI and BRI name the same facts differently (``code`` vs ``responseCode``,
    ``bill_number`` vs ``referenceNo``...), so the queries below read the BNI
    name first and fall back to the BRI one.
    """

    def get_value(self, key: str) -> str:
        v = self.get(key)
        return v if isinstance(v, str) else ""

    def set_value_if_empty(self, key: str, value: Any) -> None:
        if self.get(key) in (None, ""):
            self[key] = value

    def set_value_if_empty_with(self, key: str, fill: Callable[["ResponseMap"], "ResponseMap"]) -> None:
        current = self.get(key)
        if isinstance(current, dict):
            nested = ResponseMap(current)
            fill(nested)
            self[key] = nested
        else:
            self[key] = fill(ResponseMap())

    # ---- normalized queries ----
    def _status_code(self) -> str:
        code = self.get_value("code")
        if not code:
            code = self.get_value("responseCode")
            # SNAP codes are HTTP status + service code + case code, e.g. 2004700
            if len(code) >= 7:
                code = code[:3]
        return code

    def _status_message(self) -> str:
        return self.get_value("message") or self.get_value("responseMessage")

    def is_generation_successful(self) -> bool:
        return self._status_code() in SUCCESS_CODES and self._status_message() in SUCCESS_MESSAGES

    def is_payment_successful(self) -> bool:
        code = self.get_value("payment_status") or self.get_value("latestTransactionStatus")
        message = self.get_value("payment_description") or self.get_value("transactionStatusDesc")
        return code in SUCCESS_CODES and message in SUCCESS_MESSAGES

    def reference_number(self) -> str:
        return self.get_value("bill_number") or self.get_value("referenceNo")

    def service_code(self) -> str:
        code = self.get_value("responseCode")
        if len(code) >= 7:
            return code[3:5]
        return ""


def format_amount(value: Union[str, int, Decimal]) -> str:
    """
    Render an amount as a decimal string with two fraction digits ("5000.00").

    Short amounts are padded; amounts with more than two fraction digits and
    floats are rejected, never rounded.
    """
    if isinstance(value, (float, bool)):
        raise ValueError(f"amount must be a decimal string, int or Decimal, got {type(value).__name__}")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {value!r}") from exc
    if not amount.is_finite() or amount <= 0:
        raise ValueError(f"amount must be a positive number, got {value!r}")
    if amount.as_tuple().exponent < -2:
        raise ValueError(f"amount has more than two fraction digits: {value!r}")
    return str(amount.quantize(Decimal("0.01")))


def format_local_datetime(value: Union[str, datetime]) -> str:
    if isinstance(value, datetime):
        return value.strftime(LOCAL_DATETIME_FORMAT)
    return value


def qr_expiry(minutes: int = 60, now: Optional[datetime] = None) -> str:
    """Expiry ``minutes`` from now in the local format BNI expects."""
    return format_local_datetime((now or datetime.now()) + timedelta(minutes=minutes))


def new_request_id(suffix: Optional[str] = None) -> str:
    """Unix seconds followed by a short suffix, unique enough per merchant."""
    if suffix is None:
        suffix = f"{random.randint(0, 999):03d}"
    return f"{int(time.time())}{suffix}"
