from typing import Protocol

from ..schemas.common import ResponseMap


class QrisRequest(Protocol):
    def payload(self) -> ResponseMap:
        ...


class Gateway(Protocol):
    name: str

    async def generate_qr_code(self, request: QrisRequest) -> ResponseMap:
        ...

    # Needs the reference number (and for BRI the service code) of a generated QR
    async def check_status_transaction(self, request: QrisRequest) -> ResponseMap:
        ...
