from couponme.schemas.base import CamelModel


class CheckoutSessionResponse(CamelModel):
    session_id: str
    url: str


class WebhookAck(CamelModel):
    received: bool = True
    type: str | None = None
    duplicate: bool = False


class UploadResponse(CamelModel):
    url: str
