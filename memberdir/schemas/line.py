"""LINE webhook payload schemas (only the fields the directory flow reads)."""

from pydantic import BaseModel, ConfigDict, Field


class _LineModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LineSource(_LineModel):
    type: str
    user_id: str | None = Field(default=None, alias="userId")


class LineMessage(_LineModel):
    type: str
    text: str | None = None


class LinePostback(_LineModel):
    data: str = ""


class LineEvent(_LineModel):
    type: str
    reply_token: str | None = Field(default=None, alias="replyToken")
    source: LineSource | None = None
    message: LineMessage | None = None
    postback: LinePostback | None = None


class LineWebhookPayload(_LineModel):
    destination: str | None = None
    events: list[LineEvent] = Field(default_factory=list)


class WebhookAckResponse(BaseModel):
    """Acknowledgement returned once the signature is valid."""

    status: str = "ok"
    accepted_events: int = 0
