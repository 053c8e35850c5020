# session_relay/models/message.py
from typing import Optional, Union

from pydantic import BaseModel


class Message(BaseModel):
    IdPerson: str
    SessionId: Optional[str] = None

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_body(cls, body: Union[bytes, str]) -> "Message":
        """
        Parses a queue payload. A payload without SessionId is valid:
        the consumer then falls back to a default-consistency read.
        """
        return cls.model_validate_json(body)
