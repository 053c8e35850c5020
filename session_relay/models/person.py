# session_relay/models/person.py
from pydantic import BaseModel, computed_field


class Person(BaseModel):
    id: str          # unique, also the partition key value
    Name: str
    Age: int

    @computed_field
    @property
    def partitionKey(self) -> str:
        # mirrors id; keep in sync with the container's /partitionKey path
        return self.id

    def to_document(self) -> dict:
        return self.model_dump()
