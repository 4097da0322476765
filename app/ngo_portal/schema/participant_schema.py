from pydantic import BaseModel

class ParticipantRemove(BaseModel):
    userId: int

    class Config:
        extra = "ignore"
