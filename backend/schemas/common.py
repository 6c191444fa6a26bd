# backend/schemas/common.py
from pydantic import BaseModel, ConfigDict


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Generic confirmation payload for deletes and state changes
class MessageResponse(BaseModel):
    message: str
