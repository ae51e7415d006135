from datetime import datetime
from pydantic import BaseModel, ConfigDict
import uuid

class LoginRequest(BaseModel):
    email: str
    password: str

class UserCreate(BaseModel):
    email: str
    password: str

class UserCredentialsUpdate(BaseModel):
    email: str
    password: str

class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class LoginResponse(UserResponse):
    token: str
    refresh_token: str

class AccessTokenResponse(BaseModel):
    token: str
