from pydantic import BaseModel


class ReflectionRequest(BaseModel):
    prompt: str


class ReflectionResponse(BaseModel):
    result: str


class HealthResponse(BaseModel):
    status: str
    provider: str
