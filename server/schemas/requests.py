"""Pydantic request models for FastAPI endpoints."""

from typing import Literal, Optional, List

from pydantic import BaseModel, ConfigDict, Field


class FileDescriptorRequest(BaseModel):
    name: str
    content: Optional[str] = None


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str
    mode: Literal["verified", "open"] = "verified"
    model: Optional[str] = None
    sources: List[str] = Field(default_factory=lambda: ["Web"])
    custom_urls: List[str] = Field(default_factory=list, alias="customUrls")
    files: List[FileDescriptorRequest] = Field(default_factory=list)
    use_llm: bool = Field(True, alias="useLLM")


class WebSearchRequest(BaseModel):
    query: str
    model: Optional[str] = None


class ValidateUrlRequest(BaseModel):
    url: str = ""


class ChatMessageRequest(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(BaseModel):
    messages: List[ChatMessageRequest]
    model: Optional[str] = None
