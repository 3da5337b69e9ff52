from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class PositionDTO(BaseModel):
    line: int = Field(ge=0)
    character: int = Field(ge=0)


class TextDocumentDTO(BaseModel):
    uri: str


class InsertResourceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text_document: TextDocumentDTO = Field(alias="textDocument")
    position: PositionDTO
    resource_id: Optional[str] = Field(default=None, alias="resourceId")
    timeout_ms: Optional[int] = Field(default=None, alias="timeoutMs", gt=0)


class TextEditDTO(BaseModel):
    uri: str
    start: Tuple[int, int]
    end: Tuple[int, int]
    new_text: str


class InsertResourceResponse(BaseModel):
    edits: List[TextEditDTO] = []
    errors: List[str] = []


class TypeDescriptorDTO(BaseModel):
    type: str
    api_version: str
