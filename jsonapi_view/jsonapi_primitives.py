# -*- coding: utf-8 -*-

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PermissiveModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class JsonApiErrorObject(PermissiveModel):
    status: Optional[str] = None
    title: Optional[str] = None
    detail: Optional[str] = None
    code: Optional[str] = None


class JsonApiErrorDocument(PermissiveModel):
    errors: List[JsonApiErrorObject] = Field(default_factory=list)


class PaginationInfo(BaseModel):
    """
    Pagination information supplied by the caller (e.g. computed by `pagination.paginate`)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    self_: Optional[str] = Field(default=None, alias="self")
    first: Optional[str] = None
    last: Optional[str] = None
    prev: Optional[str] = None
    next: Optional[str] = None
    record_count: Optional[int] = None
    page_count: Optional[int] = None
    page_limit: Optional[int] = None
