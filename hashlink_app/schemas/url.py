from pydantic import BaseModel, Field


class MappingEntry(BaseModel):
    """One stored mapping, as produced by the lister"""
    token: str = Field(..., description="Derived token (store key)")
    url: str = Field(..., description="Original URL, stored verbatim")
