from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from medora.schemas.common import CamelModel, reject_null
from medora.schemas.refs import CategoryRef


class CategoryCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        return reject_null(v)


class CategoryResponse(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    parent: Optional[CategoryRef] = None
    children: Optional[List[CategoryRef]] = None
    medicine_count: Optional[int] = None


class CategoryList(CamelModel):
    categories: List[CategoryResponse]


class BrandCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    logo: Optional[str] = None


class BrandUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    logo: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        return reject_null(v)


class BrandResponse(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    logo: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    medicine_count: Optional[int] = None


class BrandList(CamelModel):
    brands: List[BrandResponse]
