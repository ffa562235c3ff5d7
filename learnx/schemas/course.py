from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class CourseCard(BaseModel):
    """Catalog listing entry; column names are renamed for the storefront."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str = Field(serialization_alias="title")
    description: Optional[str] = None
    university: Optional[str] = None
    instructor: Optional[str] = None
    category: Optional[str] = None
    level: Optional[str] = None
    fee: Optional[float] = Field(default=None, serialization_alias="price")
    original_price: Optional[float] = Field(default=None, serialization_alias="originalPrice")
    rating: Optional[float] = None
    students: Optional[int] = None
    icon: Optional[str] = None
    bestseller: bool = False
    featured: bool = False
    trending: bool = False
    is_new: bool = Field(default=False, serialization_alias="isNew")


class CourseDetail(CourseCard):
    duration: Optional[str] = None


class TopicOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    order_index: int = Field(serialization_alias="orderIndex")


class ContentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content_type: str = Field(serialization_alias="contentType")
    url: Optional[str] = None
    note_text: Optional[str] = Field(default=None, serialization_alias="noteText")
    order_index: int = Field(serialization_alias="orderIndex")


class InstructorCourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str = Field(serialization_alias="title")
    description: Optional[str] = None
    status: Optional[str] = None
    university: Optional[str] = None
    category: Optional[str] = None
    fee: Optional[float] = Field(default=None, serialization_alias="price")
    duration: Optional[str] = None
    created_at: datetime


class PendingCourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str = Field(serialization_alias="title")
    description: Optional[str] = None
    instructor: Optional[str] = None
    instructor_userid: Optional[str] = Field(default=None, serialization_alias="instructorUserid")
    created_at: datetime


class CourseSubmitRequest(BaseModel):
    title: Any = None
    description: Any = None
    price: Any = None
    level: Any = None
    university: Any = None


class ContentCreateRequest(BaseModel):
    title: Any = None
    type: Any = None
    description: Any = None
    link: Any = None
