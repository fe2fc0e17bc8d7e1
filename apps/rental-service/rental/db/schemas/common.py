from typing import Generic, List, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    items: List[T]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int

    @classmethod
    def build(cls, items, total_count: int, page_number: int, page_size: int):
        total_pages = -(-total_count // page_size) if page_size else 0
        return cls(
            items=items,
            total_count=total_count,
            page_number=page_number,
            page_size=page_size,
            total_pages=total_pages,
        )
