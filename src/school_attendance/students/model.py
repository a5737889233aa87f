from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    id: str
    school_id: str
    class_id: Optional[str]
    first_name: str
    last_name: str
    grade: str
    parent_name: Optional[str] = None
    parent_email: Optional[str] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class SchoolClass:
    id: str
    school_id: str
    name: str
    grade: str
    is_active: bool = True
