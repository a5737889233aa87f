from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import SchoolClass, Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def get_many(self, student_ids: Iterable[str]) -> Sequence[Student]:
        raise NotImplementedError

    def list_active_enrolled(self) -> Sequence[Student]:
        """Active students that belong to a class."""

        raise NotImplementedError

    def list_active_in_class(self, class_id: str) -> Sequence[Student]:
        raise NotImplementedError


class ClassRepository(Protocol):
    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        raise NotImplementedError

    def get_many(self, class_ids: Iterable[str]) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def list_all(self) -> Sequence[SchoolClass]:
        raise NotImplementedError
