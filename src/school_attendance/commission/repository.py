from __future__ import annotations

from typing import Protocol, Sequence


class AssignmentRepository(Protocol):
    def class_ids_for_teacher(self, teacher_id: str) -> Sequence[str]:
        raise NotImplementedError

    def replace_for_teacher(self, teacher_id: str, class_ids: Sequence[str]) -> None:
        """Swap the teacher's whole assignment set in a single transaction."""

        raise NotImplementedError
