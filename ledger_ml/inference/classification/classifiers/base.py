from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..context import ClassificationContext
    from ..result import StageMatch


class Stage(Protocol):
    """A stage of the cascade: a confident match, or None to fall through."""

    name: str

    async def classify(self, ctx: ClassificationContext) -> StageMatch | None: ...
