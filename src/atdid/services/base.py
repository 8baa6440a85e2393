"""BaseService — foundation for atdid services.

Every service receives the resolved :class:`AtdidSettings` at construction
time and reads its policy (accepted methods, fail-fast) from there.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from atdid.config.settings import AtdidSettings


class BaseService:
    """Base for service-layer classes.

    Usage::

        class DidService(BaseService):
            def inspect(self, candidate: str) -> ServiceResult:
                allowed = self._settings.check.methods
                ...
    """

    def __init__(self, settings: AtdidSettings) -> None:
        self._settings = settings

    @property
    def settings(self) -> AtdidSettings:
        return self._settings
