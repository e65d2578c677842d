# ewsplumbing/utils/scope_guard.py
"""
Run a cleanup action exactly once when a block is left.

OnScopeExit is used where something must happen on every way out of a
block (normal completion, early return or an exception) and where a failure
of that cleanup must never mask the error that is already propagating.
"""

import logging
from collections.abc import Callable
from types import TracebackType
from typing import NoReturn

logger: logging.Logger = logging.getLogger(__name__)


class OnScopeExit:
    """
    Context manager that invokes `action` once when its block exits.

    Exceptions raised by the action are logged and swallowed. Calling
    release() before the block ends disarms the guard.

    Example:
        >>> with OnScopeExit(response.close):
        ...     for chunk in response.iter_content():
        ...         consume(chunk)
    """

    __slots__ = ('_action',)

    def __init__(self, action: Callable[[], object]) -> None:
        if not callable(action):
            raise TypeError(f'OnScopeExit needs a callable, got {type(action).__name__}')

        self._action: Callable[[], object] | None = action

    def __enter__(self) -> 'OnScopeExit':
        return self

    def __exit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_value: BaseException | None,
        _traceback: TracebackType | None,
    ) -> None:
        self.run()

    def run(self) -> None:
        """Invoke the pending action now, unless it already ran or was released."""
        action = self._action
        if action is None:
            return

        self._action = None
        try:
            action()
        except Exception:
            logger.exception('Scope exit action %r failed; error suppressed', action)

    def release(self) -> None:
        """Disarm the guard so the action is never invoked."""
        self._action = None

    @property
    def active(self) -> bool:
        """True while the action is still pending."""
        return self._action is not None

    def __copy__(self) -> NoReturn:
        raise TypeError('OnScopeExit cannot be copied')

    def __deepcopy__(self, _memo: dict[int, object]) -> NoReturn:
        raise TypeError('OnScopeExit cannot be copied')
