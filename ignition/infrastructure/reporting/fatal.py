"""
Process-wide fatal exception handler registry.

Only one handler for unrecoverable errors may be installed per process, no
matter how many reporters enable reporting or how often. The registry owns
that guard; the trap that actually hooks the interpreter is injectable.
"""

import asyncio
import logging
import sys
import threading
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

FatalHandler = Callable[[BaseException], None]
Trap = Callable[[FatalHandler], None]


def install_process_hooks(handler: FatalHandler) -> None:
    """
    Route uncaught exceptions of the main thread and other threads to handler.

    Only Exception subclasses reach the handler. KeyboardInterrupt, SystemExit
    and other BaseExceptions are passed on to the hooks that were installed
    before.
    """
    previous_excepthook = sys.excepthook
    previous_threading_excepthook = threading.excepthook

    def _excepthook(exc_type: Any, exc_value: BaseException, exc_tb: Any) -> None:
        if not issubclass(exc_type, Exception):
            previous_excepthook(exc_type, exc_value, exc_tb)
            return
        handler(exc_value)

    def _threading_excepthook(args: Any) -> None:
        if not issubclass(args.exc_type, Exception):
            previous_threading_excepthook(args)
            return
        handler(args.exc_value)

    sys.excepthook = _excepthook
    threading.excepthook = _threading_excepthook


def install_loop_hook(handler: FatalHandler,
                      loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
    """
    Route exceptions escaping event loop callbacks and tasks to handler.

    Contexts without an Exception fall through to the loop's default handler.

    Args:
        handler: Fatal handler
        loop: Loop to hook, the running loop when omitted
    """
    target = loop or asyncio.get_running_loop()

    def _exception_handler(hooked: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        error = context.get('exception')
        if not isinstance(error, Exception):
            hooked.default_exception_handler(context)
            return
        handler(error)

    target.set_exception_handler(_exception_handler)


class FatalHandlerRegistry:
    """Install-once guard for the process-level fatal exception handler."""

    def __init__(self, trap: Optional[Trap] = None) -> None:
        self._trap = trap or install_process_hooks
        self._lock = threading.Lock()
        self._handler: Optional[FatalHandler] = None

    @property
    def installed(self) -> bool:
        return self._handler is not None

    @property
    def handler(self) -> Optional[FatalHandler]:
        return self._handler

    def install(self, handler: FatalHandler) -> bool:
        """
        Install handler unless one is already installed.

        Returns:
            True if this call installed the handler
        """
        with self._lock:
            if self._handler is not None:
                return False
            self._trap(handler)
            self._handler = handler

        logger.debug("Fatal exception handler installed")
        return True


_process_registry = FatalHandlerRegistry()


def get_process_registry() -> FatalHandlerRegistry:
    """Get the registry shared by every reporter in this process."""
    return _process_registry
