"""Support library imported by generated modules.

Generated context classes derive from :class:`ErrorContext`, kinds from
:class:`ErrorKind` and wrapper exceptions from :class:`ContextError`. The
helpers at the bottom raise context errors from ordinary control flow::

    ensure(port > 0, InvalidPort(port))
    config = context(load(path), lambda: Io())

    with with_context(lambda err: ReadConfig(path)):
        data = path.read_text()
"""

from __future__ import annotations

import traceback
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, ClassVar, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Backtrace:
    """Stack snapshot taken when a :class:`ContextError` is created."""

    frames: tuple[traceback.FrameSummary, ...] = ()

    @classmethod
    def capture(cls, skip: int = 0) -> Backtrace:
        """Snapshot the caller's stack, dropping ``skip`` innermost frames besides this one."""
        stack = traceback.extract_stack()[: -(skip + 1)]
        return cls(tuple(stack))

    def __len__(self) -> int:
        return len(self.frames)

    def __iter__(self) -> Iterator[traceback.FrameSummary]:
        return iter(self.frames)

    def __str__(self) -> str:
        return "".join(traceback.format_list(list(self.frames)))


class ErrorContext:
    """Base of generated context classes; knows its wrapper exception type."""

    error_type: ClassVar[type[ContextError]]

    def into_error(self, cause: BaseException | None = None) -> ContextError:
        return type(self).error_type(self, cause)


class ErrorKind:
    """Base of generated kind classes."""

    def __str__(self) -> str:
        return repr(self)


class ContextError(Exception):
    """An exception wrapping a context value, an optional cause and a backtrace."""

    conversions: ClassVar[tuple[tuple[type[BaseException], Callable[[Any], ContextError]], ...]] = ()

    def __init__(self, context: ErrorContext, cause: BaseException | None = None) -> None:
        super().__init__(context)
        self._context = context
        self._cause = cause
        self._backtrace = Backtrace.capture(skip=1)
        self.__cause__ = cause

    @classmethod
    def from_context(cls, context: ErrorContext) -> ContextError:
        return cls(context)

    @property
    def context(self) -> ErrorContext:
        return self._context

    @property
    def cause(self) -> BaseException | None:
        return self._cause

    @property
    def backtrace(self) -> Backtrace:
        return self._backtrace

    def kind(self) -> ErrorKind:
        return self._context.kind()  # type: ignore[attr-defined]

    @classmethod
    def convert(cls, err: BaseException) -> ContextError | None:
        """Wrap ``err`` using the first registered conversion whose source matches."""
        for source, convert in cls.conversions:
            if isinstance(err, source):
                return convert(err)
        return None

    @classmethod
    @contextmanager
    def converting(cls) -> Iterator[None]:
        """Re-raise exceptions that have a registered conversion as this error."""
        try:
            yield
        except Exception as err:
            converted = cls.convert(err)
            if converted is None:
                raise
            raise converted from err

    def __str__(self) -> str:
        if self._cause is None:
            return str(self._context)
        return f"{self._context}\n---- source ----\n{self._cause}"

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}({self._context!r}, cause={self._cause!r})"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def fail(ctx: ErrorContext) -> None:
    """Raise ``ctx`` as its wrapper error."""
    raise ctx.into_error()


def ensure(test: bool, ctx: ErrorContext) -> None:
    """Raise ``ctx`` as its wrapper error unless ``test`` holds."""
    if not test:
        fail(ctx)


def context(value: T | None | BaseException, factory: Callable[[], ErrorContext]) -> T:
    """Return ``value``, or raise the context built by ``factory``.

    ``None`` raises without a cause; an exception instance becomes the cause.
    """
    if value is None:
        raise factory().into_error()
    if isinstance(value, BaseException):
        raise factory().into_error(value) from value
    return value


@contextmanager
def with_context(factory: Callable[[Exception], ErrorContext]) -> Iterator[None]:
    """Wrap any exception raised in the block in the context built by ``factory``."""
    try:
        yield
    except Exception as err:
        raise factory(err).into_error(err) from err
