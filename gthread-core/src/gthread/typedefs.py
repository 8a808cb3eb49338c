from collections.abc import Callable, Generator
from typing import Any

type TaskID = int

"""Node style callback, called as callback(error, result)."""
type Callback[T] = Callable[[BaseException | None, T | None], None]

"""The callback handed to a routine, which resumes it."""
type Resume = Callback[Any]

"""Mutable object shared by the routines it is given to."""
type Context = Any

"""The generator produced by calling a routine."""
type Program[T] = Generator[Any, Any, T]

"""A generator function, called as routine(resume, context)."""
type Routine[T] = Callable[[Resume, Context], Program[T]]
