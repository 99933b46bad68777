# -*- encoding: utf-8 -*-
# @File   : abstract.py
# @Time   : 2026/10/18 14:02:11
# @Author : Kariko Lin

from abc import ABCMeta, abstractmethod
from os import PathLike, fspath
from typing import Generic, TypeVar

T = TypeVar('T')


class FileHandler(Generic[T], metaclass=ABCMeta):
    """Something bound to exactly one file path."""

    def __init__(self, filename: str | PathLike[str]) -> None:
        self._fn = fspath(filename)

    @property
    def filename(self) -> str:
        return self._fn

    @abstractmethod
    def read(self) -> T:
        raise NotImplementedError

    @abstractmethod
    def write(self, instance: T) -> bool | None:
        raise NotImplementedError

    def __str__(self) -> str:
        return self._fn
