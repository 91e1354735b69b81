"""Модели данных для PNM-изображений.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости;
  преобразования возвращают новые объекты.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np


class PnmFormat(Enum):
    """Вариант PNM: магическое число и способ хранения отсчётов."""
    ASCII_GRAY = "P2"
    ASCII_COLOR = "P3"
    BINARY_GRAY = "P5"
    BINARY_COLOR = "P6"

    @property
    def magic(self) -> bytes:
        return self.value.encode("ascii")

    @property
    def is_binary(self) -> bool:
        return self in (PnmFormat.BINARY_GRAY, PnmFormat.BINARY_COLOR)

    @property
    def channels(self) -> int:
        return 3 if self in (PnmFormat.ASCII_COLOR, PnmFormat.BINARY_COLOR) else 1

    @classmethod
    def for_planes(cls, channels: int, ascii: bool) -> "PnmFormat":
        """Выбирает P2/P5 для одного канала и P3/P6 для трёх."""
        if channels == 1:
            return cls.ASCII_GRAY if ascii else cls.BINARY_GRAY
        return cls.ASCII_COLOR if ascii else cls.BINARY_COLOR


@dataclass(frozen=True)
class PixelBuffer:
    """Декодированное изображение.

    Fields:
        format: Вариант PNM, из которого изображение было прочитано.
        max_color: Максимальное значение отсчёта (1..255).
        planes: Массив uint8 формы (channels, height, width);
            1 канал для серого, 3 (R, G, B) для цветного.
    """
    format: PnmFormat
    max_color: int
    planes: np.ndarray

    @property
    def channels(self) -> int:
        return int(self.planes.shape[0])

    @property
    def height(self) -> int:
        return int(self.planes.shape[1])

    @property
    def width(self) -> int:
        return int(self.planes.shape[2])

    @property
    def is_color(self) -> bool:
        return self.channels == 3

    def with_planes(self, planes: np.ndarray) -> "PixelBuffer":
        """Новый буфер с теми же метаданными и другими плоскостями."""
        return PixelBuffer(format=self.format, max_color=self.max_color, planes=planes)


@dataclass(frozen=True)
class Selection:
    """Прямоугольник (x1, y1)-(x2, y2), правая и нижняя границы не включены."""
    x1: int
    y1: int
    x2: int
    y2: int

    @classmethod
    def whole(cls, buffer: PixelBuffer) -> "Selection":
        return cls(0, 0, buffer.width, buffer.height)

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1

    @property
    def is_square(self) -> bool:
        return self.width == self.height

    def covers(self, buffer: PixelBuffer) -> bool:
        """True, если выделено всё изображение."""
        return self == Selection.whole(buffer)

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return self.x1, self.y1, self.x2, self.y2
