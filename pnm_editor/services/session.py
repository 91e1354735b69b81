"""Сессия редактора: текущее изображение, выделение и API команд.

Принципы:
- SRP: хранит состояние и проверяет предусловия; алгоритмы делегирует
  `CodecService` и `ProcessService`.
- Все проверки выполняются до изменения состояния: при ошибке буфер и
  выделение остаются прежними.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, TypeVar

from pnm_editor.models.errors import (
    AllocationFailureError,
    InvalidArgumentsError,
    InvalidRangeError,
    NoImageError,
)
from pnm_editor.models.image_model import PixelBuffer, Selection
from pnm_editor.services.codec_service import CodecService
from pnm_editor.services.process_service import ProcessService

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Session:
    """Одно изображение в памяти и активное выделение над ним."""

    def __init__(
        self,
        codec: Optional[CodecService] = None,
        processor: Optional[ProcessService] = None,
        histogram_marker: str = "*",
    ) -> None:
        self._codec = codec or CodecService()
        self._processor = processor or ProcessService()
        self._histogram_marker = histogram_marker
        self._buffer: Optional[PixelBuffer] = None
        self._selection: Optional[Selection] = None

    # ---- State ----
    @property
    def buffer(self) -> Optional[PixelBuffer]:
        return self._buffer

    @property
    def selection(self) -> Optional[Selection]:
        return self._selection

    def has_image(self) -> bool:
        return self._buffer is not None

    def unload(self) -> None:
        """Сбрасывает текущее изображение (если есть)."""
        self._buffer = None
        self._selection = None

    # ---- Commands ----
    def load(self, raw: bytes) -> PixelBuffer:
        """Декодирует байты и делает результат текущим изображением.

        При `DecodeError` прежнее изображение не трогается.
        """
        buffer = self._guard(lambda: self._codec.decode(raw))
        self._install(buffer, Selection.whole(buffer))
        logger.info("Loaded %s %dx%d", buffer.format.value, buffer.width, buffer.height)
        return buffer

    def select(self, x1: int, y1: int, x2: int, y2: int) -> Selection:
        """Задаёт выделение; пары x и y упорядочиваются независимо.

        Raises:
            NoImageError: изображение не загружено.
            InvalidArgumentsError: координата не является неотрицательным целым.
            InvalidRangeError: пустое выделение или выход за границы изображения.
        """
        buffer = self._require_image()
        coords = (x1, y1, x2, y2)
        if any(isinstance(c, bool) or not isinstance(c, int) or c < 0 for c in coords):
            raise InvalidArgumentsError(f"Координаты должны быть неотрицательными целыми: {coords!r}")

        x1, x2 = min(x1, x2), max(x1, x2)
        y1, y2 = min(y1, y2), max(y1, y2)
        if x1 == x2 or y1 == y2 or x2 > buffer.width or y2 > buffer.height:
            raise InvalidRangeError(
                f"Выделение {x1} {y1} {x2} {y2} недопустимо для {buffer.width}x{buffer.height}"
            )
        self._selection = Selection(x1, y1, x2, y2)
        return self._selection

    def select_all(self) -> Selection:
        buffer = self._require_image()
        self._selection = Selection.whole(buffer)
        return self._selection

    def crop(self) -> PixelBuffer:
        buffer = self._require_image()
        cropped = self._guard(lambda: self._processor.crop(buffer, self._selection))
        self._install(cropped, Selection.whole(cropped))
        return cropped

    def rotate(self, angle: int) -> PixelBuffer:
        buffer = self._require_image()
        rotated, selection = self._guard(lambda: self._processor.rotate(buffer, self._selection, angle))
        self._install(rotated, selection)
        return rotated

    def apply(self, filter_name: str) -> PixelBuffer:
        buffer = self._require_image()
        filtered = self._guard(lambda: self._processor.apply_filter(buffer, self._selection, filter_name))
        self._install(filtered, self._selection)
        return filtered

    def histogram(self, x_stars: int, y_bins: int) -> List[str]:
        """Строки гистограммы: `<n>\\t|\\t` и n маркеров."""
        buffer = self._require_image()
        return self._guard(lambda: self._render_histogram(self._processor.histogram(buffer, x_stars, y_bins)))

    def equalize(self) -> PixelBuffer:
        buffer = self._require_image()
        equalized = self._guard(lambda: self._processor.equalize(buffer))
        self._install(equalized, self._selection)
        return equalized

    def save(self, ascii: bool = False) -> bytes:
        buffer = self._require_image()
        return self._guard(lambda: self._codec.encode(buffer, ascii=ascii))

    # ---- Helpers ----
    def _render_histogram(self, counts: List[int]) -> List[str]:
        return [f"{n}\t|\t{self._histogram_marker * n}" for n in counts]

    def _require_image(self) -> PixelBuffer:
        if self._buffer is None:
            raise NoImageError("Изображение не загружено")
        return self._buffer

    def _install(self, buffer: PixelBuffer, selection: Optional[Selection]) -> None:
        self._buffer = buffer
        self._selection = selection

    def _guard(self, operation: Callable[[], T]) -> T:
        try:
            return operation()
        except (MemoryError, OverflowError) as exc:
            # OverflowError: результат не помещается в адресуемый размер
            logger.error("Out of memory while executing command: %r", exc)
            raise AllocationFailureError("Недостаточно памяти") from exc
