"""Типизированные ошибки редактора.

Принципы:
- SRP: только иерархия исключений, без текстов для консоли.
- Тексты сообщений формирует контроллер команд.
"""
from __future__ import annotations


class EditorError(Exception):
    """Базовая ошибка команды редактора: сессия остаётся в прежнем состоянии."""


class NoImageError(EditorError):
    """Команде нужно загруженное изображение, а его нет."""


class DecodeError(EditorError):
    """Входные байты не являются корректным PNM (P2/P3/P5/P6)."""


class InvalidArgumentsError(EditorError):
    """Параметры команды не соответствуют грамматике."""


class InvalidRangeError(EditorError):
    """Координаты выделения корректны по форме, но вне допустимого диапазона."""


class SelectionNotSquareError(EditorError):
    """Поворот части изображения требует квадратного выделения."""


class ColorMismatchError(EditorError):
    """Операция доступна только для серого или только для цветного изображения."""


class AllocationFailureError(EditorError):
    """Не хватило памяти; текущее изображение не изменено."""
