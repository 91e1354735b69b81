"""Геометрические и яркостные преобразования `PixelBuffer`.

Принципы:
- SRP: только алгоритмы; сервис не хранит состояние и не знает о сессии.
- Буфер никогда не меняется на месте: каждый метод возвращает новый объект,
  поэтому ошибка валидации не оставляет изображение в промежуточном виде.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Tuple

import numpy as np

from pnm_editor.models.errors import (
    ColorMismatchError,
    InvalidArgumentsError,
    SelectionNotSquareError,
)
from pnm_editor.models.image_model import PixelBuffer, Selection

logger = logging.getLogger(__name__)

# имя фильтра -> (ядро 3x3, делитель)
KERNELS: Dict[str, Tuple[Tuple[Tuple[int, ...], ...], int]] = {
    "EDGE": (((-1, -1, -1), (-1, 8, -1), (-1, -1, -1)), 1),
    "SHARPEN": (((0, -1, 0), (-1, 5, -1), (0, -1, 0)), 1),
    "BLUR": (((1, 1, 1), (1, 1, 1), (1, 1, 1)), 9),
    "GAUSSIAN_BLUR": (((1, 2, 1), (2, 4, 2), (1, 2, 1)), 16),
}

ROTATION_ANGLES = tuple(range(-360, 361, 90))


def _round_half_up(values: np.ndarray) -> np.ndarray:
    """Округление к ближайшему, половины от нуля (значения уже неотрицательны)."""
    return np.floor(values + 0.5)


class ProcessService:
    # ---------- Обрезка ----------
    def crop(self, buffer: PixelBuffer, selection: Selection) -> PixelBuffer:
        """Оставляет только пиксели внутри выделения."""
        planes = buffer.planes[:, selection.y1:selection.y2, selection.x1:selection.x2].copy()
        return buffer.with_planes(planes)

    # ---------- Поворот ----------
    def rotate(self, buffer: PixelBuffer, selection: Selection, angle: int) -> Tuple[PixelBuffer, Selection]:
        """Поворот на кратный 90 угол в [-360, 360].

        90 и -270 поворачивают по часовой стрелке, -90 и 270 против.
        180 выполняется как два последовательных поворота на 90.
        Если выделено всё изображение, ширина и высота меняются местами
        и выделение сбрасывается на новое изображение целиком; иначе
        выделение должно быть квадратным и поворачивается на месте.

        Returns:
            Пара (новый буфер, новое выделение).

        Raises:
            InvalidArgumentsError: угол не кратен 90 или вне диапазона.
            SelectionNotSquareError: частичное выделение не квадратное.
        """
        if isinstance(angle, bool) or not isinstance(angle, int) or angle not in ROTATION_ANGLES:
            raise InvalidArgumentsError(f"Неподдерживаемый угол поворота: {angle!r}")
        if angle in (0, 360, -360):
            return buffer, selection

        whole = selection.covers(buffer)
        if not whole and not selection.is_square:
            raise SelectionNotSquareError(
                f"Выделение {selection.width}x{selection.height} не квадратное"
            )

        if angle in (180, -180):
            steps = [True, True]
        else:
            steps = [angle in (90, -270)]

        if whole:
            planes = buffer.planes
            for clockwise in steps:
                planes = self._rotate_block(planes, clockwise)
            rotated = buffer.with_planes(np.ascontiguousarray(planes))
            return rotated, Selection.whole(rotated)

        planes = buffer.planes.copy()
        window = (slice(None), slice(selection.y1, selection.y2), slice(selection.x1, selection.x2))
        block = planes[window].copy()
        for clockwise in steps:
            block = self._rotate_block(block, clockwise)
        planes[window] = block
        return buffer.with_planes(planes), selection

    def _rotate_block(self, block: np.ndarray, clockwise: bool) -> np.ndarray:
        """Один поворот на 90 для массива (channels, h, w).

        По часовой: строка r результата это столбец r исходника, прочитанный снизу вверх
        (new[r][c] = old[h-1-c][r]). Против: строка r это столбец w-1-r сверху вниз
        (new[r][c] = old[c][w-1-r]).
        """
        return np.rot90(block, k=-1 if clockwise else 1, axes=(1, 2))

    # ---------- Фильтры 3x3 ----------
    def apply_filter(self, buffer: PixelBuffer, selection: Selection, name: str) -> PixelBuffer:
        """Свёртка 3x3 по каждому каналу цветного изображения.

        Центрами служат пиксели выделения, вся окрестность которых лежит внутри
        изображения: граница выделения сдвигается внутрь на один пиксель только
        там, где она совпадает с краем изображения. Соседи читаются из снимка до
        применения и могут лежать вне выделения.
        """
        if not buffer.is_color:
            raise ColorMismatchError("Фильтры применяются только к цветным изображениям")
        if name not in KERNELS:
            raise InvalidArgumentsError(f"Неизвестный фильтр: {name!r}")
        kernel, divisor = KERNELS[name]

        x_lo, x_hi = max(selection.x1, 1), min(selection.x2, buffer.width - 1)
        y_lo, y_hi = max(selection.y1, 1), min(selection.y2, buffer.height - 1)
        planes = buffer.planes.copy()
        if x_lo >= x_hi or y_lo >= y_hi:
            logger.debug("Filter %s: no pixel with a full neighbourhood in %s", name, selection)
            return buffer.with_planes(planes)

        src = buffer.planes.astype(np.int64)
        acc = np.zeros((buffer.channels, y_hi - y_lo, x_hi - x_lo), dtype=np.int64)
        for dy, kernel_row in enumerate(kernel):
            for dx, weight in enumerate(kernel_row):
                if weight:
                    acc += weight * src[:, y_lo - 1 + dy:y_hi - 1 + dy, x_lo - 1 + dx:x_hi - 1 + dx]

        values = np.clip(acc / float(divisor), 0.0, 255.0)
        planes[:, y_lo:y_hi, x_lo:x_hi] = _round_half_up(values).astype(np.uint8)
        return buffer.with_planes(planes)

    # ---------- Гистограмма ----------
    def frequencies(self, buffer: PixelBuffer) -> np.ndarray:
        """Частоты 256 значений яркости по всему изображению."""
        return np.bincount(buffer.planes[0].ravel(), minlength=256).astype(np.int64)

    def histogram(self, buffer: PixelBuffer, x_stars: int, y_bins: int) -> List[int]:
        """Число «звёзд» для каждой из `y_bins` групп значений.

        Группа i объединяет 256 / y_bins соседних значений; число звёзд равно
        floor(частота группы / максимальная частота группы * x_stars).
        """
        if not _is_non_negative_int(x_stars):
            raise InvalidArgumentsError(f"Число звёзд должно быть неотрицательным целым: {x_stars!r}")
        if not _is_non_negative_int(y_bins) or not 2 <= y_bins <= 256 or y_bins & (y_bins - 1):
            raise InvalidArgumentsError(f"Число интервалов должно быть степенью двойки в [2, 256]: {y_bins!r}")
        if buffer.is_color:
            raise ColorMismatchError("Гистограмма строится только для серых изображений")

        groups = self.frequencies(buffer).reshape(y_bins, 256 // y_bins).sum(axis=1)
        peak = groups.max()
        stars = np.floor(groups / peak * float(x_stars))
        return [int(n) for n in stars]

    # ---------- Эквализация ----------
    def equalize(self, buffer: PixelBuffer) -> PixelBuffer:
        """Эквализация гистограммы серого изображения (выделение не учитывается)."""
        if buffer.is_color:
            raise ColorMismatchError("Эквализация доступна только для серых изображений")
        area = buffer.width * buffer.height
        cumulative = np.cumsum(self.frequencies(buffer))
        mapping = _round_half_up(np.clip(255.0 * (1.0 / area) * cumulative, 0.0, 255.0)).astype(np.uint8)
        return buffer.with_planes(mapping[buffer.planes])


def _is_non_negative_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0
