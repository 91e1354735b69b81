"""Чтение и запись PNM (P2/P3/P5/P6) и подготовка превью для Pillow.

Принципы:
- SRP: класс отвечает только за преобразование байтов в `PixelBuffer` и обратно.
- Декодирование либо возвращает полностью заполненный буфер, либо бросает
  `DecodeError`; частично прочитанных изображений не бывает.
"""
from __future__ import annotations

import logging
from typing import List

import numpy as np
from PIL import Image

from pnm_editor.models.errors import DecodeError
from pnm_editor.models.image_model import PixelBuffer, PnmFormat

logger = logging.getLogger(__name__)

_WHITESPACE = b" \t\n\r\v\f"
_COMMENT = ord("#")
_MAGICS = {fmt.magic: fmt for fmt in PnmFormat}


class _HeaderReader:
    """Побайтовый разбор заголовка: пробелы разделяют токены, `#` до конца строки считается комментарием."""

    def __init__(self, data: bytes, pos: int = 0) -> None:
        self.data = data
        self.pos = pos

    def skip_separators(self) -> None:
        data = self.data
        while self.pos < len(data):
            byte = data[self.pos]
            if byte in _WHITESPACE:
                self.pos += 1
            elif byte == _COMMENT:
                end = data.find(b"\n", self.pos)
                self.pos = len(data) if end < 0 else end + 1
            else:
                return

    def next_token(self) -> bytes:
        self.skip_separators()
        start = self.pos
        data = self.data
        while self.pos < len(data) and data[self.pos] not in _WHITESPACE and data[self.pos] != _COMMENT:
            self.pos += 1
        return data[start:self.pos]

    def read_positive_int(self, name: str) -> int:
        token = self.next_token()
        if not token:
            raise DecodeError(f"В заголовке нет значения {name}")
        if not token.isdigit():
            raise DecodeError(f"{name} должно быть числом, получено {token!r}")
        value = int(token)
        if value <= 0:
            raise DecodeError(f"{name} должно быть положительным, получено {value}")
        return value


class CodecService:
    def decode(self, raw: bytes) -> PixelBuffer:
        """Декодирует PNM из байтов.

        Args:
            raw: Полное содержимое файла.

        Returns:
            `PixelBuffer` с плоскостями формы (channels, height, width).

        Raises:
            DecodeError: неизвестное магическое число, битый заголовок или
                недостаточно данных пикселей.
        """
        fmt = _MAGICS.get(bytes(raw[:2]))
        if fmt is None:
            raise DecodeError(f"Неизвестный формат: {bytes(raw[:2])!r}")

        reader = _HeaderReader(raw, pos=2)
        width = reader.read_positive_int("width")
        height = reader.read_positive_int("height")
        max_color = reader.read_positive_int("max_color")
        if max_color > 255:
            raise DecodeError(f"max_color {max_color} больше 255 не поддерживается")

        count = width * height * fmt.channels
        if fmt.is_binary:
            # ровно один разделитель после max_color; комментарий заканчивается своим переводом строки
            if reader.pos < len(raw) and raw[reader.pos] == _COMMENT:
                end = raw.find(b"\n", reader.pos)
                reader.pos = len(raw) if end < 0 else end + 1
            elif reader.pos < len(raw) and raw[reader.pos] in _WHITESPACE:
                reader.pos += 1
            samples = self._read_binary(raw, reader.pos, count)
        else:
            reader.skip_separators()
            samples = self._read_ascii(raw, reader.pos, count, max_color)

        planes = np.ascontiguousarray(samples.reshape(height, width, fmt.channels).transpose(2, 0, 1))
        logger.debug("Decoded %s %dx%d max=%d", fmt.value, width, height, max_color)
        return PixelBuffer(format=fmt, max_color=max_color, planes=planes)

    def encode(self, buffer: PixelBuffer, ascii: bool = False) -> bytes:
        """Кодирует буфер: P2/P3 при `ascii=True`, иначе P5/P6."""
        fmt = PnmFormat.for_planes(buffer.channels, ascii)
        header = f"{fmt.value}\n{buffer.width} {buffer.height}\n{buffer.max_color}\n".encode("ascii")
        # (channels, h, w) -> строки с чередованием каналов R, G, B
        rows = buffer.planes.transpose(1, 2, 0).reshape(buffer.height, buffer.width * buffer.channels)

        if ascii:
            lines: List[str] = ["".join(f"{int(v)} " for v in row) + "\n" for row in rows]
            body = "".join(lines).encode("ascii")
        else:
            body = rows.astype(np.uint8).tobytes()
        logger.debug("Encoded %s %dx%d (%d bytes)", fmt.value, buffer.width, buffer.height, len(header) + len(body))
        return header + body

    def to_pil_image(self, buffer: PixelBuffer) -> Image.Image:
        """Превью для виджетов: режим "L" для серого, "RGB" для цветного."""
        if buffer.is_color:
            return Image.fromarray(np.ascontiguousarray(buffer.planes.transpose(1, 2, 0)))
        return Image.fromarray(np.ascontiguousarray(buffer.planes[0]))

    # ---------- Вспомогательные функции ----------
    def _read_binary(self, raw: bytes, offset: int, count: int) -> np.ndarray:
        data = raw[offset:offset + count]
        if len(data) < count:
            raise DecodeError(f"Ожидалось {count} байт пикселей, найдено {len(data)}")
        return np.frombuffer(bytes(data), dtype=np.uint8).copy()

    def _read_ascii(self, raw: bytes, offset: int, count: int, max_color: int) -> np.ndarray:
        """Текстовые отсчёты. Значения выше max_color не сохраняются как есть,
        а обрезаются до max_color; двоичные отсчёты читаются без обрезки.
        """
        tokens = raw[offset:].split(maxsplit=count)[:count]
        if len(tokens) < count:
            raise DecodeError(f"Ожидалось {count} значений пикселей, найдено {len(tokens)}")
        values: List[int] = []
        for token in tokens:
            if not token.isdigit():
                raise DecodeError(f"Некорректное значение пикселя: {token!r}")
            values.append(min(int(token), max_color))
        return np.array(values, dtype=np.uint8)

