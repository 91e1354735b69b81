"""Контроллер команд: разбор строки, вызов сессии и тексты ответов.

SOLID:
- SRP: класс превращает строку команды в вызов `Session` и ответ для консоли;
  логики обработки изображений здесь нет.
- Один и тот же контроллер используют REPL и оконный интерфейс.
Clean Code:
- Обработчики компактны; исключения сессии переводятся в сообщения в одном месте.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Type, TypeVar

from pnm_editor.models.errors import (
    AllocationFailureError,
    ColorMismatchError,
    DecodeError,
    EditorError,
    InvalidArgumentsError,
    InvalidRangeError,
    NoImageError,
    SelectionNotSquareError,
)
from pnm_editor.services.session import Session

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"-?\d+")
_UNSIGNED = re.compile(r"\d+")

T = TypeVar("T")

# сообщения по умолчанию; обработчик может переопределить их для своей команды
_MESSAGES: Dict[Type[EditorError], str] = {
    NoImageError: "No image loaded",
    InvalidArgumentsError: "Invalid command",
    InvalidRangeError: "Invalid set of coordinates",
    SelectionNotSquareError: "The selection must be square",
    ColorMismatchError: "Black and white image needed",
    AllocationFailureError: "Not enough memory",
}

Messages = Dict[Type[EditorError], str]


@dataclass
class CommandResult:
    """Ответ на одну команду: строки для вывода и признак завершения."""
    lines: List[str] = field(default_factory=list)
    exit: bool = False


@dataclass
class CommandController:
    """Выполняет текстовые команды редактора над `Session`.

    Ответственности:
    - Токенизация строки и точный выбор команды по имени.
    - Чтение и запись файлов для LOAD/SAVE.
    - Перевод ошибок сессии в сообщения консоли.
    """
    session: Session = field(default_factory=Session)

    def __post_init__(self) -> None:
        self._handlers: Dict[str, Callable[[List[str]], CommandResult]] = {
            "LOAD": self._handle_load,
            "SELECT": self._handle_select,
            "HISTOGRAM": self._handle_histogram,
            "EQUALIZE": self._handle_equalize,
            "ROTATE": self._handle_rotate,
            "CROP": self._handle_crop,
            "APPLY": self._handle_apply,
            "SAVE": self._handle_save,
            "EXIT": self._handle_exit,
        }

    def execute(self, line: str) -> CommandResult:
        """Выполняет одну строку ввода. Пустые строки игнорируются."""
        tokens = line.split()
        if not tokens:
            return CommandResult()
        name, args = tokens[0], tokens[1:]
        handler = self._handlers.get(name)
        if handler is None:
            logger.debug("Unknown command %r", name)
            return _reply("Invalid command")

        # все команды, кроме LOAD и EXIT, требуют изображения
        if name not in ("LOAD", "EXIT") and not self.session.has_image():
            return _reply("No image loaded")
        return handler(args)

    # ---- File commands ----
    def load_file(self, path: str) -> CommandResult:
        """LOAD по готовому пути; путь может содержать пробелы (диалоги окна)."""
        try:
            raw = Path(path).read_bytes()
            self.session.load(raw)
        except (OSError, DecodeError) as exc:
            logger.warning("Failed to load %s: %s", path, exc)
            self.session.unload()
            return _reply(f"Failed to load {path}")
        except AllocationFailureError:
            return _reply(_MESSAGES[AllocationFailureError])
        return _reply(f"Loaded {path}")

    def save_file(self, path: str, ascii: bool = False) -> CommandResult:
        """SAVE по готовому пути в двоичном или текстовом (`ascii`) виде."""
        try:
            raw = self.session.save(ascii=ascii)
        except EditorError as exc:
            return self._fail("SAVE", exc)
        try:
            Path(path).write_bytes(raw)
        except OSError as exc:
            logger.error("Failed to save %s: %s", path, exc)
            return _reply(f"Failed to save {path}")
        logger.info("Saved %s (%d bytes)", path, len(raw))
        return _reply(f"Saved {path}")

    # ---- Handlers ----
    def _handle_load(self, args: List[str]) -> CommandResult:
        if len(args) != 1:
            return _reply("Invalid command")
        return self.load_file(args[0])

    def _handle_select(self, args: List[str]) -> CommandResult:
        if args == ["ALL"]:
            self.session.select_all()
            return _reply("Selected ALL")
        if len(args) != 4 or not all(_INTEGER.fullmatch(a) for a in args):
            return _reply("Invalid command")
        x1, y1, x2, y2 = (int(a) for a in args)
        return self._run(
            "SELECT",
            lambda: self.session.select(x1, y1, x2, y2),
            lambda selection: "Selected {} {} {} {}".format(*selection.as_tuple()),
            {InvalidArgumentsError: "Invalid set of coordinates"},
        )

    def _handle_histogram(self, args: List[str]) -> CommandResult:
        if len(args) != 2 or not all(_UNSIGNED.fullmatch(a) for a in args):
            return _reply("Invalid command")
        x_stars, y_bins = int(args[0]), int(args[1])
        try:
            return CommandResult(lines=self.session.histogram(x_stars, y_bins))
        except EditorError as exc:
            return self._fail("HISTOGRAM", exc)

    def _handle_equalize(self, args: List[str]) -> CommandResult:
        if args:
            return _reply("Invalid command")
        return self._run("EQUALIZE", self.session.equalize, lambda _: "Equalize done")

    def _handle_rotate(self, args: List[str]) -> CommandResult:
        if len(args) != 1 or not _INTEGER.fullmatch(args[0]):
            return _reply("Invalid command")
        angle = int(args[0])
        return self._run(
            "ROTATE",
            lambda: self.session.rotate(angle),
            lambda _: f"Rotated {angle}",
            {InvalidArgumentsError: "Unsupported rotation angle"},
        )

    def _handle_crop(self, args: List[str]) -> CommandResult:
        if args:
            return _reply("Invalid command")
        return self._run("CROP", self.session.crop, lambda _: "Image cropped")

    def _handle_apply(self, args: List[str]) -> CommandResult:
        if len(args) != 1:
            return _reply("Invalid command")
        name = args[0]
        return self._run(
            "APPLY",
            lambda: self.session.apply(name),
            lambda _: f"APPLY {name} done",
            {
                ColorMismatchError: "Easy, Charlie Chaplin",
                InvalidArgumentsError: "APPLY parameter invalid",
            },
        )

    def _handle_save(self, args: List[str]) -> CommandResult:
        if len(args) == 1:
            ascii = False
        elif len(args) == 2 and args[1] == "ascii":
            ascii = True
        else:
            return _reply("Invalid command")
        return self.save_file(args[0], ascii=ascii)

    def _handle_exit(self, args: List[str]) -> CommandResult:
        if args:
            return _reply("Invalid command")
        if not self.session.has_image():
            # без изображения EXIT не завершает работу
            return _reply("No image loaded")
        return CommandResult(exit=True)

    # ---- Helpers ----
    def _run(
        self,
        what: str,
        action: Callable[[], T],
        render: Callable[[T], str],
        overrides: Optional[Messages] = None,
    ) -> CommandResult:
        try:
            result = action()
        except EditorError as exc:
            return self._fail(what, exc, overrides)
        return _reply(render(result))

    def _fail(self, what: str, exc: EditorError, overrides: Optional[Messages] = None) -> CommandResult:
        logger.warning("%s failed: %s: %s", what, type(exc).__name__, exc)
        messages = dict(_MESSAGES)
        if overrides:
            messages.update(overrides)
        return _reply(messages.get(type(exc), "Invalid command"))


def _reply(*lines: str) -> CommandResult:
    return CommandResult(lines=list(lines))

