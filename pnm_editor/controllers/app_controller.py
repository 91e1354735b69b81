"""Контроллер окна: связывает виджеты с контроллером команд.

SOLID:
- SRP: класс управляет связями между UI и `CommandController` (без логики обработки изображений).
- DIP: окно работает через `CommandController`, как и REPL; пути из диалогов
  передаются целиком, без разбора строки команды.
Clean Code:
- Обработчики компактны; после каждой команды UI перерисовывается из состояния сессии.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from tkinter import filedialog, TclError
from typing import Optional, Tuple

import customtkinter as ctk

from pnm_editor.controllers.command_controller import CommandController, CommandResult
from pnm_editor.services.codec_service import CodecService
from pnm_editor.ui.bottom_bar import BottomBar
from pnm_editor.ui.image_viewer import ImageViewer
from pnm_editor.ui.sidebar import Sidebar

logger = logging.getLogger(__name__)

_FILETYPES = (
    ("PNM images", "*.pgm *.ppm *.pnm"),
    ("All files", "*.*"),
)


@dataclass
class AppController:
    """Связывает элементы UI с сессией редактора.

    Ответственности:
    - Инициализация и бинд событий (UI -> контроллер).
    - Перевод действий пользователя в текстовые команды (`LOAD`, `SAVE`, ...).
    - Синхронизация превью и панели информации с сессией.
    """
    viewer: ImageViewer
    sidebar: Sidebar
    bottom: BottomBar
    window: ctk.CTk
    commands: CommandController

    _codec: CodecService = field(default_factory=CodecService)

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами."""
        self.sidebar.on_open_file = self._handle_open_file
        self.sidebar.on_save_file = self._handle_save_file
        self.sidebar.on_command = self._handle_command
        self.bottom.on_command = self._handle_command
        self.viewer.on_cursor_move = self._handle_cursor_move
        self.bottom.focus_entry()

    # ---- Handlers ----
    def _handle_open_file(self) -> None:
        try:
            file_path = filedialog.askopenfilename(title="Выберите изображение", filetypes=_FILETYPES)
        except TclError:
            logger.warning("Open dialog is not available")
            return
        if file_path:
            self._show(f"LOAD {file_path}", self.commands.load_file(file_path))

    def _handle_save_file(self, ascii: bool) -> None:
        try:
            file_path = filedialog.asksaveasfilename(title="Сохранить изображение", filetypes=_FILETYPES)
        except TclError:
            logger.warning("Save dialog is not available")
            return
        if file_path:
            line = f"SAVE {file_path} ascii" if ascii else f"SAVE {file_path}"
            self._show(line, self.commands.save_file(file_path, ascii=ascii))

    def _handle_command(self, line: str) -> None:
        self._show(line, self.commands.execute(line))

    def _handle_cursor_move(self, x: Optional[int], y: Optional[int], value: Optional[Tuple[int, ...]]) -> None:
        self.sidebar.update_cursor_info(x, y, value)

    # ---- Helpers ----
    def _show(self, line: str, result: CommandResult) -> None:
        self.sidebar.append_log([f"> {line}", *result.lines])
        self.bottom.set_status(result.lines[-1] if result.lines else "")
        self._refresh()
        if result.exit:
            self.window.destroy()

    def _refresh(self) -> None:
        session = self.commands.session
        buffer = session.buffer
        preview = self._codec.to_pil_image(buffer) if buffer is not None else None
        self.viewer.set_image(preview, session.selection)
        self.sidebar.set_image_info(buffer, session.selection)
