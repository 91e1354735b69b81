"""Боковая панель: файл, информация об изображении, быстрые команды и журнал.

Принципы:
- SRP: управляет только UI, не содержит алгоритмов.
- ISP: события наружу через `on_*`; кнопки лишь формируют текст команды.
"""
from __future__ import annotations

from typing import Callable, Iterable, Optional, Tuple

import customtkinter as ctk

from pnm_editor.models.image_model import PixelBuffer, Selection
from pnm_editor.services.process_service import KERNELS


def _value_to_hex(value: Tuple[int, ...]) -> str:
    """Отсчёт пикселя в HEX (серый повторяется в трёх каналах)."""
    r, g, b = value if len(value) == 3 else (value[0],) * 3
    return f"#{r:02X}{g:02X}{b:02X}"


class Sidebar(ctk.CTkFrame):
    """Панель инструментов с блоками: файл, информация, курсор, команды, журнал."""
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, width=280, **kwargs)

        self.grid_columnconfigure(0, weight=1)

        # Callbacks
        self.on_open_file: Optional[Callable[[], None]] = None
        self.on_save_file: Optional[Callable[[bool], None]] = None
        self.on_command: Optional[Callable[[str], None]] = None

        # File
        self._title = ctk.CTkLabel(self, text="Файл", font=ctk.CTkFont(size=16, weight="bold"))
        self._title.grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")

        self._open_btn = ctk.CTkButton(self, text="Открыть PNM…", command=self._emit_open_file)
        self._open_btn.grid(row=1, column=0, padx=8, pady=(0, 4), sticky="ew")
        self._save_btn = ctk.CTkButton(self, text="Сохранить…", command=self._emit_save_file)
        self._save_btn.grid(row=2, column=0, padx=8, pady=(0, 4), sticky="ew")
        self._ascii_var = ctk.BooleanVar(value=False)
        self._ascii_check = ctk.CTkCheckBox(self, text="Текстовый формат (ascii)", variable=self._ascii_var)
        self._ascii_check.grid(row=3, column=0, padx=8, pady=(0, 12), sticky="w")

        # Info section
        self._info_title = ctk.CTkLabel(self, text="Информация", font=ctk.CTkFont(size=16, weight="bold"))
        self._info_title.grid(row=4, column=0, padx=8, pady=(8, 4), sticky="w")

        self._format_val = ctk.StringVar(value="Нет изображения")
        self._dims_val = ctk.StringVar(value="—")
        self._selection_val = ctk.StringVar(value="—")
        ctk.CTkLabel(self, textvariable=self._format_val, anchor="w").grid(row=5, column=0, padx=8, sticky="ew")
        ctk.CTkLabel(self, textvariable=self._dims_val, anchor="w").grid(row=6, column=0, padx=8, sticky="ew")
        ctk.CTkLabel(self, textvariable=self._selection_val, anchor="w").grid(
            row=7, column=0, padx=8, pady=(0, 10), sticky="ew"
        )

        # Cursor section
        self._cursor_val = ctk.StringVar(value="—")
        ctk.CTkLabel(self, textvariable=self._cursor_val, anchor="w").grid(
            row=8, column=0, padx=8, pady=(0, 10), sticky="ew"
        )

        # Quick commands
        self._cmd_title = ctk.CTkLabel(self, text="Команды", font=ctk.CTkFont(size=16, weight="bold"))
        self._cmd_title.grid(row=9, column=0, padx=8, pady=(8, 4), sticky="w")
        self._buttons = ctk.CTkFrame(self, fg_color="transparent")
        self._buttons.grid(row=10, column=0, padx=8, pady=(0, 8), sticky="ew")
        self._buttons.grid_columnconfigure((0, 1), weight=1)
        quick = ["SELECT ALL", "CROP", "ROTATE 90", "ROTATE -90", "EQUALIZE"]
        quick += [f"APPLY {name}" for name in KERNELS]
        for i, command in enumerate(quick):
            btn = ctk.CTkButton(self._buttons, text=command, command=lambda c=command: self._emit_command(c))
            btn.grid(row=i // 2, column=i % 2, padx=2, pady=2, sticky="ew")

        # Log
        self._log = ctk.CTkTextbox(self, width=260, height=180, state="disabled")
        self._log.grid(row=11, column=0, padx=8, pady=(4, 8), sticky="nsew")
        self.grid_rowconfigure(11, weight=1)

    # ---- Public API ----
    def set_image_info(self, buffer: Optional[PixelBuffer], selection: Optional[Selection]) -> None:
        """Отображает метаданные текущего изображения и выделения."""
        if buffer is None:
            self._format_val.set("Нет изображения")
            self._dims_val.set("—")
            self._selection_val.set("—")
            return
        kind = "цветное" if buffer.is_color else "серое"
        self._format_val.set(f"{buffer.format.value}, {kind}, max {buffer.max_color}")
        self._dims_val.set(f"{buffer.width} × {buffer.height} px")
        if selection is not None:
            self._selection_val.set("Выделение: {} {} {} {}".format(*selection.as_tuple()))

    def update_cursor_info(self, x: Optional[int], y: Optional[int], value: Optional[Tuple[int, ...]]) -> None:
        if x is None or y is None or value is None:
            self._cursor_val.set("—")
            return
        self._cursor_val.set(f"({x}, {y}): {', '.join(str(v) for v in value)}  {_value_to_hex(value)}")

    def append_log(self, lines: Iterable[str]) -> None:
        """Добавляет ответы команд в журнал и прокручивает его вниз."""
        self._log.configure(state="normal")
        for line in lines:
            self._log.insert("end", line + "\n")
        self._log.see("end")
        self._log.configure(state="disabled")

    # ---- Events ----
    def _emit_open_file(self) -> None:
        if self.on_open_file:
            self.on_open_file()

    def _emit_save_file(self) -> None:
        if self.on_save_file:
            self.on_save_file(bool(self._ascii_var.get()))

    def _emit_command(self, command: str) -> None:
        if self.on_command:
            self.on_command(command)
