from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk


class BottomBar(ctk.CTkFrame):
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, height=64, **kwargs)

        # callbacks
        self.on_command: Optional[Callable[[str], None]] = None

        # layout
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=1)  # entry stretches

        self._prompt = ctk.CTkLabel(self, text="Команда")
        self._prompt.grid(row=0, column=0, padx=(10, 6), pady=8, sticky="w")

        self._entry = ctk.CTkEntry(self, placeholder_text="SELECT 0 0 10 10, ROTATE 90, APPLY BLUR…")
        self._entry.grid(row=0, column=1, padx=6, pady=8, sticky="ew")
        self._entry.bind("<Return>", self._on_submit)

        self._run_btn = ctk.CTkButton(self, text="Выполнить", width=110, command=self._on_submit)
        self._run_btn.grid(row=0, column=2, padx=6, pady=8, sticky="e")

        self._status = ctk.StringVar(value="")
        self._status_label = ctk.CTkLabel(self, textvariable=self._status, width=220, anchor="w")
        self._status_label.grid(row=0, column=3, padx=(6, 12), pady=8, sticky="w")

    # public API (sync from controller)
    def set_status(self, text: str) -> None:
        self._status.set(text)

    def focus_entry(self) -> None:
        self._entry.focus_set()

    # events
    def _on_submit(self, _event: object | None = None) -> None:
        text = self._entry.get().strip()
        if not text:
            return
        self._entry.delete(0, "end")
        if self.on_command:
            self.on_command(text)
