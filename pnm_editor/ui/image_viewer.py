"""Виджет просмотра текущего изображения: масштаб и рамка выделения.

Принципы:
- SRP: отвечает только за представление буфера; команды не выполняет.
- Чистый код: чёткое разделение публичного API и внутренних обработчиков событий.
"""
from __future__ import annotations

from typing import Callable, Optional, Tuple

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk

from pnm_editor.models.image_model import Selection


class ImageViewer(ctk.CTkFrame):
    """Канва с изображением сессии и контуром активного выделения."""
    def __init__(self, master: ctk.CTk | tk.Misc, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._canvas = tk.Canvas(self, highlightthickness=0, bg=self._get_canvas_bg())
        self._canvas.grid(row=0, column=0, sticky="nsew")

        self._image: Optional[Image.Image] = None
        self._selection: Optional[Selection] = None
        self._tk_image: Optional[ImageTk.PhotoImage] = None

        self._scale_factor: float = 1.0
        self._image_top_left: Tuple[int, int] = (0, 0)

        self.on_cursor_move: Optional[Callable[[Optional[int], Optional[int], Optional[Tuple[int, ...]]], None]] = None

        self._canvas.bind("<Configure>", self._on_canvas_resize)
        self._canvas.bind("<Motion>", self._on_mouse_move)
        self._canvas.bind("<Leave>", self._on_mouse_leave)

    # ---- Public API ----
    def set_image(self, image: Optional[Image.Image], selection: Optional[Selection]) -> None:
        """Показывает изображение (или пустую канву) и рамку выделения."""
        self._image = image
        self._selection = selection
        self._render_image()

    # ---- Internals ----
    def _on_canvas_resize(self, _event: tk.Event) -> None:
        self._render_image()

    def _render_image(self) -> None:
        self._canvas.delete("all")
        if self._image is None:
            self._tk_image = None
            return

        self._compute_fit_scale()
        canvas_w = int(self._canvas.winfo_width())
        canvas_h = int(self._canvas.winfo_height())
        img_w, img_h = self._image.size
        scaled_w = max(1, int(img_w * self._scale_factor))
        scaled_h = max(1, int(img_h * self._scale_factor))

        # pixels stay sharp when zoomed in
        resized = self._image.resize((scaled_w, scaled_h), Image.Resampling.NEAREST)
        ox = max(0, (canvas_w - scaled_w) // 2)
        oy = max(0, (canvas_h - scaled_h) // 2)
        self._image_top_left = (ox, oy)

        self._tk_image = ImageTk.PhotoImage(resized)
        self._canvas.create_image(ox, oy, image=self._tk_image, anchor="nw")

        if self._selection is not None and (self._selection.width, self._selection.height) != (img_w, img_h):
            s = self._scale_factor
            self._canvas.create_rectangle(
                ox + self._selection.x1 * s,
                oy + self._selection.y1 * s,
                ox + self._selection.x2 * s,
                oy + self._selection.y2 * s,
                outline="#ff3b30",
                dash=(4, 2),
            )

    def _compute_fit_scale(self) -> None:
        if self._image is None:
            self._scale_factor = 1.0
            return
        canvas_w = max(1, int(self._canvas.winfo_width()))
        canvas_h = max(1, int(self._canvas.winfo_height()))
        img_w, img_h = self._image.size
        self._scale_factor = max(0.1, min(16.0, min(canvas_w / img_w, canvas_h / img_h)))

    def _on_mouse_move(self, event: tk.Event) -> None:
        if self._image is None or self.on_cursor_move is None:
            return
        ox, oy = self._image_top_left
        x = int((event.x - ox) / self._scale_factor)
        y = int((event.y - oy) / self._scale_factor)
        img_w, img_h = self._image.size
        if not (0 <= x < img_w and 0 <= y < img_h) or event.x < ox or event.y < oy:
            self.on_cursor_move(None, None, None)
            return
        value = self._image.getpixel((x, y))
        self.on_cursor_move(x, y, value if isinstance(value, tuple) else (value,))

    def _on_mouse_leave(self, _event: tk.Event) -> None:
        if self.on_cursor_move:
            self.on_cursor_move(None, None, None)

    def _get_canvas_bg(self) -> str:
        # CTk does not expose canvas theme, so pick neutral
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"
