import customtkinter as ctk

from pnm_editor.config import Config
from pnm_editor.controllers.app_controller import AppController
from pnm_editor.controllers.command_controller import CommandController
from pnm_editor.ui.image_viewer import ImageViewer
from pnm_editor.ui.sidebar import Sidebar
from pnm_editor.ui.bottom_bar import BottomBar


class PnmEditorApp(ctk.CTk):
    def __init__(self, controller: CommandController, config: Config) -> None:
        super().__init__()
        ctk.set_appearance_mode(config.appearance_mode)
        ctk.set_default_color_theme(config.color_theme)

        self.title("PNM Editor")
        self.minsize(900, 600)

        # root layout: left viewer, right sidebar, command bar below
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=0)

        self._viewer = ImageViewer(self)
        self._viewer.grid(row=0, column=0, sticky="nsew", padx=(12, 6), pady=(12, 6))

        self._sidebar = Sidebar(self)
        self._sidebar.grid(row=0, column=1, sticky="ns", padx=(6, 12), pady=(12, 6))

        self._bottom = BottomBar(self)
        self._bottom.grid(row=1, column=0, columnspan=2, sticky="ew", padx=12, pady=(0, 12))

        self._controller = AppController(
            viewer=self._viewer,
            sidebar=self._sidebar,
            bottom=self._bottom,
            window=self,
            commands=controller,
        )
        self._controller.bind_events()
