"""Точка входа в приложение: REPL по умолчанию, окно с флагом --gui."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, List, Optional, TextIO

from pnm_editor.config import Config
from pnm_editor.controllers.command_controller import CommandController
from pnm_editor.services.session import Session

logger = logging.getLogger(__name__)


def configure_logging(level: str, log_file: Optional[str] = None) -> None:
    """Логи идут в stderr (stdout занят ответами команд) и, при желании, в файл."""
    root_logger = logging.getLogger()
    root_logger.handlers = []

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))


def run_repl(controller: CommandController, lines: Iterable[str], out: TextIO) -> None:
    """Читает команды построчно и печатает ответы, пока не встретит EXIT."""
    for line in lines:
        result = controller.execute(line)
        for message in result.lines:
            out.write(message + "\n")
        out.flush()
        if result.exit:
            logger.debug("EXIT received")
            return


def build_parser(config: Config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pnm-editor", description="Interactive PNM (P2/P3/P5/P6) image editor")
    parser.add_argument("script", nargs="?", help="File with commands (default: read stdin)")
    parser.add_argument("--gui", action="store_true", help="Open the desktop viewer instead of the REPL")
    parser.add_argument("--log-level", default=config.log_level, help="Logging level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--log-file", default=config.log_file, help="Also append logs to this file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Разбирает аргументы и запускает REPL или главное окно."""
    config = Config.from_env()
    args = build_parser(config).parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    controller = CommandController(session=Session(histogram_marker=config.histogram_marker))

    if args.gui:
        # customtkinter нужен только окну
        from pnm_editor.app import PnmEditorApp

        app = PnmEditorApp(controller=controller, config=config)
        app.mainloop()
        return 0

    if args.script:
        with open(args.script, "r", encoding="utf-8") as script:
            run_repl(controller, script, sys.stdout)
    else:
        run_repl(controller, sys.stdin, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
