"""The ``save`` command: write the current canvas to one or more files."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from datetime import datetime

logger = logging.getLogger(__name__)

SaveFunction = Callable[[str, "str | None"], None]

USAGE = "usage: save [filename]"


class SaveCommand:
    """Save a canvas to file, with optional automatic naming and date directories.

    The canvas itself is written by the ``save`` callable handed to
    :meth:`run`; it is called as ``save(path, canvas_name)``, where
    ``canvas_name`` is None for the current canvas.
    """

    name = "save"
    title = "save canvas to file"

    def __init__(
        self,
        default_directory: str = "",
        add_date_dir: bool = False,
        has_date_format: bool = False,
        auto_name: bool = False,
    ) -> None:
        self.default_directory = default_directory
        self.add_date_dir = add_date_dir
        self.has_date_format = has_date_format
        self.auto_name = auto_name
        self.formats: list[str] = []
        self.print_format: int | None = None
        self.last_print_file = ""

    @property
    def print_file_name(self) -> str | None:
        """The file last saved in the print format, or None if there is none."""
        return self.last_print_file or None

    def add_format(self, suffix: str, is_print_format: bool = False) -> None:
        """Add a file format; the canvas is saved in every format added."""
        self.formats.append(suffix)
        if is_print_format:
            self.print_format = len(self.formats) - 1

    def target_directory(self, now: datetime | None = None) -> str:
        """Return the directory files are saved into at time ``now``.

        With ``add_date_dir`` the local date (YYYYMMDD) is appended to the
        default directory; with ``has_date_format`` the default directory is
        itself a strftime format.
        """
        now = datetime.now() if now is None else now
        if self.add_date_dir:
            return f"{self.default_directory}/{now.strftime('%Y%m%d')}"
        if self.has_date_format:
            return now.strftime(self.default_directory)
        return self.default_directory

    def run(
        self, filename: str = "", save: SaveFunction | None = None, now: datetime | None = None
    ) -> list[str]:
        """Save the canvas and return the paths written.

        In automatic naming mode the file is named after the epoch second and
        ``filename``, if given, names the canvas to save. Otherwise
        ``filename`` is appended to the target directory.
        """
        if save is None:
            raise ValueError("no save function given")
        now = datetime.now() if now is None else now
        directory = self.target_directory(now)
        if directory:
            os.makedirs(directory, exist_ok=True)

        written: list[str] = []
        if self.auto_name:
            canvas = filename or None
            basename = str(int(now.timestamp()))
            for index, suffix in enumerate(self.formats):
                path = f"{directory}/{basename}.{suffix}"
                print(path)
                save(path, canvas)
                written.append(path)
                if index == self.print_format:
                    self.last_print_file = path
        elif filename:
            path = directory + filename
            save(path, None)
            written.append(path)
        else:
            raise ValueError("file name is not given")
        return written

    def cmd(
        self,
        tokens: Sequence[str],
        save: SaveFunction | None = None,
        now: datetime | None = None,
    ) -> list[str]:
        """Run the command from its tokens, the first being the command name."""
        if len(tokens) > 2:
            raise ValueError(USAGE)
        filename = "" if len(tokens) <= 1 else tokens[1]
        return self.run(filename, save, now)