"""
RiriLang Compiler Configuration

Compile-time limits and the options record that selects optional blocks of
the emitted C++ runtime prelude.
"""

from dataclasses import dataclass

# Parser recursion guard (statements + expressions currently open)
MAX_NESTING_DEPTH = 64

SOURCE_ENCODING = "utf-8"

# Default SQLite file opened by dbInit() without arguments
DEFAULT_DATABASE = "riri.db"

# A user function called `main` would collide with the C++ entry point
ENTRY_POINT_ALIAS = "riri_main"

INDENT = "    "


@dataclass(frozen=True)
class EmitOptions:
    """
    Optional target features for code emission.

    Attributes:
        gui_toolkit: Emit Qt includes, widget helpers and the DOM shim, and
            start a QApplication in main().
        web_support: Emit httplib/OpenSSL includes plus the JWT, JSON and
            HTTP client helpers.
        database_support: Emit the sqlite3 include and RiriDB helpers.
    """
    gui_toolkit: bool = False
    web_support: bool = True
    database_support: bool = True
