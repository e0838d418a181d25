"""
RiriLang Compiler Package

A source-to-source compiler that translates RiriLang scripts into a single
C++20 translation unit.
"""

from pathlib import Path
from typing import Optional, Union

from .tokens import Token, TokenType
from .lexer import Lexer, tokenize
from .ast import *
from .parser import Parser, parse
from .resolver import FileResolver, ImportResolver, resolve_imports
from .codegen import CodeGenerator, ReceiverKind, classify_receiver, emit
from .config import EmitOptions
from .diagnostics import Diagnostic, Diagnostics
from .errors import RiriError, LexicalError, SyntaxError, ImportError, EmitError

__version__ = "0.1.0"
__all__ = [
    "Token",
    "TokenType",
    "Lexer",
    "Parser",
    "FileResolver",
    "ImportResolver",
    "CodeGenerator",
    "ReceiverKind",
    "EmitOptions",
    "Diagnostic",
    "Diagnostics",
    "RiriError",
    "LexicalError",
    "SyntaxError",
    "ImportError",
    "EmitError",
    "tokenize",
    "parse",
    "resolve_imports",
    "classify_receiver",
    "emit",
    "compile_source",
    "compile_file",
]


def compile_source(source: str, base_dir: Union[str, Path] = ".",
                   options: Optional[EmitOptions] = None,
                   filename: Optional[str] = None,
                   diagnostics: Optional[Diagnostics] = None) -> str:
    """
    Compile RiriLang source code to C++.

    Args:
        source: RiriLang source code string
        base_dir: Directory that imports are resolved against
        options: Optional target features
        filename: Name of the source file (relative names are taken from
            base_dir), used in errors and to stop an import cycle leading
            back to it
        diagnostics: Sink for non-fatal compiler messages

    Returns:
        C++ source text

    Raises:
        RiriError: If any compiler stage fails
    """
    tokens = tokenize(source, filename)
    program = parse(tokens, filename)
    program = resolve_imports(program, base_dir, origin=filename, diagnostics=diagnostics)
    return emit(program, options, diagnostics)


def compile_file(filepath: Union[str, Path], options: Optional[EmitOptions] = None,
                 diagnostics: Optional[Diagnostics] = None) -> str:
    """
    Compile a RiriLang source file to C++.

    Args:
        filepath: Path to the .rr source file
        options: Optional target features
        diagnostics: Sink for non-fatal compiler messages

    Returns:
        C++ source text
    """
    path = Path(filepath).resolve()
    source = FileResolver().read(path)
    return compile_source(source, path.parent, options, str(path), diagnostics)
