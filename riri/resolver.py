"""
RiriLang Import Resolver

Replaces every `import "path";` statement with the top-level statements of
the imported file, depth-first and in declaration order. Each file is
inlined at most once per compilation.
"""

import logging
from pathlib import Path
from typing import List, Optional, Set, Union

from .ast import Program, Statement, ImportDeclaration
from .config import SOURCE_ENCODING
from .diagnostics import Diagnostics
from .errors import ImportError
from .lexer import tokenize
from .parser import parse

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FileResolver:
    """Maps import paths to files on disk and reads them."""

    def __init__(self, encoding: str = SOURCE_ENCODING):
        self.encoding = encoding

    def resolve(self, import_path: str, base_dir: PathLike) -> Path:
        """
        Resolve an import path against a base directory.

        Raises:
            ImportError: If the resolved file does not exist
        """
        full_path = (Path(base_dir) / import_path).resolve()
        if not full_path.is_file():
            raise ImportError(f"Cannot find module '{import_path}' from {base_dir}",
                              import_path)
        return full_path

    def read(self, path: PathLike) -> str:
        """
        Read a source file.

        Raises:
            ImportError: If the file cannot be read or decoded
        """
        try:
            return Path(path).read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise ImportError(f"Failed to read file: {e}", str(path)) from e


class ImportResolver:
    """Inlines imported files into a program, skipping repeats and cycles."""

    def __init__(self, file_resolver: Optional[FileResolver] = None,
                 diagnostics: Optional[Diagnostics] = None):
        self.files = file_resolver or FileResolver()
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.visited: Set[Path] = set()

    def mark_visited(self, path: PathLike) -> None:
        self.visited.add(Path(path).resolve())

    def resolve(self, program: Program, base_dir: PathLike,
                filename: Optional[str] = None) -> Program:
        """
        Return a new Program with every ImportDeclaration replaced by the
        resolved statements of the file it names.

        Args:
            program: Parsed program whose imports should be inlined
            base_dir: Directory that relative import paths start from
            filename: Name of the file `program` came from, for diagnostics

        Raises:
            ImportError: If an imported file is missing or unreadable
        """
        body: List[Statement] = []

        for stmt in program.body:
            if not isinstance(stmt, ImportDeclaration):
                body.append(stmt)
                continue

            try:
                full_path = self.files.resolve(stmt.path, base_dir)
                if full_path in self.visited:
                    self.diagnostics.report(f"Skipping already imported module: {full_path}",
                                            line=stmt.line, file=filename)
                    continue
                source = self.files.read(full_path)
            except ImportError as e:
                # Locate the failure at the import statement
                raise ImportError(e.message, e.import_path, stmt.line, filename) from e

            self.visited.add(full_path)
            logger.debug("Importing %s", full_path)

            imported = parse(tokenize(source, str(full_path)), str(full_path))
            resolved = self.resolve(imported, full_path.parent, str(full_path))
            body.extend(resolved.body)

        return Program(body)


def resolve_imports(program: Program, base_dir: PathLike,
                    origin: Optional[PathLike] = None,
                    diagnostics: Optional[Diagnostics] = None,
                    file_resolver: Optional[FileResolver] = None) -> Program:
    """
    Inline all imports of `program`.

    Args:
        program: Parsed entry program
        base_dir: Directory of the entry file
        origin: Path of the entry file itself, relative paths taken from
            `base_dir`; an import cycle leading back to it is then skipped
            like any other repeat
        diagnostics: Sink for skipped-import reports
        file_resolver: Custom source reader/path resolver

    Returns:
        A new Program without ImportDeclarations
    """
    resolver = ImportResolver(file_resolver, diagnostics)
    if origin is not None:
        origin_path = Path(origin)
        if not origin_path.is_absolute():
            origin_path = Path(base_dir) / origin_path
        resolver.mark_visited(origin_path)
    return resolver.resolve(program, base_dir,
                            str(origin) if origin is not None else None)
