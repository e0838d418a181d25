"""
RiriLang Import Resolver Tests

Tests for inlining imported files: ordering, relative paths, duplicate and
cyclic imports, and failures on missing or unreadable modules.
"""

import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from riri import (tokenize, parse, resolve_imports, FileResolver, ImportResolver,
                  Diagnostics, ImportError, SyntaxError)
from riri.ast import *


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def load(path):
    return parse(tokenize(path.read_text(encoding="utf-8"), str(path)), str(path))


def names(program):
    return [stmt.name for stmt in program.body]


class TestFileResolver:
    """Path resolution and reading."""

    def test_resolve_relative(self, tmp_path):
        target = write(tmp_path / "lib" / "util.rr", "")
        assert FileResolver().resolve("lib/util.rr", tmp_path) == target.resolve()

    def test_resolve_parent_directory(self, tmp_path):
        target = write(tmp_path / "shared.rr", "")
        (tmp_path / "app").mkdir()
        assert FileResolver().resolve("../shared.rr", tmp_path / "app") == target.resolve()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImportError) as exc:
            FileResolver().resolve("nope.rr", tmp_path)
        assert exc.value.import_path == "nope.rr"
        assert "Cannot find module 'nope.rr'" in str(exc.value)

    def test_directory_is_not_a_module(self, tmp_path):
        (tmp_path / "pkg").mkdir()
        with pytest.raises(ImportError):
            FileResolver().resolve("pkg", tmp_path)

    def test_read(self, tmp_path):
        path = write(tmp_path / "a.rr", "let a = 1;")
        assert FileResolver().read(path) == "let a = 1;"

    def test_read_invalid_encoding(self, tmp_path):
        path = tmp_path / "bad.rr"
        path.write_bytes(b"let s = \"\xff\xfe\";")
        with pytest.raises(ImportError) as exc:
            FileResolver().read(path)
        assert exc.value.import_path == str(path)


class TestImportResolver:
    """Inlining behavior."""

    def test_no_imports_is_unchanged(self, tmp_path):
        program = parse(tokenize("let a = 1;\nprint(a);"))
        resolved = resolve_imports(program, tmp_path)
        assert resolved == program
        assert resolved is not program

    def test_import_is_replaced_in_place(self, tmp_path):
        write(tmp_path / "b.rr", "let b = 2;")
        main = write(tmp_path / "main.rr", 'let a = 1;\nimport "b.rr";\nlet c = 3;')
        resolved = resolve_imports(load(main), tmp_path, origin=main)
        assert names(resolved) == ["a", "b", "c"]
        assert not any(isinstance(s, ImportDeclaration) for s in resolved.body)

    def test_depth_first_order(self, tmp_path):
        write(tmp_path / "a.rr", 'import "c.rr";\nlet a = 1;')
        write(tmp_path / "b.rr", "let b = 2;")
        write(tmp_path / "c.rr", "let c = 3;")
        main = write(tmp_path / "main.rr", 'import "a.rr";\nimport "b.rr";\nlet m = 0;')
        resolved = resolve_imports(load(main), tmp_path, origin=main)
        assert names(resolved) == ["c", "a", "b", "m"]

    def test_nested_paths_are_relative_to_importer(self, tmp_path):
        write(tmp_path / "lib" / "math.rr", 'import "helpers/sq.rr";\nlet m = 1;')
        write(tmp_path / "lib" / "helpers" / "sq.rr", "func sq(x) { return x * x; }")
        main = write(tmp_path / "main.rr", 'import "lib/math.rr";')
        resolved = resolve_imports(load(main), tmp_path, origin=main)
        assert names(resolved) == ["sq", "m"]

    def test_duplicate_import_is_skipped(self, tmp_path):
        write(tmp_path / "util.rr", "let u = 1;")
        write(tmp_path / "a.rr", 'import "util.rr";\nlet a = 1;')
        main = write(tmp_path / "main.rr", 'import "util.rr";\nimport "a.rr";\nimport "./util.rr";')
        diagnostics = Diagnostics()
        resolved = resolve_imports(load(main), tmp_path, origin=main, diagnostics=diagnostics)
        assert names(resolved) == ["u", "a"]
        assert len(diagnostics) == 2
        assert all("Skipping already imported module" in m for m in diagnostics.messages())

    def test_skip_reports_location(self, tmp_path):
        write(tmp_path / "util.rr", "let u = 1;")
        main = write(tmp_path / "main.rr", 'import "util.rr";\n\nimport "util.rr";')
        diagnostics = Diagnostics()
        resolve_imports(load(main), tmp_path, origin=main, diagnostics=diagnostics)
        record = diagnostics.records[0]
        assert record.line == 3
        assert record.file == str(main)
        assert record.level == logging.WARNING

    def test_cycle_terminates(self, tmp_path):
        write(tmp_path / "a.rr", 'import "b.rr";\nlet a = 1;')
        write(tmp_path / "b.rr", 'import "a.rr";\nlet b = 2;')
        main = write(tmp_path / "main.rr", 'import "a.rr";')
        resolved = resolve_imports(load(main), tmp_path, origin=main)
        assert names(resolved) == ["b", "a"]

    def test_cycle_back_to_origin(self, tmp_path):
        write(tmp_path / "lib.rr", 'import "main.rr";\nlet l = 1;')
        main = write(tmp_path / "main.rr", 'import "lib.rr";\nlet m = 0;')
        diagnostics = Diagnostics()
        resolved = resolve_imports(load(main), tmp_path, origin=main, diagnostics=diagnostics)
        assert names(resolved) == ["l", "m"]
        assert len(diagnostics) == 1

    def test_self_import(self, tmp_path):
        main = write(tmp_path / "main.rr", 'import "main.rr";\nlet m = 0;')
        resolved = resolve_imports(load(main), tmp_path, origin=main)
        assert names(resolved) == ["m"]

    def test_missing_import(self, tmp_path):
        main = write(tmp_path / "main.rr", 'import "missing.rr";')
        with pytest.raises(ImportError) as exc:
            resolve_imports(load(main), tmp_path, origin=main)
        assert exc.value.import_path == "missing.rr"

    def test_missing_import_location(self, tmp_path):
        main = write(tmp_path / "main.rr", 'let a = 1;\nimport "missing.rr";')
        with pytest.raises(ImportError) as exc:
            resolve_imports(load(main), tmp_path, origin=main)
        assert exc.value.line == 2
        assert exc.value.filename == str(main)
        assert str(exc.value).startswith(f"{main}:2: Cannot find module 'missing.rr'")

    def test_missing_nested_import_location(self, tmp_path):
        lib = write(tmp_path / "lib.rr", '\n\nimport "gone.rr";')
        main = write(tmp_path / "main.rr", 'import "lib.rr";')
        with pytest.raises(ImportError) as exc:
            resolve_imports(load(main), tmp_path, origin=main)
        assert exc.value.line == 3
        assert exc.value.filename == str(lib.resolve())

    def test_unreadable_import_location(self, tmp_path):
        (tmp_path / "bad.rr").write_bytes(b"\xff\xfe\x00")
        main = write(tmp_path / "main.rr", 'import "bad.rr";')
        with pytest.raises(ImportError) as exc:
            resolve_imports(load(main), tmp_path, origin=main)
        assert exc.value.line == 1
        assert "Failed to read file" in exc.value.message

    def test_relative_origin_is_taken_from_base_dir(self, tmp_path, monkeypatch):
        project = tmp_path / "project"
        write(project / "lib.rr", 'import "main.rr";\nlet l = 1;')
        main = write(project / "main.rr", 'import "lib.rr";\nlet m = 0;')
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        monkeypatch.chdir(elsewhere)
        resolved = resolve_imports(load(main), project, origin="main.rr")
        assert names(resolved) == ["l", "m"]

    def test_syntax_error_names_imported_file(self, tmp_path):
        broken = write(tmp_path / "broken.rr", "let = 1;")
        main = write(tmp_path / "main.rr", 'import "broken.rr";')
        with pytest.raises(SyntaxError) as exc:
            resolve_imports(load(main), tmp_path, origin=main)
        assert exc.value.filename == str(broken.resolve())

    def test_resolver_tracks_visited(self, tmp_path):
        write(tmp_path / "a.rr", "let a = 1;")
        resolver = ImportResolver()
        resolver.resolve(parse(tokenize('import "a.rr";')), tmp_path)
        assert (tmp_path / "a.rr").resolve() in resolver.visited

    def test_custom_file_resolver(self, tmp_path):
        class MemoryResolver(FileResolver):
            def __init__(self, files):
                super().__init__()
                self.files = files

            def resolve(self, import_path, base_dir):
                return Path("/virtual") / import_path

            def read(self, path):
                return self.files[Path(path).name]

        resolver = MemoryResolver({"v.rr": "let v = 1;"})
        program = parse(tokenize('import "v.rr";'))
        resolved = resolve_imports(program, tmp_path, file_resolver=resolver)
        assert names(resolved) == ["v"]

    def test_import_is_logged(self, tmp_path, caplog):
        write(tmp_path / "a.rr", "let a = 1;")
        with caplog.at_level(logging.DEBUG, logger="riri.resolver"):
            resolve_imports(parse(tokenize('import "a.rr";')), tmp_path)
        assert any("Importing" in r.getMessage() for r in caplog.records)


# =============================================================================
# Run Tests
# =============================================================================

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
