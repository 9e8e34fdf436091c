"""Tests for lexical import extraction and resolution."""

import pytest

from archlens.exceptions import InputContractError
from archlens.graph import build_dependency_graph
from archlens.scanning import detect_language, extract_imports, parse_sources, resolve_import
from archlens.scanning.imports import count_declared_types


class TestDetectLanguage:
    @pytest.mark.parametrize(
        "path,expected",
        [
            ("a.py", "python"),
            ("a.tsx", "typescript"),
            ("a.mjs", "javascript"),
            ("main.go", "go"),
            ("User.java", "java"),
            ("README.md", None),
        ],
    )
    def test_by_extension(self, path, expected):
        assert detect_language(path) == expected


class TestExtractImports:
    def test_typescript_forms(self):
        source = "\n".join(
            [
                "import React from 'react';",
                'import { a, b } from "./utils";',
                "import type { T } from '../types';",
                "export * from './reexport';",
                "import './styles.css';",
                "const fs = require('fs');",
                "const lazy = () => import('./lazy');",
            ]
        )
        assert extract_imports(source, "typescript") == [
            "react",
            "./utils",
            "../types",
            "./reexport",
            "./styles.css",
            "fs",
            "./lazy",
        ]

    def test_multiline_import(self):
        source = "import {\n  one,\n  two,\n} from './numbers';"
        assert extract_imports(source, "javascript") == ["./numbers"]

    def test_duplicates_removed(self):
        source = "import a from './a';\nimport { b } from './a';"
        assert extract_imports(source, "typescript") == ["./a"]

    def test_python_forms(self):
        source = "\n".join(
            [
                "import os",
                "import pkg.sub",
                "from . import models",
                "from ..core.base import Base",
                "from app.services import user",
            ]
        )
        assert extract_imports(source, "python") == [
            "os",
            "pkg.sub",
            ".",
            "..core.base",
            "app.services",
        ]

    def test_go_single_and_block_imports(self):
        source = "\n".join(
            [
                "package main",
                "",
                'import "fmt"',
                "import (",
                '\t"example.com/app/internal/store"',
                '\tlog "github.com/sirupsen/logrus"',
                ")",
            ]
        )
        assert extract_imports(source, "go") == [
            "fmt",
            "example.com/app/internal/store",
            "github.com/sirupsen/logrus",
        ]

    def test_java_imports(self):
        source = "import com.acme.domain.User;\nimport static com.acme.util.Strings.trim;\nimport java.util.*;"
        assert extract_imports(source, "java") == [
            "com.acme.domain.User",
            "com.acme.util.Strings.trim",
            "java.util",
        ]

    def test_unknown_language(self):
        assert extract_imports("import x", None) == []
        assert extract_imports("import x", "cobol") == []


class TestResolveImport:
    def test_relative_with_extension_probe(self):
        known = {"src/app/utils.ts"}
        assert resolve_import("src/app/page.ts", "./utils", known) == "src/app/utils.ts"

    def test_parent_directory_index_file(self):
        known = {"src/lib/index.ts"}
        assert resolve_import("src/app/page.ts", "../lib", known) == "src/lib/index.ts"

    def test_python_relative(self):
        known = {"pkg/sub/__init__.py", "pkg/sub/models.py", "pkg/core/base.py"}
        assert resolve_import("pkg/sub/mod.py", ".", known, "python") == "pkg/sub/__init__.py"
        assert resolve_import("pkg/sub/mod.py", ".models", known, "python") == "pkg/sub/models.py"
        assert resolve_import("pkg/sub/mod.py", "..core.base", known, "python") == "pkg/core/base.py"

    def test_python_absolute_under_src(self):
        known = {"src/app/services.py"}
        assert resolve_import("src/app/main.py", "app.services", known, "python") == "src/app/services.py"

    def test_path_alias(self):
        known = {"src/app/models/user.ts"}
        aliases = {"@app/*": ["src/app/*"]}
        assert resolve_import("src/x.ts", "@app/models/user", known, path_aliases=aliases) == "src/app/models/user.ts"

    def test_workspace_package(self):
        known = {"packages/core/src/index.ts"}
        packages = {"@org/core": "packages/core"}
        assert resolve_import("apps/web/a.ts", "@org/core", known, workspace_packages=packages) == (
            "packages/core/src/index.ts"
        )

    def test_at_slash_falls_back_to_src(self):
        known = {"src/components/Button.tsx"}
        assert resolve_import("src/pages/a.tsx", "@/components/Button", known) == "src/components/Button.tsx"

    def test_go_module_path(self):
        known = {"internal/store/db.go", "internal/store/cache.go", "main.go"}
        resolved = resolve_import(
            "main.go", "example.com/app/internal/store", known, "go", go_module="example.com/app"
        )
        assert resolved == "internal/store/cache.go"

    def test_external_packages_do_not_resolve(self):
        known = {"src/a.ts"}
        assert resolve_import("src/a.ts", "react", known, "typescript") is None
        assert resolve_import("main.go", "github.com/sirupsen/logrus", {"main.go"}, "go") is None
        assert resolve_import("src/a.ts", "  ", known) is None


class TestCountDeclaredTypes:
    def test_python_abstract_and_concrete(self):
        source = "class Base(ABC):\n    pass\n\nclass User(Base):\n    pass\n"
        assert count_declared_types(source, "python") == (1, 1)

    def test_typescript(self):
        source = "export interface Repo {}\nexport abstract class Base {}\nexport class Impl {}"
        assert count_declared_types(source, "typescript") == (2, 1)


class TestParseSources:
    def test_builds_parsed_files(self):
        files = parse_sources(
            {
                "src/a.ts": "import { b } from './b';\nimport React from 'react';",
                "src/b.ts": "export const b = 1;",
                "src/c.ts": None,
            }
        )
        by_path = {f.path: f for f in files}
        assert [f.path for f in files] == ["src/a.ts", "src/b.ts", "src/c.ts"]
        assert by_path["src/a.ts"].imports == ("src/b.ts", "react")
        assert by_path["src/b.ts"].export_count == 1
        assert by_path["src/c.ts"].imports == ()
        assert by_path["src/c.ts"].language == "typescript"

    def test_feeds_the_graph_builder(self):
        files = parse_sources(
            {
                "app/a.py": "from .b import thing\n",
                "app/b.py": "from . import a\n",
                "app/__init__.py": "",
            }
        )
        graph = build_dependency_graph(files)
        assert graph.nodes["app/a.py"].imports == ["app/b.py"]
        assert graph.nodes["app/b.py"].imports == ["app/__init__.py"]

    def test_none_sources_raises(self):
        with pytest.raises(InputContractError):
            parse_sources(None)
