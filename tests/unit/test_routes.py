"""
Unit tests for the route table.
"""

from pathlib import Path

import pytest

from wsserver.http.routes import RouteTable


class TestRouteTable:

    def test_lookup(self):
        routes = RouteTable({"/": b"home"})

        assert routes.lookup("/") == b"home"
        assert routes.lookup("/missing") is None

    def test_matching_is_exact(self):
        routes = RouteTable({"/": b"home"})

        assert routes.lookup("/?x=1") is None
        assert routes.lookup("/index.html") is None

    def test_str_content_is_encoded(self):
        routes = RouteTable({"/": "café"})

        assert routes.lookup("/") == "café".encode("utf-8")

    def test_container_protocol(self):
        routes = RouteTable({"/": b"a", "/about": b"b"})

        assert len(routes) == 2
        assert "/about" in routes
        assert "/nope" not in routes
        assert routes.targets == ("/", "/about")
        assert list(routes) == ["/", "/about"]

    def test_empty_table(self):
        routes = RouteTable()

        assert len(routes) == 0
        assert routes.lookup("/") is None

    def test_source_mapping_changes_do_not_leak(self):
        source = {"/": b"home"}
        routes = RouteTable(source)
        source["/late"] = b"late"

        assert "/late" not in routes


class TestFromTemplates:

    def test_default_mapping(self, tmp_path: Path):
        (tmp_path / "home.html").write_bytes(b"<h1>home</h1>")

        routes = RouteTable.from_templates(tmp_path)

        assert routes.targets == ("/",)
        assert routes.lookup("/") == b"<h1>home</h1>"

    def test_custom_mapping(self, tmp_path: Path):
        (tmp_path / "a.html").write_bytes(b"A")
        (tmp_path / "b.html").write_bytes(b"B")

        routes = RouteTable.from_templates(str(tmp_path), {"/a": "a.html", "/b": "b.html"})

        assert routes.lookup("/a") == b"A"
        assert routes.lookup("/b") == b"B"

    def test_missing_file_names_path(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError) as exc_info:
            RouteTable.from_templates(tmp_path)

        assert str(tmp_path / "home.html") in str(exc_info.value)

    def test_bundled_home_template(self):
        templates = Path(__file__).parent.parent.parent / "templates"

        routes = RouteTable.from_templates(templates)

        assert b"new WebSocket(" in routes.lookup("/")
