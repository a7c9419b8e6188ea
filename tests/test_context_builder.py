"""Tests for the context_builder module."""

import pytest

from registrygen.context_builder import build_context, build_package_tree


class TestBuildContext:
    """Test the full context builder pipeline with the sample schema."""

    @pytest.fixture(autouse=True)
    def _context(self, schema):
        self.ctx = build_context(schema)
        self.members = {m["token"]: m for m in self.ctx["resources"] + self.ctx["functions"]}

    def test_counts(self):
        """Provider, two resources and one function."""
        assert self.ctx["resource_count"] == 3
        assert self.ctx["function_count"] == 1

    def test_package_details(self):
        assert self.ctx["package"]["name"] == "foo"
        assert self.ctx["package"]["title"] == "Foo Cloud"

    def test_modules(self):
        assert list(self.ctx["modules"]) == ["", "storage"]
        assert [m["name"] for m in self.ctx["submodules"]] == ["storage"]

    def test_provider_is_root_resource(self):
        provider = self.members["pulumi:providers:foo"]
        assert provider["link"] == "provider/"
        assert provider["module"] == ""

    def test_member_links(self):
        assert self.members["foo:storage/bucket:Bucket"]["link"] == "storage/bucket/"
        assert self.members["foo:storage/getBucket:getBucket"]["link"] == "storage/getbucket/"
        assert self.members["foo:index/project:Project"]["link"] == "project/"

    def test_summary_is_first_paragraph(self):
        assert self.members["foo:storage/bucket:Bucket"]["summary"] == "Provides a storage bucket."

    def test_every_link_unique(self):
        links = [m["link"] for m in self.members.values()]
        assert len(links) == len(set(links))

    def test_module_members(self):
        storage = self.ctx["modules"]["storage"]
        assert [m["name"] for m in storage["resources"]] == ["Bucket"]
        assert [m["name"] for m in storage["functions"]] == ["getBucket"]


class TestEdgeCases:
    def test_colliding_pages_get_suffix(self):
        ctx = build_context({
            "name": "foo",
            "resources": {"foo:index:Thing": {}, "foo:index:thing": {}},
        })
        assert [m["link"] for m in ctx["resources"]] == ["thing/", "thing-2/"]

    def test_invalid_tokens_are_skipped(self):
        ctx = build_context({"name": "foo", "resources": {"bogus": {}, "foo:index:Ok": {}}})
        assert [m["name"] for m in ctx["resources"]] == ["Ok"]

    def test_empty_schema(self):
        ctx = build_context({"name": "foo"})
        assert ctx["resource_count"] == 0
        assert ctx["submodules"] == []


class TestPackageTree:
    def test_modules_then_resources_then_functions(self, schema):
        tree = build_package_tree(build_context(schema))
        assert [(item["name"], item["type"]) for item in tree] == [
            ("storage", "module"),
            ("Project", "resource"),
            ("Provider", "resource"),
        ]

    def test_module_children(self, schema):
        storage = build_package_tree(build_context(schema))[0]
        assert storage["link"] == "storage/"
        assert storage["children"] == [
            {"name": "Bucket", "type": "resource", "link": "storage/bucket/"},
            {"name": "getBucket", "type": "function", "link": "storage/getbucket/"},
        ]

    def test_leaf_items_have_no_children(self, schema):
        tree = build_package_tree(build_context(schema))
        assert "children" not in tree[1]

    def test_nested_modules(self):
        spec = {"name": "kubernetes", "resources": {"kubernetes:apps/v1:Deployment": {}}}
        tree = build_package_tree(build_context(spec))
        assert tree == [{
            "name": "apps",
            "type": "module",
            "link": "apps/",
            "children": [{
                "name": "v1",
                "type": "module",
                "link": "apps/v1/",
                "children": [
                    {"name": "Deployment", "type": "resource", "link": "apps/v1/deployment/"},
                ],
            }],
        }]
