"""Tests for layer inference from directory names."""

from archlens.architecture import (
    DEFAULT_ALLOWED_DEPENDENCIES,
    LayerDefinition,
    LayerResolver,
    infer_layers,
    resolve_layers,
)


PATHS = [
    "src/ui/page.tsx",
    "src/services/user_service.ts",
    "src/domain/user.ts",
    "src/db/client.ts",
]


class TestInferLayers:
    def test_canonical_layers_found(self):
        layers = {layer.name: layer for layer in infer_layers(PATHS)}
        assert set(layers) == {"presentation", "application", "domain", "infrastructure"}
        assert layers["presentation"].patterns == ("src/ui/**",)
        assert layers["application"].patterns == ("src/services/**",)
        assert layers["domain"].patterns == ("src/domain/**",)
        assert layers["infrastructure"].patterns == ("src/db/**",)

    def test_default_allowed_dependencies(self):
        layers = {layer.name: layer for layer in infer_layers(PATHS)}
        assert layers["presentation"].allowed_dependencies == frozenset({"application", "domain"})
        assert layers["application"].allowed_dependencies == frozenset({"domain"})
        assert layers["domain"].allowed_dependencies == frozenset()
        assert layers["infrastructure"].allowed_dependencies == frozenset({"domain", "application"})
        assert DEFAULT_ALLOWED_DEPENDENCIES["domain"] == frozenset()

    def test_matching_is_case_insensitive_substring(self):
        layers = infer_layers(["src/UserServices/a.ts"])
        assert [layer.name for layer in layers] == ["application"]
        assert layers[0].patterns == ("src/UserServices/**",)

    def test_depth_is_limited_to_three_segments(self):
        assert infer_layers(["a/b/c/domain/x.ts"]) == ()
        assert [layer.name for layer in infer_layers(["a/b/domain/x.ts"])] == ["domain"]

    def test_no_conventional_directories(self):
        assert infer_layers(["lib/a.ts", "bin/b.ts"]) == ()

    def test_inferred_patterns_assign_files(self):
        resolver = LayerResolver(infer_layers(PATHS))
        assert resolver.layer_of("src/ui/page.tsx") == "presentation"
        assert resolver.layer_of("src/db/client.ts") == "infrastructure"


class TestResolveLayers:
    def test_configured_layers_win(self):
        configured = [LayerDefinition("core", ("core/**",))]
        assert resolve_layers(configured, PATHS) == tuple(configured)

    def test_falls_back_to_inference(self):
        assert resolve_layers(None, PATHS) == infer_layers(PATHS)
        assert resolve_layers((), PATHS) == infer_layers(PATHS)
