"""Unit tests for graph description files."""

import json

import numpy as np
import pytest

from texture_generator.builders import PlaneBuilder, SphereBuilder
from texture_generator.color_maps import Gradient, create_grayscale_gradient
from texture_generator.description import (
    describe, description_path, load_description, read_description, write_description,
)
from texture_generator.errors import DescriptionError
from texture_generator.modules import Add, Perlin, RotatePoint, ScaleBias, TranslatePoint
from texture_generator.noise import NoiseSource
from texture_generator.renderers import BlendRenderer, ImageRenderer, LightConfig
from texture_generator.scenes import build_sky


@pytest.fixture
def shared_renderer(perlin: Perlin) -> ImageRenderer:
    """renderer whose graph uses the same perlin node twice."""
    root = Add(ScaleBias(perlin, scale=0.5), RotatePoint(TranslatePoint(perlin, translate_x=2.0), y_angle=30.0))
    return ImageRenderer(PlaneBuilder(root, -2.0, 2.0, -1.0, 1.0, seamless=True, seed=3),
                         create_grayscale_gradient(), LightConfig(azimuth=45.0, contrast=1.5))


class TestDescribe:
    """Tests for describe."""

    def test_shared_node_is_written_once(self, shared_renderer: ImageRenderer) -> None:
        """test that a node with two parents gets one entry."""
        # when
        document = describe(shared_renderer)

        # then
        types = [entry["type"] for entry in document["modules"]]
        assert types.count("Perlin") == 1
        assert len(document["noise_sources"]) == 1
        assert document["modules"][-1]["type"] == "Add"

    def test_children_precede_parents(self, shared_renderer: ImageRenderer) -> None:
        """test that every child index is lower than its parent's index."""
        # when
        modules = describe(shared_renderer)["modules"]

        # then
        for index, entry in enumerate(modules):
            assert all(child < index for child in entry["children"])

    def test_document_is_json(self, shared_renderer: ImageRenderer) -> None:
        """test that the document survives JSON encoding unchanged."""
        document = describe(shared_renderer)
        assert json.loads(json.dumps(document)) == document


class TestReadDescription:
    """Tests for read_description and load_description."""

    def test_round_trip_preserves_sharing(self, shared_renderer: ImageRenderer) -> None:
        """test that a shared node is rebuilt as one instance."""
        # when
        loaded = read_description(describe(shared_renderer))

        # then
        root = loaded.builder.module
        assert root.source1.source is root.source2.source.source
        assert isinstance(root.source1.source, Perlin)
        assert loaded.builder.seamless
        assert loaded.light == shared_renderer.light

    def test_round_trip_describes_the_same(self, shared_renderer: ImageRenderer) -> None:
        """test that describing a loaded graph gives the original document."""
        document = describe(shared_renderer)
        assert describe(read_description(document)) == document

    def test_round_trip_renders_the_same(self, shared_renderer: ImageRenderer) -> None:
        """test that a loaded renderer produces identical pixels."""
        # when
        loaded = read_description(describe(shared_renderer))

        # then
        np.testing.assert_array_equal(loaded.render_rows(7, 7, 0, 7), shared_renderer.render_rows(7, 7, 0, 7))

    def test_blend_renderer_round_trip(self) -> None:
        """test a blended scene with a noise source shared by both layers."""
        # given
        renderer = build_sky(seed=4).renderer("Sphere")

        # when
        document = describe(renderer)
        loaded = read_description(document)

        # then
        assert isinstance(loaded, BlendRenderer)
        assert isinstance(loaded.lower.builder, SphereBuilder)
        assert len(document["noise_sources"]) == 1
        assert loaded.lower.builder.module.noise is loaded.upper.builder.module.noise
        assert describe(loaded) == document

    def test_file_round_trip(self, shared_renderer: ImageRenderer, tmp_path) -> None:
        """test writing and loading a description file."""
        # given
        path = str(tmp_path / "shared.noisegraph")

        # when
        write_description(shared_renderer, path)
        loaded = load_description(path)

        # then
        assert describe(loaded) == describe(shared_renderer)

    def test_description_path_replaces_extension(self) -> None:
        """test the description file name of an image."""
        assert description_path("out/TextureJadePlane.png") == "out/TextureJadePlane.noisegraph"

    def test_wrong_format_is_rejected(self, shared_renderer: ImageRenderer) -> None:
        """test that foreign documents are rejected."""
        # given
        document = describe(shared_renderer)
        document["format"] = "something-else"

        # then
        with pytest.raises(DescriptionError):
            read_description(document)

    def test_unknown_module_type_is_rejected(self, shared_renderer: ImageRenderer) -> None:
        """test that unknown node types are rejected."""
        # given
        document = describe(shared_renderer)
        document["modules"][0]["type"] = "Checkerboard"

        # then
        with pytest.raises(DescriptionError):
            read_description(document)

    def test_forward_reference_is_rejected(self, shared_renderer: ImageRenderer) -> None:
        """test that a child index pointing at a later node is rejected."""
        # given
        document = describe(shared_renderer)
        document["modules"][1]["children"] = [len(document["modules"]) - 1]

        # then
        with pytest.raises(DescriptionError):
            read_description(document)

    def test_missing_keys_are_rejected(self, shared_renderer: ImageRenderer) -> None:
        """test that a truncated document raises DescriptionError."""
        # given
        document = describe(shared_renderer)
        del document["builders"]

        # then
        with pytest.raises(DescriptionError):
            read_description(document)

    def test_invalid_json_file_is_rejected(self, tmp_path) -> None:
        """test that a file that is not JSON raises DescriptionError."""
        # given
        path = tmp_path / "broken.noisegraph"
        path.write_text("{not json")

        # then
        with pytest.raises(DescriptionError):
            load_description(str(path))

    def test_unlit_gradient_with_alpha_round_trip(self, noise: NoiseSource) -> None:
        """test that alpha channels and a missing light are preserved."""
        # given
        gradient = Gradient(((-1.0, (255, 255, 255, 0)), (1.0, (10, 20, 30, 200))))
        renderer = ImageRenderer(PlaneBuilder(Perlin(noise, seed_offset=1)), gradient)

        # when
        loaded = read_description(describe(renderer))

        # then
        assert loaded.light is None
        assert loaded.gradient.points == gradient.points

    def test_numpy_builder_seed_stays_an_integer(self, perlin: Perlin) -> None:
        """test that a numpy integer seed is written and read back as an int."""
        # given
        renderer = ImageRenderer(SphereBuilder(perlin, seed=np.int64(12)), create_grayscale_gradient())

        # when
        document = json.loads(json.dumps(describe(renderer)))
        loaded = read_description(document)

        # then
        assert document["builders"][0]["params"]["seed"] == 12
        assert isinstance(document["builders"][0]["params"]["seed"], int)
        assert isinstance(loaded.builder.seed, int)
        assert loaded.builder.seed == 12
