"""Unit tests for the sample scenes, the baker and the bake script."""

import json
import logging
import os
import threading

import numpy as np
import pytest
from PIL import Image

import bake_textures
from texture_generator import baker
from texture_generator.baker import bake_all, bake_scene, save_color_map
from texture_generator.color_maps import ColorMap
from texture_generator.errors import RenderCancelledError, TextureConfigError
from texture_generator.renderers import BlendRenderer, ImageRenderer
from texture_generator.scenes import SCENES, SURFACES, build_granite, build_jade, build_sky, build_wood

logger = logging.getLogger("test_baker")


class TestScenes:
    """Tests for the sample scene recipes."""

    @pytest.mark.parametrize("name", sorted(SCENES))
    def test_every_surface_has_a_renderer(self, name: str) -> None:
        """test that every scene builds a renderer for every surface."""
        # given
        scene = SCENES[name](seed=1)

        # then
        for surface in SURFACES:
            renderer = scene.renderer(surface)
            assert renderer.modules()[0] is scene.module
            assert scene.image_name(surface) == f"{scene.name}{surface}.png"

    def test_sky_is_blended(self) -> None:
        """test that the sky draws its clouds over the water."""
        # given
        scene = build_sky()

        # when
        renderer = scene.renderer("Plane")

        # then
        assert isinstance(renderer, BlendRenderer)
        assert renderer.upper.builder.module is scene.upper_module
        assert renderer.upper.light is None

    def test_sphere_is_twice_as_wide(self) -> None:
        """test the surface sizes."""
        scene = build_wood()
        assert scene.size("Sphere", 32) == (64, 32)
        assert scene.size("Plane", 32) == (32, 32)

    def test_unknown_surface_is_rejected(self) -> None:
        """test that surfaces other than plane, seamless and sphere fail."""
        with pytest.raises(TextureConfigError):
            build_wood().renderer("Cube")

    def test_seed_changes_the_texture(self) -> None:
        """test that the seed drives the noise."""
        # given
        first = build_granite(seed=1).renderer("Plane")
        second = build_granite(seed=2).renderer("Plane")

        # then
        assert isinstance(first, ImageRenderer)
        assert not np.array_equal(first.render_rows(6, 6, 0, 6), second.render_rows(6, 6, 0, 6))


class TestSaveColorMap:
    """Tests for save_color_map."""

    def test_rows_are_flipped(self, tmp_path) -> None:
        """test that row 0 of the map ends up at the bottom of the image."""
        # given
        pixels = np.zeros((2, 3, 4), dtype=np.uint8)
        pixels[0] = (255, 0, 0, 255)
        pixels[1] = (0, 0, 255, 128)
        path = str(tmp_path / "flip.png")

        # when
        save_color_map(ColorMap(pixels), path)

        # then
        with Image.open(path) as image:
            assert image.mode == "RGBA"
            loaded = np.asarray(image)
        np.testing.assert_array_equal(loaded[0, 0], (0, 0, 255, 128))
        np.testing.assert_array_equal(loaded[1, 2], (255, 0, 0, 255))


class TestBakeScene:
    """Tests for bake_scene and bake_all."""

    def test_writes_images_and_descriptions(self, tmp_path) -> None:
        """test that every surface is written with its description."""
        # given
        output_dir = str(tmp_path / "out")

        # when
        result = bake_scene(build_wood(), 4, output_dir, logger, workers=1)

        # then
        assert result.ok
        names = sorted(p.name for p in (tmp_path / "out").iterdir())
        assert names == sorted(
            [f"TextureWood{s}.png" for s in SURFACES] + [f"TextureWood{s}.noisegraph" for s in SURFACES])
        with Image.open(tmp_path / "out" / "TextureWoodSphere.png") as image:
            assert image.size == (8, 4)
            assert image.mode == "RGBA"

    def test_failed_scene_does_not_stop_the_batch(self, tmp_path, monkeypatch) -> None:
        """test that an I/O error in one scene leaves the other scenes intact."""
        # given
        real_save = baker.save_color_map

        def failing_save(color_map, path):
            if "Granite" in path:
                raise OSError("disk full")
            real_save(color_map, path)

        monkeypatch.setattr(baker, "save_color_map", failing_save)

        # when
        results = bake_all(["granite", "wood"], height=4, output_dir=str(tmp_path), workers=1, logger=logger)

        # then
        assert [r.scene for r in results] == ["TextureGranite", "TextureWood"]
        assert not results[0].ok
        assert "disk full" in results[0].error
        assert results[1].ok
        assert (tmp_path / "TextureWoodSeamless.png").exists()
        assert not any(p.name.startswith("TextureGranite") for p in tmp_path.iterdir())

    def test_failed_render_leaves_no_description(self, tmp_path) -> None:
        """test that a surface that cannot be rendered writes no file at all."""
        # when
        result = bake_scene(build_wood(), 0, str(tmp_path), logger, workers=1)

        # then
        assert not result.ok
        assert result.written == []
        assert list(tmp_path.iterdir()) == []

    def test_cancelled_bake_leaves_no_description(self, tmp_path) -> None:
        """test that cancellation before the first band writes nothing."""
        # given
        cancel = threading.Event()
        cancel.set()

        # then
        with pytest.raises(RenderCancelledError):
            bake_scene(build_wood(), 4, str(tmp_path), logger, workers=1, cancel_event=cancel)
        assert list(tmp_path.iterdir()) == []

    def test_description_follows_its_image(self, tmp_path) -> None:
        """test that each surface records its image before its description."""
        # when
        result = bake_scene(build_jade(), 4, str(tmp_path), logger, workers=1)

        # then
        assert [os.path.basename(p) for p in result.written[:2]] == [
            "TextureJadePlane.png", "TextureJadePlane.noisegraph",
        ]

    @pytest.mark.parametrize("params", [
        {"height": 0},
        {"height": "4"},
        {"height": 4.0},
        {"height": True},
        {"seed": "7"},
        {"seed": 1.5},
        {"workers": 0},
        {"workers": "2"},
        {"output_dir": 5},
        {"output_dir": ""},
    ])
    def test_invalid_parameters_fail_before_baking(self, tmp_path, params) -> None:
        """test that bad parameter types or ranges are rejected before any scene starts."""
        # given
        kwargs = {"height": 4, "seed": 0, "workers": 1, "output_dir": str(tmp_path / "out")}
        kwargs.update(params)

        # then
        with pytest.raises(TextureConfigError):
            bake_all(["wood"], logger=logger, **kwargs)
        assert not (tmp_path / "out").exists()

    def test_numpy_integers_are_accepted(self, tmp_path) -> None:
        """test that numpy integer parameters pass validation."""
        results = bake_all(["wood"], height=np.int64(4), seed=np.int32(2), workers=np.int64(1),
                           output_dir=str(tmp_path), logger=logger)
        assert results[0].ok

    def test_scenes_must_be_a_list(self, tmp_path) -> None:
        """test that a scene selection that is not a list of names is rejected."""
        with pytest.raises(TextureConfigError):
            bake_all(5, height=4, output_dir=str(tmp_path), logger=logger)
        with pytest.raises(TextureConfigError):
            bake_all([["wood"]], height=4, output_dir=str(tmp_path), logger=logger)

    def test_unwritable_output_dir_is_reported(self, tmp_path) -> None:
        """test that a file in place of the output directory fails gracefully."""
        # given
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        # when
        result = bake_scene(build_wood(), 4, str(blocker), logger, workers=1)

        # then
        assert not result.ok
        assert result.written == []

    def test_unknown_scene_is_rejected(self, tmp_path) -> None:
        """test that unknown scene names fail before anything is baked."""
        with pytest.raises(TextureConfigError):
            bake_all(["marble"], height=4, output_dir=str(tmp_path), logger=logger)
        assert list(tmp_path.iterdir()) == []


class TestBakeScript:
    """Tests for the bake_textures command line."""

    def test_main_bakes_the_requested_scene(self, tmp_path) -> None:
        """test a successful command line run."""
        # when
        code = bake_textures.main(["--height", "4", "--output-dir", str(tmp_path),
                                   "--workers", "1", "--scene", "slime"])

        # then
        assert code == 0
        assert (tmp_path / "TextureSlimeSphere.png").exists()
        assert (tmp_path / "TextureSlimePlane.noisegraph").exists()

    def test_main_reads_the_config_file(self, tmp_path) -> None:
        """test that settings come from the config file when not given on the command line."""
        # given
        output_dir = tmp_path / "from_config"
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"bake_parameters": {
            "height": 4, "output_dir": str(output_dir), "seed": 7, "workers": 1, "scenes": ["jade"],
        }}))

        # when
        code = bake_textures.main(["--config", str(config_path)])

        # then
        assert code == 0
        assert sorted(p.name for p in output_dir.iterdir() if p.suffix == ".png") == [
            "TextureJadePlane.png", "TextureJadeSeamless.png", "TextureJadeSphere.png",
        ]

    def test_missing_config_file_fails(self, tmp_path) -> None:
        """test that an unreadable config file exits with status 2."""
        assert bake_textures.main(["--config", str(tmp_path / "missing.json")]) == 2

    def test_invalid_height_fails(self, tmp_path) -> None:
        """test that an invalid height is a parameter error and nothing is written."""
        code = bake_textures.main(["--height", "0", "--output-dir", str(tmp_path / "out"),
                                   "--workers", "1", "--scene", "wood"])
        assert code == 2
        assert not (tmp_path / "out").exists()

    @pytest.mark.parametrize("document", [
        {"bake_parameters": {"height": "4", "workers": 1, "scenes": ["wood"]}},
        {"bake_parameters": {"height": 4, "seed": "zero", "workers": 1, "scenes": ["wood"]}},
        {"bake_parameters": {"height": 4, "workers": 1, "scenes": "granite,wood"}},
        {"bake_parameters": [4, 1]},
        [1, 2],
    ])
    def test_malformed_config_file_fails(self, tmp_path, document) -> None:
        """test that wrongly typed config values exit with status 2 instead of crashing."""
        # given
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps(document))

        # when
        code = bake_textures.main(["--config", str(config_path), "--output-dir", str(tmp_path / "out")])

        # then
        assert code == 2
        assert not (tmp_path / "out").exists()

    def test_failed_scene_sets_exit_status(self, tmp_path, monkeypatch) -> None:
        """test that a scene failing to write exits with status 1."""
        # given
        def failing_save(color_map, path):
            raise OSError("read-only file system")

        monkeypatch.setattr(baker, "save_color_map", failing_save)

        # when
        code = bake_textures.main(["--height", "4", "--output-dir", str(tmp_path),
                                   "--workers", "1", "--scene", "wood"])

        # then
        assert code == 1
