# texture_generator/description.py

"""
================================================================================
GRAPH DESCRIPTION FILES
================================================================================
This module writes and reads the description file saved next to every baked
image. The description captures the whole pipeline: noise sources, module
graph, builders, gradients and light settings, so the texture can be
reproduced later.

The module graph is a DAG. Every distinct object (by identity) receives one
index, assigned in depth-first post-order, so children always precede their
parents. A node shared by several parents is written once and referenced by
its index; loading the file rebuilds it as a single shared instance.

Data Contract:
---------------
- Inputs:
    - describe / write_description: A Renderer (ImageRenderer or
      BlendRenderer).
    - read_description / load_description: A JSON document produced by
      describe().
- Outputs:
    - A JSON-serializable dict, or a reconstructed Renderer.
- Side Effects: write_description creates or overwrites one file.
- Invariants: Loading a description and describing the result again yields
  the same document.
================================================================================
"""

import json
import os
from dataclasses import fields

import numpy as np

from . import config as DEFAULTS
from .builders import PlaneBuilder, SphereBuilder
from .color_maps import Gradient
from .errors import DescriptionError
from .modules import MODULE_TYPES, module_parameters, walk_graph
from .noise import NoiseSource
from .renderers import BlendRenderer, ImageRenderer, LightConfig, Renderer

BUILDER_TYPES = {cls.__name__: cls for cls in (PlaneBuilder, SphereBuilder)}


def description_path(image_path: str) -> str:
    """Replaces the image file's extension with the description extension."""
    root, _ = os.path.splitext(image_path)
    return root + DEFAULTS.DESCRIPTION_EXTENSION


# --- Writing ---

class _Indexer:
    """Assigns one index per distinct object, in first-seen order."""

    def __init__(self):
        self.items = []
        self._index = {}

    def add(self, obj, entry_factory) -> int:
        key = id(obj)
        if key not in self._index:
            entry = entry_factory(obj)
            self._index[key] = len(self.items)
            self.items.append(entry)
        return self._index[key]

    def __contains__(self, obj):
        return id(obj) in self._index

    def get(self, obj) -> int:
        return self._index[id(obj)]


def _builder_parameters(builder) -> dict:
    params = {}
    for f in fields(builder):
        if f.name == "module":
            continue
        value = getattr(builder, f.name)
        if isinstance(value, (bool, np.bool_)):
            params[f.name] = bool(value)
        elif isinstance(value, (int, np.integer)):
            params[f.name] = int(value)
        else:
            params[f.name] = float(value)
    return params


def _light_entry(light):
    if light is None:
        return None
    return {
        "azimuth": float(light.azimuth),
        "elevation": float(light.elevation),
        "contrast": float(light.contrast),
        "brightness": float(light.brightness),
        "color": list(light.color),
        "exaggeration": float(light.exaggeration),
    }


def describe(renderer: Renderer) -> dict:
    """Returns the description document of a renderer and everything it uses."""
    if not isinstance(renderer, Renderer):
        raise TypeError(f"Expected a renderer, got {type(renderer).__name__}")

    sources = _Indexer()
    modules = _Indexer()
    builders = _Indexer()
    renderers = _Indexer()

    def module_entry(node):
        noise = getattr(node, "noise", None)
        return {
            "type": type(node).__name__,
            "params": module_parameters(node),
            "children": [modules.get(child) for child in node.children],
            "noise": None if noise is None else sources.add(noise, lambda s: {"seed": s.seed}),
        }

    def builder_entry(builder):
        for node in walk_graph(builder.module):
            modules.add(node, module_entry)
        return {
            "type": type(builder).__name__,
            "params": _builder_parameters(builder),
            "module": modules.get(builder.module),
        }

    def image_entry(layer):
        return {
            "type": "ImageRenderer",
            "builder": builders.add(layer.builder, builder_entry),
            "gradient": [[position, list(color)] for position, color in layer.gradient.points],
            "light": _light_entry(layer.light),
        }

    if isinstance(renderer, BlendRenderer):
        lower = renderers.add(renderer.lower, image_entry)
        upper = renderers.add(renderer.upper, image_entry)
        root = renderers.add(renderer, lambda r: {"type": "BlendRenderer", "lower": lower, "upper": upper})
    else:
        root = renderers.add(renderer, image_entry)

    return {
        "format": DEFAULTS.DESCRIPTION_FORMAT,
        "version": DEFAULTS.DESCRIPTION_VERSION,
        "noise_sources": sources.items,
        "modules": modules.items,
        "builders": builders.items,
        "renderers": renderers.items,
        "root": root,
    }


def write_description(renderer: Renderer, path: str):
    """Writes the description of a renderer as an indented JSON file."""
    document = describe(renderer)
    with open(path, 'w') as f:
        json.dump(document, f, indent=2)


# --- Reading ---

def _resolve(items, index, kind, limit=None):
    """Looks up an already rebuilt object. Forward references are invalid."""
    limit = len(items) if limit is None else limit
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < limit:
        raise DescriptionError(f"Invalid {kind} reference {index!r}")
    return items[index]


def read_description(document: dict) -> Renderer:
    """Rebuilds the renderer of a description document."""
    try:
        if document.get("format") != DEFAULTS.DESCRIPTION_FORMAT:
            raise DescriptionError(f"Not a texture graph description: {document.get('format')!r}")
        if document.get("version") != DEFAULTS.DESCRIPTION_VERSION:
            raise DescriptionError(f"Unsupported description version {document.get('version')!r}")

        sources = [NoiseSource(entry["seed"]) for entry in document["noise_sources"]]

        modules = []
        for entry in document["modules"]:
            cls = MODULE_TYPES.get(entry["type"])
            if cls is None:
                raise DescriptionError(f"Unknown module type {entry['type']!r}")
            kwargs = dict(entry["params"])
            children = entry.get("children", [])
            if len(children) != len(cls.CHILD_FIELDS):
                raise DescriptionError(
                    f"{entry['type']} expects {len(cls.CHILD_FIELDS)} children, got {len(children)}")
            for name, index in zip(cls.CHILD_FIELDS, children):
                kwargs[name] = _resolve(modules, index, "module")
            if entry.get("noise") is not None:
                kwargs["noise"] = _resolve(sources, entry["noise"], "noise source")
            modules.append(cls(**kwargs))

        builders = []
        for entry in document["builders"]:
            cls = BUILDER_TYPES.get(entry["type"])
            if cls is None:
                raise DescriptionError(f"Unknown builder type {entry['type']!r}")
            module = _resolve(modules, entry["module"], "module")
            builders.append(cls(module=module, **entry["params"]))

        renderers = []
        for entry in document["renderers"]:
            if entry["type"] == "ImageRenderer":
                light = entry.get("light")
                renderers.append(ImageRenderer(
                    builder=_resolve(builders, entry["builder"], "builder"),
                    gradient=Gradient(tuple((p, tuple(c)) for p, c in entry["gradient"])),
                    light=None if light is None else LightConfig(**light),
                ))
            elif entry["type"] == "BlendRenderer":
                renderers.append(BlendRenderer(
                    lower=_resolve(renderers, entry["lower"], "renderer"),
                    upper=_resolve(renderers, entry["upper"], "renderer"),
                ))
            else:
                raise DescriptionError(f"Unknown renderer type {entry['type']!r}")

        return _resolve(renderers, document["root"], "renderer")
    except (KeyError, TypeError, AttributeError) as e:
        raise DescriptionError(f"Malformed description: {e}") from e


def load_description(path: str) -> Renderer:
    """Reads a description file and rebuilds its renderer."""
    with open(path, 'r') as f:
        try:
            document = json.load(f)
        except json.JSONDecodeError as e:
            raise DescriptionError(f"Description file {path} is not valid JSON: {e}") from e
    return read_description(document)
