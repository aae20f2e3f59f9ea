"""Pack normalized icons into draw.io library files (<mxlibrary> with a JSON array)."""

import base64
import dataclasses
import json
import logging
import zlib
from pathlib import Path
from typing import Iterable
from urllib.parse import quote, unquote
from xml.sax.saxutils import escape

from lxml import etree

from utils import IconDescriptor, NormalizedIcon

SHAPE_STYLE = (
    "shape=image;editableCssRules=.*;verticalLabelPosition=bottom;verticalAlign=top;"
    "imageAspect=0;aspect=fixed;image=data:image/svg+xml,{image};fillColor=#000000;"
)


def svg_string(icon: NormalizedIcon) -> str:
    return etree.tostring(icon.root, encoding="unicode")


def graph_model(icon: NormalizedIcon) -> str:
    """The mxGraphModel holding a single image cell with the icon as a data URI."""
    image = base64.b64encode(svg_string(icon).encode("utf-8")).decode("ascii")

    model = etree.Element("mxGraphModel")
    root = etree.SubElement(model, "root")
    etree.SubElement(root, "mxCell", id="0")
    etree.SubElement(root, "mxCell", id="1", parent="0")
    cell = etree.SubElement(root, "mxCell")
    # Attribute order is kept in the output
    cell.set("id", "2")
    cell.set("value", "")
    cell.set("style", SHAPE_STYLE.format(image=image))
    cell.set("vertex", "1")
    cell.set("parent", "1")
    geometry = etree.SubElement(cell, "mxGeometry")
    geometry.set("width", str(icon.width))
    geometry.set("height", str(icon.height))
    geometry.set("as", "geometry")
    return etree.tostring(model, encoding="unicode")


def encode_payload(model: str) -> str:
    # Raw deflate stream, no zlib header or checksum
    compressor = zlib.compressobj(9, zlib.DEFLATED, -15)
    data = quote(model, safe="").encode("utf-8")
    compressed = compressor.compress(data) + compressor.flush()
    return base64.b64encode(compressed).decode("ascii")


def decode_payload(payload: str) -> str:
    data = zlib.decompress(base64.b64decode(payload), -15)
    return unquote(data.decode("utf-8"))


def encode_icon(icon: NormalizedIcon) -> IconDescriptor:
    return IconDescriptor(
        xml=encode_payload(graph_model(icon)),
        w=icon.width,
        h=icon.height,
        title=icon.title,
    )


def library_text(title: str, descriptors: Iterable[IconDescriptor]) -> str:
    entries = json.dumps(
        [dataclasses.asdict(d) for d in descriptors],
        separators=(",", ":"),
        ensure_ascii=False,
    )
    quoted_title = escape(title, {"'": "&apos;"})
    return f"<mxlibrary title='{quoted_title}'>{escape(entries)}</mxlibrary>"


def write_library(output: Path, title: str, descriptors: Iterable[IconDescriptor]):
    descriptors = list(descriptors)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(library_text(title, descriptors), encoding="utf-8")
    logging.info(f"Wrote {len(descriptors)} icons to {output}")
