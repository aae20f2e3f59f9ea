import copy
import logging
import re
from typing import List, Union

from lxml import etree

from utils import NormalizedIcon, SEPARATOR_RE, title_case

SVG_NS = "http://www.w3.org/2000/svg"

TITLE_TERMS_TO_SKIP = {"line", "outline", "solid", "alerted", "badged"}

BADGE_CLASS = "clr-i-badge"
ALERT_CLASS = "clr-i-alert"
STYLE_FILL = "#000000"

VIEWBOX_SPLIT_RE = re.compile(r"[\s,]+")


def _is(elem, localname: str) -> bool:
    # Icons without an xmlns declaration are matched too
    return isinstance(elem.tag, str) and etree.QName(elem).localname == localname


def _elements(parent) -> List[etree._Element]:
    return [c for c in parent if isinstance(c.tag, str)]


def icon_title(name: str) -> str:
    """Title from an icon name: "home-badged-outline" -> "Home".

    Only trailing style terms are dropped; the scan stops at the first word
    that is not one of them."""
    parts = [p for p in SEPARATOR_RE.split(name) if p]
    while parts and parts[-1] in TITLE_TERMS_TO_SKIP:
        parts.pop()
    return title_case(" ".join(parts))


def _number(value: str):
    n = float(value)
    return int(n) if n.is_integer() else n


def icon_size(root: etree._Element, name: str = ""):
    width = root.get("width")
    height = root.get("height")
    if width is not None and height is not None:
        return _number(width), _number(height)

    viewBox = root.get("viewBox")
    if not viewBox:
        raise ValueError(f"{name}: neither width/height nor viewBox found")
    parts = VIEWBOX_SPLIT_RE.split(viewBox.strip())
    if len(parts) != 4:
        raise ValueError(f"{name}: malformed viewBox {viewBox!r}")
    return _number(parts[2]), _number(parts[3])


def style_class(elem: etree._Element) -> str:
    classes = set(elem.get("class", "").split())
    if BADGE_CLASS in classes:
        return "Badge"
    if ALERT_CLASS in classes:
        return "Alert"
    return "Main"


def flatten_groups(children: List[etree._Element]) -> List[etree._Element]:
    """Replace the first <g> with its children until none is left at this level."""
    children = list(children)
    while True:
        idx = next((i for i, c in enumerate(children) if _is(c, "g")), None)
        if idx is None:
            return children
        children[idx : idx + 1] = _elements(children[idx])


def normalize_svg(data: Union[bytes, str], name: str) -> NormalizedIcon:
    """Clean an icon SVG into the form embedded in a draw.io library.

    Title/description and the last background <rect> are dropped, wrapper
    groups are flattened, and every top-level element is given a single
    style class (Main, Badge or Alert) backed by an injected <style> block.
    Raises etree.XMLSyntaxError if the document is not well-formed."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    parser = etree.XMLParser(remove_blank_text=True, remove_comments=True)
    source = etree.fromstring(data, parser)

    children = [
        c for c in _elements(source) if not (_is(c, "title") or _is(c, "desc"))
    ]

    rects = [i for i, c in enumerate(children) if _is(c, "rect")]
    if rects:
        del children[rects[-1]]

    children = flatten_groups(children)

    root = etree.Element(source.tag, attrib=dict(source.attrib), nsmap=source.nsmap)
    style_tag = etree.QName(etree.QName(source).namespace, "style")
    style_elem = etree.SubElement(root, style_tag, type="text/css")

    styles: List[str] = []
    for child in children:
        style = style_class(child)
        if style not in styles:
            styles.append(style)
        child = copy.deepcopy(child)
        child.tail = None
        child.set("class", style)
        root.append(child)

    style_elem.text = " ".join(f".{s} {{ fill: {STYLE_FILL}; }}" for s in styles)

    width, height = icon_size(source, name)
    title = icon_title(name)
    logging.debug(f"Normalized {name} as {title!r} ({width}x{height}, {styles})")
    return NormalizedIcon(root=root, title=title, width=width, height=height)
