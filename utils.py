from dataclasses import dataclass
import logging
import re
from pathlib import Path
from typing import Tuple

from lxml import etree


COLORS = {
    "DEBUG": "\033[36m",  # cyan
    "INFO": "\033[32m",  # green
    "WARNING": "\033[33m",  # yellow
    "ERROR": "\033[31m",  # red
    "CRITICAL": "\033[1;31m",  # bold red
}
COLOR_RESET = "\033[0m"

SEPARATOR_RE = re.compile(r"[-_]")


class ColorFormatter(logging.Formatter):
    def format(self, record):
        color = COLORS.get(record.levelname, "")
        record.levelname = f"{color}{record.levelname}{COLOR_RESET}"
        return super().format(record)


def setup_logging():
    handler = logging.StreamHandler()
    handler.setFormatter(ColorFormatter("%(levelname)s %(message)s"))
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.INFO)


def title_case(s: str) -> str:
    """Capitalize each whitespace-separated word, lower-casing the rest of it.

    Words written entirely in upper case are kept as they are (acronyms)."""
    words = []
    for word in s.split():
        if word.isupper():
            words.append(word)
        else:
            words.append(word[:1].upper() + word[1:].lower())
    return " ".join(words)


def group_title(namespace: str, name: str) -> str:
    return f"{namespace} - {title_case(SEPARATOR_RE.sub(' ', name))}"


@dataclass(frozen=True)
class IconSource:
    name: str
    data: bytes

    def __post_init__(self):
        if not self.name:
            raise ValueError("Icon name must not be empty")


@dataclass(frozen=True)
class IconGroup:
    title: str
    icons: Tuple[IconSource, ...] = ()


@dataclass(frozen=True)
class NormalizedIcon:
    root: etree._Element
    title: str
    width: float
    height: float


@dataclass(frozen=True)
class IconDescriptor:
    xml: str
    w: float
    h: float
    title: str
    aspect: str = "fixed"


MATERIAL_VARIANTS = (
    "Material Icons",
    "Material Icons Outlined",
    "Material Icons Round",
    "Material Icons Sharp",
    "Material Icons Two Tone",
)


@dataclass(frozen=True)
class Config:
    source: Path = Path("sources/")
    output: Path = Path("library/")
    namespace: str = "Clarity"
    extension: str = ".drawio"
    remote_namespace: str = "Material"
    metadata_url: str = "https://fonts.google.com/metadata/icons"
    family: str = "Material Icons"
    variants: Tuple[str, ...] = MATERIAL_VARIANTS

    def library_path(self, title: str) -> Path:
        return self.output / f"{title}{self.extension}"
