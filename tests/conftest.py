"""Pytest configuration and fixtures"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from utils import Config

SVG_NS = "http://www.w3.org/2000/svg"


def svg_doc(body: str, attrs: str = 'width="36" height="36" viewBox="0 0 36 36"') -> bytes:
    return f'<svg xmlns="{SVG_NS}" {attrs}>{body}</svg>'.encode("utf-8")


@pytest.fixture
def config(tmp_path):
    return Config(source=tmp_path / "sources", output=tmp_path / "library")
