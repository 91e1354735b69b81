"""
Shared pytest fixtures for the PNM editor test suite.

Provides sample images in every PNM variant, ready-made services and a
session with an image already loaded.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pnm_editor.models.image_model import PixelBuffer, PnmFormat  # noqa: E402
from pnm_editor.services.codec_service import CodecService  # noqa: E402
from pnm_editor.services.process_service import ProcessService  # noqa: E402
from pnm_editor.services.session import Session  # noqa: E402


def make_gray(rows, max_color=255, fmt=PnmFormat.ASCII_GRAY) -> PixelBuffer:
    """Build a grayscale buffer from a list of rows."""
    planes = np.array(rows, dtype=np.uint8)[np.newaxis, :, :]
    return PixelBuffer(format=fmt, max_color=max_color, planes=planes)


def make_color(pixels, max_color=255, fmt=PnmFormat.ASCII_COLOR) -> PixelBuffer:
    """Build a color buffer from rows of (r, g, b) tuples."""
    planes = np.array(pixels, dtype=np.uint8).transpose(2, 0, 1).copy()
    return PixelBuffer(format=fmt, max_color=max_color, planes=planes)


# =============================================================================
# Raw PNM Fixtures
# =============================================================================


@pytest.fixture
def p2_2x2() -> bytes:
    return b"P2\n2 2\n255\n10 20\n30 40\n"


@pytest.fixture
def p3_3x3() -> bytes:
    """3x3 color image with distinct values per channel."""
    values = []
    for i in range(9):
        values.extend([i * 10, i * 10 + 1, 200 - i * 5])
    body = " ".join(str(v) for v in values)
    return f"P3\n# made by hand\n3 3\n255\n{body}\n".encode("ascii")


@pytest.fixture
def p5_4x3() -> bytes:
    return b"P5\n4 3\n255\n" + bytes(range(0, 240, 20))


@pytest.fixture
def p6_2x2() -> bytes:
    return b"P6\n2 2\n255\n" + bytes([255, 0, 0, 0, 255, 0, 0, 0, 255, 10, 20, 30])


@pytest.fixture
def gradient_gray() -> PixelBuffer:
    """10x10 grayscale gradient, value = 10*y + x."""
    rows = [[10 * y + x for x in range(10)] for y in range(10)]
    return make_gray(rows)


@pytest.fixture
def random_color() -> PixelBuffer:
    rng = np.random.default_rng(7)
    planes = rng.integers(0, 256, size=(3, 6, 5), dtype=np.uint8)
    return PixelBuffer(format=PnmFormat.BINARY_COLOR, max_color=255, planes=planes)


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def codec() -> CodecService:
    return CodecService()


@pytest.fixture
def processor() -> ProcessService:
    return ProcessService()


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def gray_session(session: Session, codec: CodecService, gradient_gray: PixelBuffer) -> Session:
    """Session with the 10x10 gradient loaded."""
    session.load(codec.encode(gradient_gray, ascii=True))
    return session


@pytest.fixture
def color_session(session: Session, p3_3x3: bytes) -> Session:
    session.load(p3_3x3)
    return session
