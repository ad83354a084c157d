"""
Shared fixtures for the POD Assistant tests.

The vision verifier and general assistant are replaced by in-process
fakes; the docket store runs on a temporary SQLite file.
"""

import asyncio
import io
from typing import Dict, List, Optional

import pytest
from PIL import Image

from PODAssistant.agents.base import AgentResult, GeneralAssistant, VisionVerifier
from PODAssistant.docket_store import DocketStore
from PODAssistant.engine import WorkflowEngine
from PODAssistant.images import PODImage, image_from_bytes


def make_png_bytes(w=64, h=48, color=(255, 255, 255)) -> bytes:
    """Create a small synthetic PNG."""
    img = Image.new("RGB", (w, h), color=color)
    # Dark band simulating a signature
    for x in range(8, 56):
        for y in range(30, 34):
            img.putpixel((x, y), (0, 0, 0))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class FakeVerifier(VisionVerifier):
    """Returns queued results in order; records every call."""

    def __init__(self, results: Optional[List[AgentResult]] = None):
        self.results = list(results or [])
        self.calls: List[Dict[str, str]] = []

    async def analyze(self, image: PODImage, context: Dict[str, str]) -> AgentResult:
        self.calls.append(dict(context))
        if self.results:
            return self.results.pop(0)
        return AgentResult(response="This POD is good. Signature found.")


class GatedVerifier(VisionVerifier):
    """Blocks each call until the test releases it with a verdict."""

    def __init__(self):
        self.calls: List[Dict[str, str]] = []
        self._gates: List[asyncio.Event] = []
        self._verdicts: List[Optional[AgentResult]] = []

    async def analyze(self, image: PODImage, context: Dict[str, str]) -> AgentResult:
        index = len(self.calls)
        self.calls.append(dict(context))
        gate = asyncio.Event()
        self._gates.append(gate)
        self._verdicts.append(None)
        await gate.wait()
        return self._verdicts[index]

    def release(self, index: int, result: AgentResult) -> None:
        self._verdicts[index] = result
        self._gates[index].set()


class FakeAssistant(GeneralAssistant):
    def __init__(self, result: Optional[AgentResult] = None):
        self.result = result or AgentResult(response="Happy to help with your deliveries.")
        self.calls: List[str] = []

    async def respond(self, utterance: str) -> AgentResult:
        self.calls.append(utterance)
        return self.result


async def wait_for(predicate, attempts=200):
    """Yield to the event loop until ``predicate()`` holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0.01)
    raise AssertionError("condition not reached")


@pytest.fixture
def store(tmp_path):
    s = DocketStore(str(tmp_path / "dockets.db"))
    yield s
    s.close()


@pytest.fixture
def pod_image() -> PODImage:
    return image_from_bytes(make_png_bytes(), source="pod.png")


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def assistant():
    return FakeAssistant()


@pytest.fixture
def engine(store, verifier, assistant):
    return WorkflowEngine(store=store, verifier=verifier, assistant=assistant)


@pytest.fixture
def gated_verifier():
    return GatedVerifier()


@pytest.fixture
def make_engine(store, assistant):
    """Factory for engines with a custom verifier / assistant / store."""

    def _make(verifier=None, assistant_=None, store_=None):
        return WorkflowEngine(
            store=store_ if store_ is not None else store,
            verifier=verifier if verifier is not None else FakeVerifier(),
            assistant=assistant_ if assistant_ is not None else assistant,
        )

    return _make


@pytest.fixture(name="wait_for")
def wait_for_fixture():
    return wait_for
