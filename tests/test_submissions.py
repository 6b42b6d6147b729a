import asyncio
import pytest
from phishguard.schemas import AnalysisResult, RiskLevel
from phishguard.service import SubmissionTracker, Superseded

DETAILS = {k: "n/a" for k in ["domainAge", "domainAnalysis", "urlStructure", "contentClues", "threatIntelligence"]}


class GatedAnalyzer:
    """Each analysis waits until its URL's gate is opened."""

    def __init__(self):
        self.gates = {}

    async def analyze(self, url):
        gate = self.gates.setdefault(url, asyncio.Event())
        await gate.wait()
        return AnalysisResult(url=url, riskLevel=RiskLevel.SAFE, summary="ok", score=1, details=DETAILS)

    def open(self, url):
        self.gates.setdefault(url, asyncio.Event()).set()


async def test_newer_submission_supersedes_older():
    analyzer = GatedAnalyzer()
    tracker = SubmissionTracker(analyzer)

    first = asyncio.ensure_future(tracker.submit("alice", "https://a.example"))
    await asyncio.sleep(0)
    second = asyncio.ensure_future(tracker.submit("alice", "https://b.example"))
    await asyncio.sleep(0)
    analyzer.open("https://b.example")

    with pytest.raises(Superseded):
        await first
    result = await second
    assert result.url == "https://b.example"


async def test_owners_do_not_interfere():
    analyzer = GatedAnalyzer()
    tracker = SubmissionTracker(analyzer)

    first = asyncio.ensure_future(tracker.submit("alice", "https://a.example"))
    second = asyncio.ensure_future(tracker.submit("bob", "https://b.example"))
    await asyncio.sleep(0)
    analyzer.open("https://a.example")
    analyzer.open("https://b.example")

    assert (await first).url == "https://a.example"
    assert (await second).url == "https://b.example"


async def test_completed_submission_is_forgotten():
    analyzer = GatedAnalyzer()
    analyzer.open("https://a.example")
    tracker = SubmissionTracker(analyzer)

    await tracker.submit("alice", "https://a.example")
    assert tracker._inflight == {}
