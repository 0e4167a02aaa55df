import pytest

from icsfeed.cache import InMemoryCache
from icsfeed.fetcher import StaticFetcher
from icsfeed.pipeline import FeedPipeline
from icsfeed.properties import InMemoryPropertyStore

ICS_URL = "http://calendar.test/feed.ics"

SAMPLE_ICS = "\r\n".join(
    [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Test//EN",
        "BEGIN:VEVENT",
        "SUMMARY:Opening talk",
        "DESCRIPTION:A long description that is folded",
        "  onto a second line",
        "DTSTART;TZID=Europe/Berlin:20240115T100000",
        "URL:http://events.test/one",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "SUMMARY:Workshop",
        "LOCATION:",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "SUMMARY:Closing",
        "URL:http://events.test/missing",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
)

EVENT_PAGE = """
<html><body>
  <div class="event-header"><span class="Speaker-Name">  Ada Lovelace </span></div>
  <p class='room main-room'>Hall A</p>
</body></html>
"""


@pytest.fixture
def fetcher():
    static = StaticFetcher()
    static.add(ICS_URL, SAMPLE_ICS)
    static.add("http://events.test/one", EVENT_PAGE)
    return static


@pytest.fixture
def properties():
    return InMemoryPropertyStore({"ICS_URL": ICS_URL})


@pytest.fixture
def cache():
    return InMemoryCache()


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send(self, recipient, payload):
        self.sent.append((recipient, payload))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def pipeline(properties, cache, fetcher, notifier):
    return FeedPipeline(properties, cache, fetcher, notifier=notifier)
