"""Shared fakes: in-memory transports that stand in for the classification service."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import json

import pytest

from pii_anonymizer.classifier import CONNECT_ENDPOINT
from pii_anonymizer.store import MemoryStore
from pii_anonymizer.transport import TransportError, TransportResponse


class FakeClassifier:
    """Answers batches from a fixed term → results table and records every call."""

    def __init__(self, known=None, statuses=None):
        self.known = known or {}
        # url suffix → status to return instead of answering
        self.statuses = statuses or {}
        self.calls = []

    def post(self, url, body, headers):
        payload = json.loads(body)
        self.calls.append({"url": url, "terms": payload["terms"],
                           "jurisdictions": payload["jurisdictions"], "headers": headers})
        for suffix, status in self.statuses.items():
            if url.endswith(suffix):
                return TransportResponse(status=status, body="")
        answer = {t: self.known[t] for t in payload["terms"] if t in self.known}
        return TransportResponse(status=200, body=json.dumps({"classifications": answer}))

    @property
    def sent_terms(self):
        return [t for call in self.calls for t in call["terms"]]


class FailingTransport:
    """Every request fails before an HTTP response exists."""

    def __init__(self):
        self.calls = 0

    def post(self, url, body, headers):
        self.calls += 1
        raise TransportError("connection refused")


class RawTransport:
    """Returns the same canned response for every request."""

    def __init__(self, status, body):
        self.response = TransportResponse(status=status, body=body)
        self.calls = 0

    def post(self, url, body, headers):
        self.calls += 1
        return self.response


def match(dictionary, type_, jurisdiction="fr"):
    return {"dict": dictionary, "match": True, "type": type_, "jurisdiction": jurisdiction}


SURNAME = match("fr_surnames", "surname")
CITY = match("fr_communes", "city")


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def classifier():
    return FakeClassifier({"Dupont": [SURNAME], "Lyon": [CITY]})


@pytest.fixture
def connect_404():
    return FakeClassifier({"Dupont": [SURNAME]}, statuses={CONNECT_ENDPOINT.path: 404})
