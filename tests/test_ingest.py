"""
Ingestion gateway: body parsing, client identifier resolution, hashing, enrichment.
"""

import hashlib
import re

import pytest

from audittrail.errors import MalformedInput
from audittrail.ingest import (
    RequestContext,
    client_identifier,
    hash_identifier,
    ingest,
    parse_body,
)

HEX16 = re.compile(r"^[0-9a-f]{16}$")


class TestParseBody:

    def test_object(self):
        assert parse_body(b'{"eventType": "click"}') == {"eventType": "click"}

    @pytest.mark.parametrize("body", [b"", b"{bad", b"\xff\xfe", b"[1, 2]", b'"text"', b"null"])
    def test_malformed(self, body):
        with pytest.raises(MalformedInput):
            parse_body(body)


class TestClientIdentifier:

    def test_first_forwarded_entry(self):
        ctx = RequestContext.from_headers({"X-Forwarded-For": "203.0.113.5, 10.0.0.1", "X-Real-IP": "10.9.9.9"})
        assert client_identifier(ctx) == "203.0.113.5"

    def test_real_ip_fallback(self):
        ctx = RequestContext.from_headers({"X-Real-IP": "198.51.100.7"})
        assert client_identifier(ctx) == "198.51.100.7"

    def test_unknown_sentinel(self):
        assert client_identifier(RequestContext()) == "unknown"


class TestHashIdentifier:

    def test_deterministic_16_hex(self):
        first = hash_identifier("203.0.113.5")
        assert first == hash_identifier("203.0.113.5")
        assert HEX16.match(first)
        assert first == hashlib.sha256(b"203.0.113.5").hexdigest()[:16]


class TestIngest:

    def _ctx(self, **headers):
        return RequestContext.from_headers(headers)

    def test_enriches_with_server_metadata(self, fixed_clock):
        ctx = RequestContext.from_headers({
            "X-Forwarded-For": "203.0.113.5",
            "User-Agent": "Mozilla/5.0",
            "Referer": "https://example.org/",
        })
        raw = {"eventType": "page_view", "visitorId": "v1", "sessionId": "s1",
               "timestamp": "2024-05-01T12:00:00.000Z", "page": {"path": "/about"}}

        event = ingest(raw, ctx, clock=fixed_clock)

        assert event.event_type == "page_view"
        assert event.visitor_id == "v1"
        assert event.session_id == "s1"
        assert event.payload == {"page": {"path": "/about"}}
        assert event.server.received_at == "2024-05-01T12:30:00.123Z"
        assert event.server.ip_hash == hash_identifier("203.0.113.5")
        assert event.server.user_agent == "Mozilla/5.0"
        assert event.server.referer == "https://example.org/"

    def test_never_stores_raw_identifier(self):
        ctx = RequestContext.from_headers({"X-Forwarded-For": "203.0.113.5"})
        event = ingest({"eventType": "click", "ip": "spoofed"}, ctx)
        wire = event.model_dump_json(by_alias=True)
        assert "203.0.113.5" not in wire
        assert HEX16.match(event.server.ip_hash)

    def test_client_server_block_is_discarded(self):
        raw = {"eventType": "click", "server": {"ipHash": "ffffffffffffffff", "ip": "1.2.3.4"}}
        event = ingest(raw, self._ctx())
        assert "server" not in event.payload
        assert event.server.ip_hash == hash_identifier("unknown")

    def test_referrer_spelling_and_missing_headers(self):
        event = ingest({}, self._ctx(Referrer="https://a.example/"))
        assert event.server.referer == "https://a.example/"
        assert event.server.user_agent == ""

    def test_partial_event_accepted(self):
        event = ingest({}, self._ctx())
        assert event.event_type is None
        assert event.visitor_id is None
        assert event.payload == {}

    def test_legacy_type_key(self):
        event = ingest({"type": "form_submission", "formId": "contact"}, self._ctx())
        assert event.event_type == "form_submission"
        assert event.payload == {"formId": "contact"}

    def test_scalar_ids_coerced_to_text(self):
        event = ingest({"visitorId": 42, "sessionId": {"nested": 1}}, self._ctx())
        assert event.visitor_id == "42"
        assert event.session_id is None

    def test_require_event_type(self):
        with pytest.raises(MalformedInput):
            ingest({"visitorId": "v"}, self._ctx(), require_event_type=True)

    def test_non_mapping_rejected(self):
        with pytest.raises(MalformedInput):
            ingest(["not", "an", "object"], self._ctx())

    def test_payload_is_copied(self):
        raw = {"eventType": "click", "element": {"id": "cta"}}
        event = ingest(raw, self._ctx())
        raw["element"]["id"] = "changed"
        assert event.payload["element"]["id"] == "cta"

    def test_event_is_frozen(self):
        event = ingest({"eventType": "click"}, self._ctx())
        with pytest.raises(Exception):
            event.event_type = "page_view"
