import observability.tracing as tracing
from observability.logger import WARNING_EVENTS, format_event


def test_format_event_orders_known_fields():
    line = format_event({"session_id": "s1", "kind": "audio_fallback", "error": "boom", "gateway": "prosody", "trace": "x"})
    assert line == "session=s1 event=audio_fallback gateway=prosody error=boom"
    assert "audio_fallback" in WARNING_EVENTS


def test_span_reports_duration(monkeypatch):
    events = []
    monkeypatch.setattr(tracing, "log_event", lambda kind, session_id, **fields: events.append((kind, session_id, fields)))
    with tracing.span("s1", "llm.continue"):
        pass
    kind, session_id, fields = events[0]
    assert (kind, session_id, fields["node"]) == ("span", "s1", "llm.continue")
    assert fields["ms"] >= 0


def test_span_reports_on_failure(monkeypatch):
    events = []
    monkeypatch.setattr(tracing, "log_event", lambda kind, session_id, **fields: events.append(kind))
    try:
        with tracing.span("s1", "llm.summary"):
            raise RuntimeError("gateway down")
    except RuntimeError:
        pass
    assert events == ["span"]
