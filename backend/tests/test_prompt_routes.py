import pytest

pytest.importorskip("fastapi", reason="fastapi not installed")

from fastapi.testclient import TestClient

from prompt_gateway.core.settings import AppSettings
from prompt_gateway.main import create_app

from fakes import FakeInferenceClient, titan_body, titan_chunk


def _settings():
    return AppSettings(
        aws_access_key_id="test-access-key",
        aws_secret_access_key="test-secret-key",
        aws_url="https://bedrock-runtime.eu-west-1.amazonaws.com",
    )


def _client(fake):
    return TestClient(create_app(settings=_settings(), inference_client=fake))


def test_root_greets():
    resp = _client(FakeInferenceClient()).get("/")
    assert resp.status_code == 200
    assert resp.text == "Hello, world!"


def test_health():
    resp = _client(FakeInferenceClient()).get("/health")
    assert resp.json() == {"status": "ok"}


def test_prompt_returns_first_result_text():
    fake = FakeInferenceClient(body=titan_body("General Kenobi", "ignored"))
    resp = _client(fake).post("/prompt", json={"prompt": "Hello there"})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.text == "General Kenobi"
    assert b'"inputText":"Hello there"' in fake.payloads[0]


def test_prompt_malformed_provider_body_is_500():
    resp = _client(FakeInferenceClient(body=b"<html>")).post("/prompt", json={"prompt": "hi"})
    assert resp.status_code == 500


def test_prompt_without_results_is_500():
    fake = FakeInferenceClient(body=b'{"inputTextTokenCount": 1, "results": []}')
    resp = _client(fake).post("/prompt", json={"prompt": "hi"})
    assert resp.status_code == 500


def test_prompt_upstream_failure_is_502():
    resp = _client(FakeInferenceClient(fail=True)).post("/prompt", json={"prompt": "hi"})
    assert resp.status_code == 502


def test_prompt_requires_prompt_field():
    resp = _client(FakeInferenceClient()).post("/prompt", json={"text": "hi"})
    assert resp.status_code == 422


def test_streamed_prompt_relays_fragments_in_order():
    fake = FakeInferenceClient(events=[titan_chunk("The "), titan_chunk("quick "), titan_chunk("fox")])
    client = _client(fake)

    with client.stream("POST", "/prompt/streamed", json={"prompt": "go"}) as resp:
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        body = "".join(resp.iter_text())

    assert body == "The quick fox"
    assert fake.stream.close_calls == 1


def test_streamed_prompt_ends_early_on_bad_chunk():
    events = [titan_chunk("one "), titan_chunk("two "), {"chunk": {"bytes": b"nope"}}, titan_chunk("four")]
    fake = FakeInferenceClient(events=events)

    resp = _client(fake).post("/prompt/streamed", json={"prompt": "count"})

    assert resp.status_code == 200
    assert resp.text == "one two "
    assert fake.stream.pulls == 3


def test_streamed_prompt_with_empty_stream_has_empty_body():
    resp = _client(FakeInferenceClient(events=[])).post("/prompt/streamed", json={"prompt": "quiet"})
    assert resp.status_code == 200
    assert resp.text == ""


def test_streamed_prompt_upstream_failure_before_streaming_is_502():
    resp = _client(FakeInferenceClient(fail=True)).post("/prompt/streamed", json={"prompt": "hi"})
    assert resp.status_code == 502


def test_metrics_expose_stream_counters():
    client = _client(FakeInferenceClient(events=[titan_chunk("x")]))
    client.post("/prompt/streamed", json={"prompt": "hi"})

    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "prompt_stream_fragments_total" in resp.text
    assert 'prompt_stream_terminations_total{outcome="completed"}' in resp.text


@pytest.mark.parametrize("path", ["/prompt", "/prompt/streamed"])
def test_encoding_failure_is_400(monkeypatch, path):
    from prompt_gateway.api import prompt_routes
    from prompt_gateway.core.errors import EncodingError

    def broken_encode(prompt):
        raise EncodingError("unserializable prompt")

    monkeypatch.setattr(prompt_routes, "encode", broken_encode)
    fake = FakeInferenceClient(body=titan_body("never"))

    resp = _client(fake).post(path, json={"prompt": "hi"})

    assert resp.status_code == 400
    assert fake.payloads == []
