import base64

import pytest
from pydantic import BaseModel

from iofabric import (
    BadRequest,
    BytesCodec,
    FabricClient,
    FabricConfig,
    LocalApi,
    ModelCodec,
    Receipt,
    TransportError,
)


class Reading(BaseModel):
    tag: str
    value: float


class FakePost:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    async def __call__(self, url, body):
        self.calls.append((url, body))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def config():
    return FabricConfig(host="gateway", port=54321, element_id="element-1")


async def test_send_new_message_returns_receipt(config):
    post = FakePost({"id": "m-1", "timestamp": 42})
    api = LocalApi(config, post)

    receipt = await api.send_new_message(b"abc")

    assert receipt == Receipt(id="m-1", timestamp=42)
    assert post.calls == [
        ("http://gateway:54321/v2/messages/new", {"contentdata": base64.b64encode(b"abc").decode()}),
    ]


async def test_send_new_message_without_receipt(config):
    api = LocalApi(config, FakePost({}))
    assert await api.send_new_message(b"abc") is None


async def test_get_next_messages(config):
    payload = {"messages": [{"tag": "t", "value": 1.5}, {"tag": "u", "value": 2.0}]}
    post = FakePost(payload)
    api = LocalApi(config, post, ModelCodec(Reading))

    messages = await api.get_next_messages()

    assert messages == [Reading(tag="t", value=1.5), Reading(tag="u", value=2.0)]
    assert post.calls == [("http://gateway:54321/v2/messages/next", {"id": "element-1"})]


async def test_get_messages_by_query(config):
    post = FakePost(
        {
            "timeframestart": 10,
            "timeframeend": 20,
            "messages": [{"contentdata": base64.b64encode(b"xyz").decode()}],
        }
    )
    api = LocalApi(config, post)

    result = await api.get_messages_by_query(10, 20, ["pub-a", "pub-b"])

    assert result.timeframestart == 10
    assert result.timeframeend == 20
    assert result.messages == [b"xyz"]
    assert post.calls[0][1] == {
        "id": "element-1",
        "timeframestart": 10,
        "timeframeend": 20,
        "publishers": ["pub-a", "pub-b"],
    }


async def test_get_messages_by_query_requires_list(config):
    post = FakePost()
    api = LocalApi(config, post)
    with pytest.raises(TypeError):
        await api.get_messages_by_query(10, 20, "pub-a")
    assert post.calls == []


async def test_get_config(config):
    api = LocalApi(config, FakePost({"config": '{"threshold": 3}'}, {}))
    assert await api.get_config() == {"threshold": 3}
    assert await api.get_config() is None


async def test_bad_request_propagates(config):
    api = LocalApi(config, FakePost(BadRequest(config.http_url("/v2/config/get"), {"error": "nope"})))
    with pytest.raises(BadRequest) as excinfo:
        await api.get_config()
    assert excinfo.value.body == {"error": "nope"}


def test_model_codec_bytes():
    codec = ModelCodec(Reading)
    reading = Reading(tag="t", value=1.5)
    assert codec.decode(codec.encode(reading)) == reading
    assert codec.load(codec.dump(reading)) == reading


def test_bytes_codec_json_form():
    codec = BytesCodec()
    assert codec.dump(b"\x00\x01") == {"contentdata": "AAE="}
    assert codec.load({"contentdata": "AAE="}) == b"\x00\x01"


async def test_http_transport_round_trip(local_api):
    local_api.body = b'{"id": "m-9", "timestamp": 7}'
    api = LocalApi(local_api.config())

    receipt = await api.send_new_message(b"abc")

    assert receipt == Receipt(id="m-9", timestamp=7)
    assert local_api.requests == [
        ("/v2/messages/new", {"contentdata": base64.b64encode(b"abc").decode()}),
    ]


async def test_http_400_raises_bad_request(local_api):
    local_api.status = 400
    local_api.body = b'{"error": "unknown element"}'
    api = FabricClient(local_api.config()).api()

    with pytest.raises(BadRequest) as excinfo:
        await api.get_next_messages()

    assert excinfo.value.url == f"http://127.0.0.1:{local_api.port}/v2/messages/next"
    assert excinfo.value.body == {"error": "unknown element"}


async def test_http_server_error_is_a_transport_error(local_api):
    local_api.status = 500
    api = LocalApi(local_api.config())

    with pytest.raises(TransportError):
        await api.get_config()


async def test_http_unreachable_daemon_is_a_transport_error():
    api = LocalApi(FabricConfig(host="127.0.0.1", port=1, element_id="element-1"))
    with pytest.raises(TransportError):
        await api.get_config()
