"""Tests for what each block type emits and stores."""

import pytest

from chatflow.config.blocks import TextBlock
from chatflow.core.constants import PLACEHOLDER_IMAGE_URL, MessageKind, RunStatus
from chatflow.core.errors import IntegrationError
from tests.factories import make_block, make_chain


def typing_flags(sink) -> list[bool]:
    """is_typing value of every snapshot, consecutive duplicates collapsed."""
    flags: list[bool] = []
    for state in sink.states:
        if not flags or flags[-1] != state.is_typing:
            flags.append(state.is_typing)
    return flags


class TestMessages:
    """Tests for blocks that only emit."""

    @pytest.mark.asyncio
    async def test_empty_text_falls_back_to_ellipsis(self, make_runner, sink):
        await make_runner(make_chain(TextBlock(id="t"))).start()

        assert sink.contents == ["..."]

    @pytest.mark.asyncio
    async def test_unknown_placeholder_is_shown_verbatim(self, make_runner, sink):
        await make_runner(make_chain(TextBlock(id="t", content="Hi {{name}}"))).start()

        assert sink.contents == ["Hi {{name}}"]

    @pytest.mark.asyncio
    async def test_image_without_url_uses_placeholder(self, make_runner, sink):
        await make_runner(make_chain(make_block("Image", "img"))).start()

        message = sink.latest.last_message
        assert message.kind is MessageKind.IMAGE
        assert message.content == PLACEHOLDER_IMAGE_URL
        assert message.attachment == {"url": PLACEHOLDER_IMAGE_URL}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "block_type,kind", [("Audio", MessageKind.AUDIO), ("Video", MessageKind.VIDEO)]
    )
    async def test_media_messages(self, make_runner, sink, block_type, kind):
        block = make_block(block_type, "media", url="https://cdn.test/file")

        await make_runner(make_chain(block)).start()

        message = sink.latest.last_message
        assert message.kind is kind
        assert message.content == "https://cdn.test/file"

    @pytest.mark.asyncio
    async def test_document_uses_filename(self, make_runner, sink):
        block = make_block("Document", "doc", url="https://cdn.test/a.pdf", filename="Menu.pdf")

        await make_runner(make_chain(block)).start()

        message = sink.latest.last_message
        assert message.content == "Menu.pdf"
        assert message.kind is MessageKind.DOCUMENT
        assert message.attachment == {"url": "https://cdn.test/a.pdf", "filename": "Menu.pdf"}

    @pytest.mark.asyncio
    async def test_document_without_filename(self, make_runner, sink):
        await make_runner(make_chain(make_block("Document", "doc"))).start()

        assert sink.contents == ["Document"]

    @pytest.mark.asyncio
    async def test_location_attaches_coordinates(self, make_runner, sink):
        block = make_block(
            "Location", "loc", latitude=-23.55, longitude="-46.63", name="", address="Av. Paulista"
        )

        await make_runner(make_chain(block)).start()

        message = sink.latest.last_message
        assert message.content == "Location"
        assert message.kind is MessageKind.LOCATION
        assert message.attachment["latitude"] == "-23.55"
        assert message.attachment["address"] == "Av. Paulista"

    @pytest.mark.asyncio
    async def test_template_lists_variables(self, make_runner, sink):
        block = make_block("Template", "tpl", templateName="order_update", variables="name, id")

        await make_runner(make_chain(block)).start()

        message = sink.latest.last_message
        assert message.content == "Using template: order_update"
        assert message.attachment == {"templateName": "order_update", "variables": ["name", "id"]}


class TestDelay:
    """Tests for Delay blocks."""

    @pytest.mark.asyncio
    async def test_delay_toggles_typing(self, make_runner, sink):
        graph = make_chain(make_block("Delay", "wait", seconds=0), TextBlock(id="t", content="Done"))

        await make_runner(graph).start()

        assert typing_flags(sink) == [False, True, False]
        assert sink.contents == ["Done"]

    @pytest.mark.asyncio
    async def test_negative_delay_sleeps_zero(self, make_runner, monkeypatch):
        delays: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            delays.append(seconds)

        monkeypatch.setattr("chatflow.runtime.runner.asyncio.sleep", fake_sleep)

        await make_runner(make_chain(make_block("Delay", "wait", seconds=-5))).start()

        assert delays == [0.0]


class TestIntegration:
    """Tests for Integration blocks."""

    def make_flow(self, **fields):
        fields.setdefault("url", "https://api.test/users/{{user_id}}")
        fields.setdefault("variableToSave", "api_result")
        return make_chain(
            make_block("SaveResponse", "ask", message="Id?", variableToSave="user_id"),
            make_block("Integration", "api", **fields),
            TextBlock(id="after", content="Result: {{api_result}}"),
        )

    @pytest.mark.asyncio
    async def test_stores_response_and_resolves_request(self, make_runner, sink, http_client):
        runner = make_runner(
            self.make_flow(
                method="post",
                headers='{"X-User": "{{user_id}}"}',
                body='{"id": "{{user_id}}"}',
            )
        )
        await runner.start()

        status = await runner.provide_input("42")

        assert status is RunStatus.FINISHED
        http_client.request.assert_awaited_once_with(
            "https://api.test/users/42", "POST", {"X-User": "42"}, {"id": "42"}
        )
        assert runner.variables["api_result"] == {"status": "ok"}
        assert sink.contents[-1] == 'Result: {\n  "status": "ok"\n}'

    @pytest.mark.asyncio
    async def test_blank_body_sends_none(self, make_runner, http_client):
        runner = make_runner(self.make_flow())
        await runner.start()

        await runner.provide_input("7")

        http_client.request.assert_awaited_once_with("https://api.test/users/7", "GET", {}, None)

    @pytest.mark.asyncio
    async def test_malformed_body_skips_call_and_continues(self, make_runner, sink, http_client):
        runner = make_runner(self.make_flow(body="{not json"))
        await runner.start()

        status = await runner.provide_input("7")

        assert status is RunStatus.FINISHED
        http_client.request.assert_not_awaited()
        assert "api_result" not in runner.variables
        assert sink.contents[-1] == "Result: {{api_result}}"

    @pytest.mark.asyncio
    async def test_non_object_headers_skip_call(self, make_runner, http_client):
        runner = make_runner(self.make_flow(headers="[1, 2]"))
        await runner.start()

        await runner.provide_input("7")

        http_client.request.assert_not_awaited()
        assert "api_result" not in runner.variables

    @pytest.mark.asyncio
    async def test_http_failure_continues_without_result(self, make_runner, sink, http_client):
        http_client.request.side_effect = IntegrationError("connection refused")
        runner = make_runner(self.make_flow())
        await runner.start()

        status = await runner.provide_input("7")

        assert status is RunStatus.FINISHED
        assert "api_result" not in runner.variables
        assert sink.latest.is_typing is False

    @pytest.mark.asyncio
    async def test_raw_text_response_is_stored(self, make_runner, http_client):
        http_client.request.return_value = "plain body"
        runner = make_runner(self.make_flow())
        await runner.start()

        await runner.provide_input("7")

        assert runner.variables["api_result"] == "plain body"

    @pytest.mark.asyncio
    async def test_typing_indicator_wraps_call(self, make_runner, sink):
        runner = make_runner(make_chain(make_block("Integration", "api", url="https://api.test")))

        await runner.start()

        assert typing_flags(sink) == [False, True, False]


class TestAICall:
    """Tests for AICall blocks."""

    @pytest.mark.asyncio
    async def test_reply_is_stored_and_emitted(self, make_runner, sink, completion):
        runner = make_runner(
            make_chain(
                make_block("SaveResponse", "ask", message="Topic?", variableToSave="topic"),
                make_block("AICall", "ai", prompt="Write about {{topic}}", variableToSave="reply"),
            )
        )
        await runner.start()

        status = await runner.provide_input("tea")

        assert status is RunStatus.FINISHED
        completion.generate.assert_awaited_once_with("Write about tea")
        assert runner.variables["reply"] == "Generated reply"
        assert sink.contents[-1] == "Generated reply"
        assert sink.latest.is_typing is False

    @pytest.mark.asyncio
    async def test_reply_without_variable_is_only_emitted(self, make_runner, sink):
        runner = make_runner(make_chain(make_block("AICall", "ai", prompt="hi")))

        await runner.start()

        assert runner.variables == {}
        assert sink.contents == ["Generated reply"]

    @pytest.mark.asyncio
    async def test_failure_emits_nothing(self, make_runner, sink, completion):
        completion.generate.side_effect = RuntimeError("boom")
        runner = make_runner(
            make_chain(
                make_block("AICall", "ai", prompt="hi", variableToSave="reply"),
                TextBlock(id="t", content="Next"),
            )
        )

        status = await runner.start()

        assert status is RunStatus.FINISHED
        assert sink.contents == ["Next"]
        assert "reply" not in runner.variables
