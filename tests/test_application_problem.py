"""
Tests for the problem application layer (use cases and exchange hooks).

Use cases run against FakeHttpHost. No real host runtime needed.
"""

import json
import logging

import pytest

from fakes import FakeHttpHost, deliver_body, request_headers
from meshproblem.application.problem import transform_body
from meshproblem.application.problem.capture_request_metadata import (
    CaptureRequestMetadataUseCase,
)
from meshproblem.application.problem.exchange import (
    PassThroughHooks,
    ProblemDetailsExchange,
)
from meshproblem.application.problem.gate_response import ResponseGateUseCase
from meshproblem.application.problem.local_reply import BuildLocalReplyUseCase
from meshproblem.application.problem.plugin import ProblemDetailsPlugin
from meshproblem.application.problem.transform_body import TransformBodyUseCase
from meshproblem.domain.problem.defaults import DEFAULTS
from meshproblem.domain.problem.entities import (
    Action,
    BodyState,
    ExchangeContext,
    PluginConfiguration,
)
from meshproblem.domain.problem.errors import ConfigError

TARGETED = PluginConfiguration(target_url_prefixes=("my-host.com",))


def _exchange(request_url: str = "https://my-host.com/", **fields) -> ExchangeContext:
    return ExchangeContext(configuration=TARGETED, request_url=request_url, **fields)


def _armed_exchange(status_code: int = 503) -> ExchangeContext:
    return _exchange(
        request_path="/foo",
        trace_id="trace-1",
        status_code=status_code,
        modify_response=True,
        body_state=BodyState.ACCUMULATING,
    )


class TestCaptureRequestMetadata:
    """Tests for request URL and trace id capture."""

    def test_request_url_and_path(self) -> None:
        """The URL is scheme, authority and path; instance keeps the query."""
        host = FakeHttpHost(request_headers("/foo/bar?x=1"))
        exchange = _exchange(request_url="")
        action = CaptureRequestMetadataUseCase().execute(host, exchange)
        assert action is Action.CONTINUE
        assert exchange.request_url == "https://my-host.com/foo/bar?x=1"
        assert exchange.request_path == "/foo/bar?x=1"

    def test_traceparent_wins_over_request_id(self) -> None:
        """traceparent is preferred when both trace headers are present."""
        host = FakeHttpHost(request_headers(traceparent="A", x_request_id="B"))
        exchange = _exchange()
        CaptureRequestMetadataUseCase().execute(host, exchange)
        assert exchange.trace_id == "A"

    def test_request_id_used_without_traceparent(self) -> None:
        """x-request-id is used when traceparent is absent."""
        host = FakeHttpHost(request_headers(x_request_id="B"))
        exchange = _exchange()
        CaptureRequestMetadataUseCase().execute(host, exchange)
        assert exchange.trace_id == "B"

    def test_empty_traceparent_falls_through(self) -> None:
        """An empty traceparent does not count as a trace id."""
        host = FakeHttpHost(request_headers(traceparent="", x_request_id="B"))
        exchange = _exchange()
        CaptureRequestMetadataUseCase().execute(host, exchange)
        assert exchange.trace_id == "B"

    def test_default_trace_id_without_headers(self) -> None:
        """Without trace headers the fixed default is used."""
        host = FakeHttpHost(request_headers())
        exchange = _exchange()
        CaptureRequestMetadataUseCase().execute(host, exchange)
        assert exchange.trace_id == DEFAULTS.trace_id

    def test_failed_reads_become_empty_strings(self, caplog) -> None:
        """Failed pseudo-header reads are logged and replaced with ""."""
        host = FakeHttpHost(failing={"get_request_header"})
        exchange = _exchange(request_url="")
        with caplog.at_level(logging.ERROR):
            action = CaptureRequestMetadataUseCase().execute(host, exchange)
        assert action is Action.CONTINUE
        assert exchange.request_url == "://"
        assert exchange.request_path == ""
        assert exchange.trace_id == DEFAULTS.trace_id
        assert "failed to get request header :scheme" in caplog.text


class TestResponseGate:
    """Tests for the response eligibility decision."""

    def test_eligible_response_is_armed(self, caplog) -> None:
        """An eligible response has its headers rewritten and the body armed."""
        host = FakeHttpHost(
            response_headers={
                ":status": "503",
                "content-type": "text/plain",
                "content-length": "12",
            }
        )
        exchange = _exchange()
        with caplog.at_level(logging.INFO):
            action = ResponseGateUseCase().execute(host, exchange)
        assert action is Action.CONTINUE
        assert exchange.modify_response is True
        assert exchange.body_state is BodyState.ACCUMULATING
        assert exchange.status_code == 503
        assert host.response_headers == {
            ":status": "503",
            "content-type": "application/problem+json",
        }
        assert "Response eligible for modification to rfc9457 format" in caplog.text

    def test_status_outside_range_is_untouched(self) -> None:
        """A 200 leaves headers alone and nothing armed."""
        host = FakeHttpHost(response_headers={":status": "200", "content-length": "2"})
        exchange = _exchange()
        ResponseGateUseCase().execute(host, exchange)
        assert exchange.modify_response is False
        assert host.response_headers == {":status": "200", "content-length": "2"}

    @pytest.mark.parametrize("status", ["403", "501"])
    def test_configured_range_bounds(self, status: str) -> None:
        """Both ends of the configured range are inclusive."""
        configuration = PluginConfiguration(
            target_url_prefixes=("my-host.com",),
            start_status_code=404,
            end_status_code=500,
        )
        host = FakeHttpHost(response_headers={":status": status})
        exchange = ExchangeContext(
            configuration=configuration, request_url="https://my-host.com/"
        )
        ResponseGateUseCase().execute(host, exchange)
        assert exchange.modify_response is False

    def test_unmatched_url_is_untouched(self) -> None:
        """A URL without a target prefix is not armed."""
        host = FakeHttpHost(response_headers={":status": "500"})
        exchange = _exchange(request_url="https://other.com/")
        ResponseGateUseCase().execute(host, exchange)
        assert exchange.modify_response is False
        assert "content-type" not in host.response_headers

    def test_already_problem_json_is_left_alone(self) -> None:
        """Problem JSON responses keep content-length and are not armed."""
        headers = {
            ":status": "404",
            "content-type": "application/problem+json",
            "content-length": "40",
        }
        host = FakeHttpHost(response_headers=headers)
        exchange = _exchange()
        ResponseGateUseCase().execute(host, exchange)
        assert exchange.modify_response is False
        assert exchange.body_state is BodyState.IDLE
        assert host.response_headers == headers

    def test_unparsable_status_is_out_of_range(self) -> None:
        """A non-numeric status is treated as 0."""
        host = FakeHttpHost(response_headers={":status": "fivehundred"})
        exchange = _exchange()
        action = ResponseGateUseCase().execute(host, exchange)
        assert action is Action.CONTINUE
        assert exchange.status_code == 0
        assert exchange.modify_response is False

    def test_missing_status_is_out_of_range(self) -> None:
        """A missing status is treated as 0."""
        host = FakeHttpHost(response_headers={})
        exchange = _exchange()
        ResponseGateUseCase().execute(host, exchange)
        assert exchange.status_code == 0
        assert exchange.modify_response is False

    def test_content_type_write_failure_skips_rewrite(self) -> None:
        """A failed content-type write leaves the body untouched."""
        host = FakeHttpHost(
            response_headers={":status": "500"}, failing={"replace_response_header"}
        )
        exchange = _exchange()
        action = ResponseGateUseCase().execute(host, exchange)
        assert action is Action.CONTINUE
        assert exchange.modify_response is False
        assert exchange.body_state is BodyState.IDLE

    def test_content_length_removal_failure_still_arms(self) -> None:
        """A failed content-length removal is logged and the rewrite continues."""
        host = FakeHttpHost(
            response_headers={":status": "500"}, failing={"remove_response_header"}
        )
        exchange = _exchange()
        ResponseGateUseCase().execute(host, exchange)
        assert exchange.modify_response is True


class TestTransformBody:
    """Tests for the body accumulation and rewrite state machine."""

    def test_idle_passes_chunks_through(self) -> None:
        """Chunks pass through when no rewrite is armed."""
        host = FakeHttpHost()
        host.body.extend(b"upstream")
        exchange = _exchange()
        action = TransformBodyUseCase().execute(host, exchange, 8, False)
        assert action is Action.CONTINUE
        assert exchange.total_response_body_size == 0
        assert bytes(host.body) == b"upstream"

    def test_accumulating_pauses_until_end_of_stream(self) -> None:
        """Chunks are held until the last one arrives."""
        host = FakeHttpHost()
        exchange = _armed_exchange()
        use_case = TransformBodyUseCase()
        host.body.extend(b"first ")
        assert use_case.execute(host, exchange, 6, False) is Action.PAUSE
        assert exchange.body_state is BodyState.ACCUMULATING
        host.body.extend(b"second")
        assert use_case.execute(host, exchange, 6, True) is Action.CONTINUE
        assert exchange.total_response_body_size == 12
        assert exchange.body_state is BodyState.DONE
        assert json.loads(host.body)["detail"] == "first second"

    def test_rewritten_document(self, caplog) -> None:
        """The final chunk replaces the body with the problem document."""
        host = FakeHttpHost()
        host.body.extend(b"no healthy upstream")
        exchange = _armed_exchange(503)
        with caplog.at_level(logging.INFO):
            TransformBodyUseCase().execute(host, exchange, 19, True)
        assert json.loads(host.body) == {
            "type": DEFAULTS.problem_type_uris["503"],
            "title": "service mesh returned an error",
            "status": 503,
            "instance": "/foo",
            "trace_id": "trace-1",
            "detail": "no healthy upstream",
        }
        assert "Successfully transformed the response to rfc9457 format" in caplog.text

    def test_done_is_terminal(self) -> None:
        """Chunks after the rewrite pass through untouched."""
        host = FakeHttpHost()
        host.body.extend(b"x")
        exchange = _armed_exchange()
        use_case = TransformBodyUseCase()
        use_case.execute(host, exchange, 1, True)
        rewritten = bytes(host.body)
        assert use_case.execute(host, exchange, 0, True) is Action.CONTINUE
        assert bytes(host.body) == rewritten

    def test_body_read_failure_fails_open(self) -> None:
        """A failed body read keeps the original body."""
        host = FakeHttpHost(failing={"get_response_body"})
        host.body.extend(b"original")
        exchange = _armed_exchange()
        action = TransformBodyUseCase().execute(host, exchange, 8, True)
        assert action is Action.CONTINUE
        assert bytes(host.body) == b"original"
        assert exchange.body_state is BodyState.DONE

    def test_body_replace_failure_fails_open(self) -> None:
        """A failed body write keeps the original body."""
        host = FakeHttpHost(failing={"replace_response_body"})
        host.body.extend(b"original")
        action = TransformBodyUseCase().execute(host, _armed_exchange(), 8, True)
        assert action is Action.CONTINUE
        assert bytes(host.body) == b"original"

    def test_serialization_failure_fails_open(self, monkeypatch) -> None:
        """A serialization error keeps the original body."""
        def _broken(problem):
            raise ValueError("cannot encode")

        monkeypatch.setattr(transform_body, "serialize_problem_response", _broken)
        host = FakeHttpHost()
        host.body.extend(b"original")
        action = TransformBodyUseCase().execute(host, _armed_exchange(), 8, True)
        assert action is Action.CONTINUE
        assert bytes(host.body) == b"original"

    def test_detail_survives_json_special_characters(self) -> None:
        """Quotes, backslashes and newlines are escaped losslessly."""
        original = 'quote " backslash \\ newline \n tab \t unicode é'.encode("utf-8")
        host = FakeHttpHost()
        host.body.extend(original)
        TransformBodyUseCase().execute(host, _armed_exchange(), len(original), True)
        assert json.loads(host.body)["detail"].encode("utf-8") == original

    def test_unknown_status_class_has_empty_type(self) -> None:
        """Statuses outside 4xx and 5xx resolve to an empty type."""
        host = FakeHttpHost()
        exchange = _armed_exchange(status_code=302)
        TransformBodyUseCase().execute(host, exchange, 0, True)
        assert json.loads(host.body)["type"] == ""


class TestProblemDetailsExchange:
    """Tests for the exchange hooks driven in host order."""

    def _run(self, plugin, request, response, chunks):
        """Drive every hook in host order and return the host and body actions."""
        host = FakeHttpHost(request, response)
        exchange = plugin.new_exchange(host)
        assert exchange.on_request_headers(False) is Action.CONTINUE
        assert exchange.on_request_body(0, True) is Action.CONTINUE
        assert exchange.on_response_headers(False) is Action.CONTINUE
        actions = deliver_body(exchange, host, chunks)
        assert exchange.on_response_trailers() is Action.CONTINUE
        exchange.on_done()
        return host, actions

    @pytest.mark.parametrize(
        "status, path, trace_headers, expected_trace",
        [
            ("400", "/", {}, DEFAULTS.trace_id),
            (
                "401",
                "/foo",
                {"x-request-id": "10-0aa0000000aa00aa0000aa000a00000a-a0aa0a0000000000-99"},
                "10-0aa0000000aa00aa0000aa000a00000a-a0aa0a0000000000-99",
            ),
            (
                "403",
                "/foo/bar",
                {"x-request-id": "10-0aa0000000aa00aa0000aa000a00000a-a0aa0a0000000000-89"},
                "10-0aa0000000aa00aa0000aa000a00000a-a0aa0a0000000000-89",
            ),
        ],
    )
    def test_error_responses_are_rewritten(
        self, plugin, status, path, trace_headers, expected_trace
    ) -> None:
        """4xx responses become problem documents with the right trace id."""
        request = request_headers(path)
        request.update(trace_headers)
        host, actions = self._run(
            plugin, request, {":status": status}, [b"computer says no"]
        )
        assert actions == [Action.CONTINUE]
        assert host.response_headers["content-type"] == "application/problem+json"
        document = json.loads(host.body)
        assert document["type"] == DEFAULTS.problem_type_uris[status]
        assert document["status"] == int(status)
        assert document["instance"] == path
        assert document["trace_id"] == expected_trace
        assert document["detail"] == "computer says no"

    def test_multi_chunk_equals_single_chunk(self, plugin) -> None:
        """Two chunks produce the same body as one."""
        single, _ = self._run(
            plugin, request_headers("/foo"), {":status": "500"}, [b"upstream failure"]
        )
        multi, actions = self._run(
            plugin, request_headers("/foo"), {":status": "500"}, [b"upstream ", b"failure"]
        )
        assert actions == [Action.PAUSE, Action.CONTINUE]
        assert bytes(multi.body) == bytes(single.body)

    def test_success_response_passes_through(self, plugin) -> None:
        """A 200 keeps body and content-type."""
        host, actions = self._run(
            plugin,
            request_headers(),
            {":status": "200", "content-type": "text/html"},
            [b"<p>", b"ok</p>"],
        )
        assert actions == [Action.CONTINUE, Action.CONTINUE]
        assert bytes(host.body) == b"<p>ok</p>"
        assert host.response_headers["content-type"] == "text/html"

    def test_unconfigured_hooks_delegate_to_fallback(self) -> None:
        """Hooks the exchange does not handle reach the fallback."""
        calls = []

        class RecordingHooks(PassThroughHooks):
            def on_request_trailers(self) -> Action:
                calls.append("request_trailers")
                return Action.CONTINUE

            def on_done(self) -> None:
                calls.append("done")

        exchange = ProblemDetailsExchange(
            FakeHttpHost(), TARGETED, fallback=RecordingHooks()
        )
        exchange.on_request_trailers()
        exchange.on_done()
        assert calls == ["request_trailers", "done"]


class TestProblemDetailsPlugin:
    """Tests for the plugin lifetime object."""

    def test_exchanges_share_configuration(self, plugin) -> None:
        """Each exchange gets fresh state over the same configuration."""
        first = plugin.new_exchange(FakeHttpHost())
        second = plugin.new_exchange(FakeHttpHost())
        assert first.context.configuration is plugin.configuration
        assert second.context.configuration is plugin.configuration
        assert first.context is not second.context

    def test_unstarted_plugin_matches_nothing(self) -> None:
        """A plugin that was never started has no target prefixes."""
        assert ProblemDetailsPlugin().configuration.target_url_prefixes == ()

    def test_invalid_configuration_fails_start(self, caplog) -> None:
        """start logs and re-raises on a bad configuration."""
        plugin = ProblemDetailsPlugin()
        with caplog.at_level(logging.CRITICAL):
            with pytest.raises(ConfigError):
                plugin.start(b'{"startStatusCode": 500}')
        assert "error parsing plugin configuration" in caplog.text


class TestBuildLocalReply:
    """Tests for problem documents built for local replies."""

    def test_eligible_local_reply(self) -> None:
        """An in-scope local reply gets a full problem document."""
        host = FakeHttpHost(request_headers("/boom", traceparent="tp"))
        problem = BuildLocalReplyUseCase(TARGETED).execute(host, 500, "Internal server error")
        assert problem is not None
        assert problem.type == DEFAULTS.problem_type_uris["500"]
        assert problem.instance == "/boom"
        assert problem.trace_id == "tp"
        assert problem.detail == "Internal server error"

    def test_out_of_scope_local_reply(self) -> None:
        """An out-of-scope local reply gets no problem document."""
        host = FakeHttpHost({":scheme": "https", ":authority": "other.com", ":path": "/"})
        assert BuildLocalReplyUseCase(TARGETED).execute(host, 500, "boom") is None
