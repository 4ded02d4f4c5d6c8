from conftest import hint

from luahint.core.documents import scratch_document
from luahint.hints.fetcher import INLAY_HINT, document_range, to_annotation
from luahint.hints.overlay import Annotation, RenderMode
from luahint.lsp.types import Hint, HintKind, Position, parse_hint


def _connected(ctx, factory):
    client_id = ctx.connections.start("luahint", ["luahint"], "/tmp/project")
    return client_id, factory.last


def test_parameter_hint_renders_before_anchor():
    annotation = to_annotation(1, Hint(Position(5, 3), "x", HintKind.PARAMETER))
    assert annotation == Annotation(1, ": x", 4, 2, RenderMode.INLINE_BEFORE)


def test_other_hint_renders_after_anchor():
    for kind in (HintKind.TYPE, HintKind.OTHER):
        annotation = to_annotation(3, Hint(Position(1, 1), "number", kind))
        assert annotation.text == "number: "
        assert annotation.render_mode is RenderMode.INLINE_AFTER
        assert (annotation.line, annotation.column) == (0, 0)


def test_wire_hint_decoding():
    parsed = parse_hint(
        {"position": {"line": 2, "character": 7}, "label": [{"value": "na"}, {"value": "me"}], "kind": 2}
    )
    assert parsed == Hint(Position(2, 7), "name", HintKind.TYPE)
    assert parse_hint({"position": {"line": 1, "character": 1}, "label": "v"}).kind is HintKind.OTHER


def test_document_range_spans_whole_text():
    doc = scratch_document("a\nbc\ndef")
    assert document_range(doc).to_lsp() == {
        "start": {"line": 0, "character": 0},
        "end": {"line": 2, "character": 3},
    }


def test_fetch_sends_inlay_hint_request(ctx, factory, lua_doc):
    client_id, client = _connected(ctx, factory)
    ctx.fetcher.fetch(client_id, lua_doc)

    method, params, _handler = client.requests[-1]
    assert method == INLAY_HINT
    assert params["textDocument"] == {"uri": lua_doc.uri}
    assert params["range"]["start"] == {"line": 0, "character": 0}


def test_response_applies_sequential_ids(ctx, factory, lua_doc):
    client_id, client = _connected(ctx, factory)
    ctx.fetcher.fetch(client_id, lua_doc)
    client.respond(result=[hint(2, 3, "a"), "junk", hint(2, 6, "b", kind=2)])

    marks = ctx.overlay.marks(lua_doc)
    assert [mark.id for mark in marks] == [1, 2]
    assert [mark.text for mark in marks] == [": a", "b: "]


def test_missing_connection_is_silent_noop(ctx, ignored, lua_doc):
    ctx.fetcher.fetch(None, lua_doc)
    ctx.fetcher.fetch(99, lua_doc)
    assert ctx.overlay.marks(lua_doc) == []
    assert [reason for reason, _doc, _detail in ignored] == ["no-connection", "no-connection"]


def test_dead_client_is_treated_as_missing(ctx, factory, ignored, lua_doc):
    client_id, client = _connected(ctx, factory)
    client.stop()
    ctx.fetcher.fetch(client_id, lua_doc)
    assert client.requests == []
    assert ignored[0][0] == "no-connection"


def test_error_response_leaves_overlay_untouched(ctx, factory, ignored, lua_doc):
    client_id, client = _connected(ctx, factory)
    ctx.fetcher.fetch(client_id, lua_doc)
    client.respond(result=[hint(1, 1, "keep")])

    ctx.fetcher.fetch(client_id, lua_doc)
    client.respond(error={"code": -32603, "message": "boom"})
    ctx.fetcher.fetch(client_id, lua_doc)
    client.respond(result=None)
    ctx.fetcher.fetch(client_id, lua_doc)
    client.respond(result=[])

    assert [mark.text for mark in ctx.overlay.marks(lua_doc)] == [": keep"]
    assert [reason for reason, _doc, _detail in ignored] == ["error", "empty", "empty"]


def test_malformed_response_is_ignored(ctx, factory, ignored, lua_doc):
    client_id, client = _connected(ctx, factory)
    ctx.fetcher.fetch(client_id, lua_doc)
    client.respond(result=[hint(1, 1, "keep")])

    ctx.fetcher.fetch(client_id, lua_doc)
    client.respond(result=[{"position": {"line": None, "character": 1}, "label": "x", "kind": 1}])
    ctx.fetcher.fetch(client_id, lua_doc)
    client.respond(result=[{"position": "1:1", "label": "x"}, hint(2, 2, "y")])

    assert [mark.text for mark in ctx.overlay.marks(lua_doc)] == [": keep"]
    assert [reason for reason, _doc, _detail in ignored] == ["malformed", "malformed"]


def test_stale_response_overwrites_newer(ctx, factory, lua_doc):
    client_id, client = _connected(ctx, factory)
    ctx.fetcher.fetch(client_id, lua_doc)
    ctx.fetcher.fetch(client_id, lua_doc)

    client.respond(index=1, result=[hint(1, 1, "new")])
    client.respond(index=0, result=[hint(1, 1, "old")])

    assert [mark.text for mark in ctx.overlay.marks(lua_doc)] == [": old"]
