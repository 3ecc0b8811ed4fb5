# File: tests/test_orchestrator.py
"""Tests for PrerenderOrchestrator: ordering, dedup, discovery, waves, failures."""
from __future__ import annotations

import pytest

from conftest import FakeRenderer, FakeServer
from spa_prerender.exceptions import RouteRenderError, SetupError
from spa_prerender.render.orchestrator import PrerenderOrchestrator


# --------------------------------------------------------------------------- #
#                               Helper utilities                              #
# --------------------------------------------------------------------------- #


def build(config, renderer: FakeRenderer, server: FakeServer) -> PrerenderOrchestrator:
    return PrerenderOrchestrator(
        config,
        server_factory=lambda cfg: server,
        renderer_factory=lambda cfg, log: renderer,
    )


def index_of(events, kind: str, route: str) -> int:
    return events.index((kind, route))


# --------------------------------------------------------------------------- #
#                                Basic runs                                   #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_single_route(make_config, fake_server, dist_dir):
    renderer = FakeRenderer(pages={"/": "  <html>home</html>\n"})
    orchestrator = build(make_config(routes=["/"]), renderer, fake_server)

    count = await orchestrator.render_routes()

    assert count == 1
    assert renderer.calls == ["/"]
    assert renderer.base_urls == ["http://prerender.test"]
    assert orchestrator.queued_routes == []
    assert orchestrator.processed_routes == ["/"]
    assert (dist_dir / "index.html").read_text(encoding="utf-8") == "<html>home</html>"
    assert fake_server.ready and fake_server.destroyed
    assert renderer.started and renderer.closed


@pytest.mark.asyncio()
async def test_example_scenario_outputs(make_config, fake_server, tmp_path):
    out = tmp_path / "out"
    renderer = FakeRenderer()
    config = make_config(routes=["/pricing", "/faq", "/"], output_dir=out)

    await build(config, renderer, fake_server).render_routes()

    assert renderer.calls == ["/pricing", "/faq", "/"]
    assert (out / "pricing" / "index.html").is_file()
    assert (out / "faq" / "index.html").is_file()
    assert (out / "index.html").is_file()


@pytest.mark.parametrize("idx", [0, 1, 2, 3])
@pytest.mark.asyncio()
async def test_home_route_always_rendered_last(make_config, fake_server, idx):
    routes = ["/pricing", "/faq", "/"]
    routes.insert(idx, "/")
    renderer = FakeRenderer()
    orchestrator = build(make_config(routes=routes), renderer, fake_server)

    count = await orchestrator.render_routes()

    assert count == 3
    assert renderer.calls == ["/pricing", "/faq", "/"]
    assert orchestrator.queued_routes == []


@pytest.mark.asyncio()
async def test_home_route_waits_for_discovered_routes(make_config, fake_server):
    renderer = FakeRenderer(pages={"/a": '<a href="/b">B</a>', "/b": '<a href="/c">C</a>'})
    config = make_config(routes=["/", "/a"], discover_new_routes=True, max_concurrent=1)

    await build(config, renderer, fake_server).render_routes()

    assert renderer.calls == ["/a", "/b", "/c", "/"]
    home_start = index_of(renderer.events, "start", "/")
    for route in ("/a", "/b", "/c"):
        assert index_of(renderer.events, "end", route) < home_start


@pytest.mark.asyncio()
async def test_home_link_found_during_bulk_is_held_back(make_config, fake_server):
    renderer = FakeRenderer(pages={"/a": '<a href="/">Home</a><a href="/c">C</a>'})
    config = make_config(routes=["/a", "/"], discover_new_routes=True, max_concurrent=1)
    orchestrator = build(config, renderer, fake_server)

    count = await orchestrator.render_routes()

    assert count == 3
    assert renderer.calls == ["/a", "/c", "/"]
    assert renderer.calls[-1] == "/"


@pytest.mark.asyncio()
async def test_discovered_home_without_seed_renders_last(make_config, fake_server):
    renderer = FakeRenderer(pages={"/a": '<a href="/">Home</a><a href="/b">B</a>', "/b": '<a href="/">Home</a>'})
    config = make_config(routes=["/a"], discover_new_routes=True, max_concurrent=2)

    await build(config, renderer, fake_server).render_routes()

    assert renderer.calls == ["/a", "/b", "/"]


@pytest.mark.asyncio()
async def test_duplicate_routes_render_once(make_config, fake_server):
    renderer = FakeRenderer()
    orchestrator = build(make_config(routes=["/a", "/a", "/b", "/a"]), renderer, fake_server)

    count = await orchestrator.render_routes()

    assert count == 2
    assert renderer.calls == ["/a", "/b"]
    assert orchestrator.processed_routes == ["/a", "/b"]


@pytest.mark.asyncio()
async def test_input_routes_not_mutated(make_config, fake_server):
    config = make_config(routes=["/x", "/"])
    await build(config, FakeRenderer(), fake_server).render_routes()
    assert config.routes == ["/x", "/"]


# --------------------------------------------------------------------------- #
#                                Skips                                        #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_disabled_run_is_noop(make_config):
    def explode(cfg):
        raise AssertionError("server must not start")

    orchestrator = PrerenderOrchestrator(make_config(enabled=False), server_factory=explode)
    assert await orchestrator.render_routes() == 0


@pytest.mark.asyncio()
async def test_empty_routes_is_noop(make_config):
    def explode(cfg):
        raise AssertionError("server must not start")

    orchestrator = PrerenderOrchestrator(make_config(routes=[]), server_factory=explode)
    assert await orchestrator.render_routes() == 0
    assert orchestrator.processed_routes == []


# --------------------------------------------------------------------------- #
#                                Discovery                                    #
# --------------------------------------------------------------------------- #


@pytest.mark.parametrize("alone", [False, True])
@pytest.mark.asyncio()
async def test_discovery_from_home_route(make_config, fake_server, alone):
    renderer = FakeRenderer(pages={"/": '<a href="/test">Link</a>'})
    config = make_config(routes=["/"], discover_new_routes=True, render_first_route_alone=alone)
    orchestrator = build(config, renderer, fake_server)

    await orchestrator.render_routes()

    assert renderer.calls == ["/", "/test"]
    assert orchestrator.queued_routes == []
    assert len(orchestrator.processed_routes) == 2


@pytest.mark.asyncio()
async def test_discovery_multiple_links(make_config, fake_server):
    html = """
        <a href="/">1</a>
        <a href="/test">2</a>
        <a href="/test">2</a>
        <a href="/foo">3</a>
        <a href="https://external.example/bar">x</a>
        <a href="/bar">4</a>
    """
    renderer = FakeRenderer(pages={"/": html})
    orchestrator = build(make_config(routes=["/"], discover_new_routes=True), renderer, fake_server)

    count = await orchestrator.render_routes()

    assert count == 4
    assert renderer.calls == ["/", "/test", "/foo", "/bar"]


@pytest.mark.asyncio()
async def test_discovery_is_transitive_and_stops_on_cycles(make_config, fake_server):
    pages = {
        "/a": '<a href="/b">b</a>',
        "/b": '<a href="/c">c</a><a href="/a">a</a>',
        "/c": '<a href="/a">a</a><a href="/b">b</a>',
    }
    renderer = FakeRenderer(pages=pages)
    orchestrator = build(make_config(routes=["/a"], discover_new_routes=True), renderer, fake_server)

    count = await orchestrator.render_routes()

    assert count == 3
    assert renderer.calls == ["/a", "/b", "/c"]
    assert orchestrator.queued_routes == []


@pytest.mark.asyncio()
async def test_links_ignored_without_discovery(make_config, fake_server):
    renderer = FakeRenderer(pages={"/": '<a href="/test">Link</a>'})
    await build(make_config(routes=["/"]), renderer, fake_server).render_routes()
    assert renderer.calls == ["/"]


@pytest.mark.asyncio()
async def test_discovery_limit(make_config, fake_server):
    renderer = FakeRenderer(pages={"/a": '<a href="/b"></a><a href="/c"></a><a href="/d"></a>'})
    config = make_config(routes=["/a"], discover_new_routes=True, max_discovered_routes=2)

    await build(config, renderer, fake_server).render_routes()

    assert renderer.calls == ["/a", "/b", "/c"]


# --------------------------------------------------------------------------- #
#                          Waves and concurrency                              #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_concurrency_ceiling(make_config, fake_server):
    routes = [f"/page{i}" for i in range(10)]
    renderer = FakeRenderer(delays={r: 0.01 for r in routes})
    config = make_config(routes=routes, max_concurrent=3)

    count = await build(config, renderer, fake_server).render_routes()

    assert count == 10
    assert renderer.max_in_flight == 3
    assert renderer.calls == routes


@pytest.mark.asyncio()
async def test_full_parallelism_by_default(make_config, fake_server):
    routes = [f"/page{i}" for i in range(5)]
    renderer = FakeRenderer(delays={r: 0.01 for r in routes})

    await build(make_config(routes=routes), renderer, fake_server).render_routes()

    assert renderer.max_in_flight == 5


@pytest.mark.asyncio()
async def test_next_wave_waits_for_slowest_task(make_config, fake_server):
    renderer = FakeRenderer(delays={"/slow": 0.05, "/fast": 0.0, "/later": 0.0})
    config = make_config(routes=["/slow", "/fast", "/later"], max_concurrent=2)

    await build(config, renderer, fake_server).render_routes()

    assert index_of(renderer.events, "end", "/slow") < index_of(renderer.events, "start", "/later")


@pytest.mark.asyncio()
async def test_first_route_rendered_alone(make_config, fake_server):
    renderer = FakeRenderer(delays={"/a": 0.02})
    config = make_config(routes=["/a", "/b", "/c"], render_first_route_alone=True)

    await build(config, renderer, fake_server).render_routes()

    assert renderer.calls == ["/a", "/b", "/c"]
    assert index_of(renderer.events, "end", "/a") < index_of(renderer.events, "start", "/b")


# --------------------------------------------------------------------------- #
#                          Results and side effects                           #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_observed_route_decides_output_path(make_config, fake_server, dist_dir):
    renderer = FakeRenderer(redirects={"/old": "/new"})
    await build(make_config(routes=["/old"]), renderer, fake_server).render_routes()

    assert (dist_dir / "new" / "index.html").is_file()
    assert not (dist_dir / "old").exists()


@pytest.mark.asyncio()
async def test_post_process_sync_and_async(make_config, fake_server, dist_dir):
    seen = []

    def shout(result):
        result.html = result.html.upper()

    async def record(result):
        seen.append((result.original_route, result.route))

    renderer = FakeRenderer(pages={"/a": "<p>a</p>", "/b": "<p>b</p>"})
    await build(make_config(routes=["/a"], post_process=shout), renderer, fake_server).render_routes()
    assert (dist_dir / "a" / "index.html").read_text(encoding="utf-8") == "<P>A</P>"

    await build(make_config(routes=["/b"], post_process=record), FakeRenderer(), FakeServer()).render_routes()
    assert seen == [("/b", "/b")]


@pytest.mark.asyncio()
async def test_keep_alive_skips_server_teardown(make_config, fake_server):
    renderer = FakeRenderer()
    await build(make_config(routes=["/a"], keep_alive=True), renderer, fake_server).render_routes()
    assert not fake_server.destroyed
    assert renderer.closed


# --------------------------------------------------------------------------- #
#                                Failures                                     #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_route_failure_aborts_remaining_waves(make_config, fake_server):
    renderer = FakeRenderer(fail_on=["/b"])
    config = make_config(routes=["/a", "/b", "/c", "/d"], max_concurrent=2)
    orchestrator = build(config, renderer, fake_server)

    with pytest.raises(RouteRenderError) as exc_info:
        await orchestrator.render_routes()

    assert exc_info.value.route == "/b"
    assert exc_info.value.phase == "bulk"
    assert "/b" in str(exc_info.value)
    assert renderer.calls == ["/a", "/b"]
    assert renderer.closed
    assert fake_server.destroyed


@pytest.mark.asyncio()
async def test_failed_wave_settles_before_browser_closes(make_config, fake_server):
    renderer = FakeRenderer(delays={"/slow": 0.05}, fail_on=["/bad"])
    config = make_config(routes=["/slow", "/bad"], max_concurrent=2)

    with pytest.raises(RouteRenderError) as exc_info:
        await build(config, renderer, fake_server).render_routes()

    assert exc_info.value.route == "/bad"
    assert renderer.in_flight_at_close == 0
    assert (config.resolved_output_dir / "slow" / "index.html").is_file()
    assert fake_server.destroyed


@pytest.mark.asyncio()
async def test_write_failure_propagates(make_config, fake_server):
    async def broken_writer(output_root, result):
        raise PermissionError("read-only filesystem")

    orchestrator = PrerenderOrchestrator(
        make_config(routes=["/"]),
        server_factory=lambda cfg: fake_server,
        renderer_factory=lambda cfg, log: FakeRenderer(),
        writer=broken_writer,
    )

    with pytest.raises(RouteRenderError) as exc_info:
        await orchestrator.render_routes()

    assert exc_info.value.phase == "home"
    assert isinstance(exc_info.value.cause, PermissionError)


@pytest.mark.asyncio()
async def test_server_setup_failure_is_fatal(make_config):
    def failing_factory(cfg):
        raise SetupError("indexFile missing", phase="setup")

    def renderer_factory(cfg, log):
        raise AssertionError("browser must not start")

    orchestrator = PrerenderOrchestrator(
        make_config(routes=["/a"]),
        server_factory=failing_factory,
        renderer_factory=renderer_factory,
    )

    with pytest.raises(SetupError):
        await orchestrator.render_routes()


@pytest.mark.asyncio()
async def test_browser_failure_tears_down_server(make_config, fake_server):
    class BrokenRenderer(FakeRenderer):
        async def start(self):
            raise SetupError("Browser failed to launch", phase="setup")

    with pytest.raises(SetupError):
        await build(make_config(routes=["/a"]), BrokenRenderer(), fake_server).render_routes()

    assert fake_server.destroyed
