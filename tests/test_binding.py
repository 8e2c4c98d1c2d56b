"""LifecycleBinding: dataset arrivals, resize subscription and ordering."""

import asyncio

import pytest

from components.chart.binding import LifecycleBinding
from components.chart.host import ChartHost
from components.chart.orchestrator import ChartOrchestrator, PaneId

from conftest import SurfaceFactory, make_dataset

PRICE_H = 400


def make_binding(host, factory) -> LifecycleBinding:
    orch = ChartOrchestrator(host, factory, price_height=PRICE_H, oscillator_height=120)
    binding = LifecycleBinding(orch, host)
    binding.bind()
    return binding


class TestSubscription:
    """Resize subscription installed once and removed on teardown"""

    def test_bind_is_idempotent(self, host, factory):
        binding = make_binding(host, factory)
        binding.bind()
        assert binding.is_bound
        assert host.resized.subscriber_count == 1

    def test_unbind_removes_subscription_and_panes(self, host, factory):
        binding = make_binding(host, factory)
        binding.on_dataset(make_dataset(20))
        assert len(factory.live) == 2

        binding.unbind()
        binding.unbind()

        assert not binding.is_bound
        assert host.resized.subscriber_count == 0
        assert factory.live == []

    def test_subscription_survives_dataset_cycles(self, host, factory):
        binding = make_binding(host, factory)
        for n in (10, 20, 30):
            binding.on_dataset(make_dataset(n))
        assert host.resized.subscriber_count == 1

    def test_resize_after_unbind_touches_nothing(self, host, factory):
        binding = make_binding(host, factory)
        binding.on_dataset(make_dataset(20))
        surfaces = list(factory.created)
        binding.unbind()

        host.report_width(1000)

        assert all(s.resizes == [] for s in surfaces)

    def test_dataset_after_unbind_mounts_nothing(self, host, factory):
        """Panes without a resize subscription are never mounted"""
        binding = make_binding(host, factory)
        binding.on_dataset(make_dataset(20))
        binding.unbind()

        binding.on_dataset(make_dataset(30))

        assert factory.live == []
        assert binding.orchestrator.panes == {}

    def test_rebind_resumes_rendering_and_resizing(self, host, factory):
        binding = make_binding(host, factory)
        binding.on_dataset(make_dataset(20))
        binding.unbind()
        binding.bind()

        binding.on_dataset(make_dataset(30))
        host.report_width(1200)

        assert host.resized.subscriber_count == 1
        assert [s.width for s in factory.live] == [1200, 1200]

    @pytest.mark.asyncio
    async def test_load_on_unbound_binding_is_dropped(self, host, factory):
        binding = make_binding(host, factory)
        binding.unbind()

        async def fetch():
            return make_dataset(10)

        assert await binding.load(fetch()) is False
        assert factory.created == []


class TestDatasetCycles:
    """Serialized, identity-checked reconcile cycles"""

    def test_dataset_renders(self, host, factory):
        binding = make_binding(host, factory)
        ds = make_dataset(20)
        binding.on_dataset(ds)
        assert binding.orchestrator.current is ds
        assert set(binding.orchestrator.panes) == {PaneId.PRICE, PaneId.OSCILLATOR}

    def test_present_to_absent(self, host, factory):
        binding = make_binding(host, factory)
        binding.on_dataset(make_dataset(20))
        binding.on_dataset(None)
        assert binding.orchestrator.panes == {}
        assert factory.live == []

    def test_dataset_arriving_mid_cycle_wins(self, host):
        """D2 dispatched while D1's cycle is mounting: only D2 ends up rendered"""
        d1, d2 = make_dataset(20, symbol="D1"), make_dataset(30, symbol="D2")
        fired = []
        binding = None

        def _deliver_d2(surface):
            if not fired:
                fired.append(surface)
                binding.on_dataset(d2)

        factory = SurfaceFactory(on_create=_deliver_d2)
        binding = make_binding(host, factory)

        binding.on_dataset(d1)

        d1_surface = fired[0]
        assert d1_surface.disposed
        assert binding.orchestrator.current is d2
        assert len(factory.live) == 2
        price = binding.orchestrator.panes[PaneId.PRICE]
        assert len(price.layers.series[0].points) == 30

    def test_only_latest_queued_dataset_rendered(self, host):
        d1, d2, d3 = (make_dataset(n, symbol=f"D{n}") for n in (10, 20, 30))
        fired = []
        binding = None

        def _deliver_more(surface):
            if not fired:
                fired.append(surface)
                binding.on_dataset(d2)
                binding.on_dataset(d3)

        factory = SurfaceFactory(on_create=_deliver_more)
        binding = make_binding(host, factory)
        binding.on_dataset(d1)

        assert binding.orchestrator.current is d3
        rendered = {len(s.last_option["series"][0]["data"]) for s in factory.created if s.options}
        assert 20 not in rendered

    @pytest.mark.asyncio
    async def test_superseded_load_is_dropped(self, host, factory):
        binding = make_binding(host, factory)
        d1, d2 = make_dataset(10, symbol="SLOW"), make_dataset(20, symbol="FAST")
        gate = asyncio.Event()

        async def slow():
            await gate.wait()
            return d1

        async def fast():
            return d2

        first = asyncio.create_task(binding.load(slow()))
        await asyncio.sleep(0)

        assert await binding.load(fast()) is True
        gate.set()
        assert await first is False

        assert binding.orchestrator.current is d2
        assert all(len(s.last_option["series"][0]["data"]) == 20 for s in factory.live if s.height == PRICE_H)

    @pytest.mark.asyncio
    async def test_load_after_unbind_is_dropped(self, host, factory):
        binding = make_binding(host, factory)
        gate = asyncio.Event()

        async def slow():
            await gate.wait()
            return make_dataset(10)

        task = asyncio.create_task(binding.load(slow()))
        await asyncio.sleep(0)
        binding.unbind()
        gate.set()

        assert await task is False
        assert factory.created == []

    @pytest.mark.asyncio
    async def test_load_none_clears_chart(self, host, factory):
        binding = make_binding(host, factory)
        binding.on_dataset(make_dataset(10))

        async def missing():
            return None

        assert await binding.load(missing()) is True
        assert factory.live == []


class TestResize:
    """Container width changes reach every mounted pane"""

    def test_resize_propagates_and_keeps_range(self, host, factory):
        """800 -> 1200 with price and oscillator panes mounted"""
        binding = make_binding(host, factory)
        binding.on_dataset(make_dataset(50))
        panes = binding.orchestrator.panes
        before = {pid: pane.visible_range for pid, pane in panes.items()}

        host.report_width(1200)

        assert [s.width for s in factory.live] == [1200, 1200]
        assert {pid: pane.visible_range for pid, pane in panes.items()} == before

    def test_mount_uses_current_width_after_earlier_resize(self, host, factory):
        binding = make_binding(host, factory)
        host.report_width(1200)
        host.report_width(640)

        binding.on_dataset(make_dataset(20))

        assert [s.width for s in factory.live] == [640, 640]

    def test_resize_during_cycle_applied_after_it(self):
        host = ChartHost(width=800)
        fired = []

        def _resize_mid_cycle(surface):
            if not fired:
                fired.append(surface)
                host.report_width(1000)

        factory = SurfaceFactory(on_create=_resize_mid_cycle)
        binding = make_binding(host, factory)
        binding.on_dataset(make_dataset(20))

        price_surface = fired[0]
        assert price_surface.resizes == [1000]
        assert [s.width for s in factory.live] == [1000, 1000]

    def test_zero_width_resize_ignored(self, host, factory):
        binding = make_binding(host, factory)
        binding.on_dataset(make_dataset(20))
        host.report_width(0)
        assert all(s.resizes == [] for s in factory.live)

    def test_render_deferred_until_container_has_width(self, factory):
        host = ChartHost(width=0)
        binding = make_binding(host, factory)
        ds = make_dataset(20)

        binding.on_dataset(ds)
        assert factory.created == []

        host.report_width(900)

        assert binding.orchestrator.current is ds
        assert [s.width for s in factory.live] == [900, 900]

    def test_deferred_render_not_repeated(self, factory):
        host = ChartHost(width=0)
        binding = make_binding(host, factory)
        binding.on_dataset(make_dataset(20))
        host.report_width(900)
        host.report_width(950)

        assert len(factory.created) == 2
        assert [s.width for s in factory.live] == [950, 950]
