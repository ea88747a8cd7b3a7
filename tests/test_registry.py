"""Tests for the agent registry."""

from dreambreeze.arbitration.registry import AgentRegistry, RegisteredAgent


def _noop() -> None:
    pass


class TestAgentRegistry:
    def test_register_and_get_all(self):
        registry = AgentRegistry()
        registry.register(RegisteredAgent("test-agent", _noop))

        agents = registry.get_all()
        assert len(agents) == 1
        assert agents[0].id == "test-agent"
        assert agents[0].run is _noop

    def test_duplicate_id_replaces(self):
        first, second = (lambda: None), (lambda: None)
        registry = AgentRegistry()
        registry.register(RegisteredAgent("dup", first))
        registry.register(RegisteredAgent("dup", second))

        assert len(registry) == 1
        assert registry.get_all()[0].run is second

    def test_unregister(self):
        registry = AgentRegistry([RegisteredAgent("a", _noop), RegisteredAgent("b", _noop)])
        assert registry.unregister("a") is True
        assert registry.unregister("missing") is False
        assert [a.id for a in registry.get_all()] == ["b"]

    def test_clear(self):
        registry = AgentRegistry([RegisteredAgent(str(i), _noop) for i in range(3)])
        registry.clear()
        assert registry.get_all() == ()

    def test_registration_order_is_preserved(self):
        registry = AgentRegistry()
        for name in ("alpha", "beta", "gamma"):
            registry.register(RegisteredAgent(name, _noop))
        assert [a.id for a in registry.get_all()] == ["alpha", "beta", "gamma"]
