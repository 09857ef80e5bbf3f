from concurrent.futures import ThreadPoolExecutor

from chatline.realtime.registry import ConnectionRegistry


def test_register_then_lookup(registry, make_connection):
    conn = make_connection("a")
    registry.register("A", conn)

    assert registry.lookup("A") is conn
    assert "A" in registry
    assert len(registry) == 1


def test_last_registration_wins_and_old_connection_stays_open(registry, make_connection):
    first = make_connection("first")
    second = make_connection("second")

    registry.register("A", first)
    registry.register("A", second)

    assert registry.lookup("A") is second
    assert len(registry) == 1
    # The registry never closes the replaced connection
    assert first.is_open
    assert first.closed_with is None


def test_unregister_absent_identity_is_noop(registry, make_connection):
    registry.register("B", make_connection("b"))

    assert registry.unregister("A") is False
    assert registry.identities() == ["B"]


def test_unregister_twice_is_idempotent(registry, make_connection):
    registry.register("A", make_connection("a"))

    assert registry.unregister("A") is True
    assert registry.unregister("A") is False
    assert registry.lookup("A") is None


def test_stale_connection_does_not_evict_replacement(registry, make_connection):
    old = make_connection("old")
    new = make_connection("new")
    registry.register("A", old)
    registry.register("A", new)

    assert registry.unregister("A", old) is False
    assert registry.lookup("A") is new

    assert registry.unregister("A", new) is True
    assert registry.lookup("A") is None


def test_is_open_reflects_transport_state(registry, make_connection):
    conn = make_connection("a")
    registry.register("A", conn)
    assert registry.is_open(conn)
    assert registry.is_online("A")

    conn.open = False
    assert not registry.is_open(conn)
    assert not registry.is_online("A")
    assert not registry.is_online("nobody")


def test_concurrent_register_unregister_keeps_single_entry_per_identity(make_connection):
    registry = ConnectionRegistry()
    connections = [make_connection(f"c{i}") for i in range(200)]

    def churn(index: int) -> None:
        identity = f"user-{index % 10}"
        registry.register(identity, connections[index])
        if index % 3 == 0:
            registry.unregister(identity, connections[index])

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(churn, range(200)))

    identities = registry.identities()
    assert len(identities) == len(set(identities))
    assert len(registry) <= 10
    for identity in identities:
        assert registry.lookup(identity) in connections
