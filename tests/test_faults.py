from faults import FaultConfig, FaultInjector, spawn_seeds


def test_zero_loss_never_drops():
    inj = FaultInjector(FaultConfig(packet_loss=0.0), seed=1)
    assert not any(inj.should_drop() for _ in range(1000))


def test_full_loss_always_drops():
    inj = FaultInjector(FaultConfig(packet_loss=1.0), seed=1)
    assert all(inj.should_drop() for _ in range(1000))


def test_loss_rate_is_roughly_respected():
    inj = FaultInjector(FaultConfig(packet_loss=0.3), seed=7)
    drops = sum(inj.should_drop() for _ in range(10_000))
    assert 2_700 < drops < 3_300


def test_random_tag_is_non_negative_int():
    inj = FaultInjector(FaultConfig(), seed=3)
    tags = [inj.random_tag() for _ in range(500)]
    assert all(isinstance(t, int) and t >= 0 for t in tags)
    assert len(set(tags)) > 490


def test_same_seed_same_stream():
    a = FaultInjector(FaultConfig(packet_loss=0.5), seed=11)
    b = FaultInjector(FaultConfig(packet_loss=0.5), seed=11)
    assert [a.random_tag() for _ in range(20)] == [b.random_tag() for _ in range(20)]
    assert [a.should_drop() for _ in range(50)] == [b.should_drop() for _ in range(50)]


def test_spawned_seeds_give_independent_streams():
    s1, s2 = spawn_seeds(5, 2)
    a = FaultInjector(FaultConfig(), seed=s1)
    b = FaultInjector(FaultConfig(), seed=s2)
    assert [a.random_tag() for _ in range(10)] != [b.random_tag() for _ in range(10)]


def test_spawn_seeds_reproducible():
    first = [FaultInjector(FaultConfig(), seed=s).random_tag() for s in spawn_seeds(99, 3)]
    second = [FaultInjector(FaultConfig(), seed=s).random_tag() for s in spawn_seeds(99, 3)]
    assert first == second
