import numpy as np
import pytest

from benchmarks.rastrigin import rastrigin
from optimizer.pso import PSO


def make_pso(D=2, pop=5, seed=0, **options):
    options.setdefault("pop", pop)
    return PSO(bounds=[(-1.0, 1.0)] * D, seed=seed, options=options)


def pin_single_particle(opt, x, v):
    """Put the only particle at x with velocity v and make x both bests (no pull)."""
    p = opt.swarm.particles[0]
    p.x = np.array(x, dtype=float)
    p.v = np.array(v, dtype=float)
    p.pbest_x = p.x.copy()
    p.pbest_f = rastrigin(p.x)
    opt.swarm.gbest_x = p.x.copy()
    opt.swarm.gbest_f = p.pbest_f
    return p


def test_initial_positions_and_velocities_within_bounds():
    opt = make_pso(D=4, pop=20)
    for p in opt.swarm.particles:
        assert np.all((p.x >= -1.0) & (p.x < 1.0))
        assert np.all((p.v >= -1.0) & (p.v < 1.0))
        assert p.pbest_f == rastrigin(p.pbest_x)
        assert np.array_equal(p.pbest_x, p.x)
        assert p.pbest_x is not p.x


def test_initial_global_best_is_particle_zero():
    opt = make_pso(D=3, pop=10)
    first = opt.swarm.particles[0]
    assert opt.swarm.gbest_f == first.pbest_f
    assert np.array_equal(opt.swarm.gbest_x, first.pbest_x)
    assert opt.swarm.gbest_x is not first.pbest_x


def test_positions_stay_within_bounds_after_each_step():
    opt = make_pso(D=5, pop=15, seed=3, w=1.2, c1=2.0, c2=2.0)
    for _ in range(10):
        opt.step()
        for p in opt.swarm.particles:
            assert np.all(p.x >= -1.0)
            assert np.all(p.x <= 1.0)


def test_clamped_particle_is_penalized_upper():
    opt = make_pso(pop=1, w=0.9, penalty_factor=10000.0)
    p = pin_single_particle(opt, [0.9, 0.0], [5.0, 0.0])
    pbest_before = p.pbest_x.copy()

    opt.step()

    assert p.x[0] == 1.0
    assert p.v[0] == 0.0
    assert p.penalized
    assert p.f == pytest.approx(rastrigin(p.x) + 10000.0)
    assert p.f > rastrigin(p.x)
    # penalized fitness is worse than the pinned start, so no best moves
    assert np.array_equal(p.pbest_x, pbest_before)
    assert np.array_equal(opt.swarm.gbest_x, pbest_before)


def test_clamped_particle_is_penalized_lower():
    opt = make_pso(pop=1, w=0.5, penalty_factor=250.0)
    p = pin_single_particle(opt, [0.0, -0.95], [0.0, -3.0])

    opt.step()

    assert p.x[1] == -1.0
    assert p.v[1] == 0.0
    assert p.penalized
    assert p.f == pytest.approx(rastrigin(p.x) + 250.0)
    assert opt.state()["n_penalized"] == 1


def test_penalized_fitness_is_stored_as_personal_and_global_best():
    opt = make_pso(pop=1, w=0.9, penalty_factor=10000.0)
    p = pin_single_particle(opt, [0.9, 0.0], [5.0, 0.0])
    p.pbest_f = np.inf
    opt.swarm.gbest_f = np.inf

    opt.step()

    expected = rastrigin(np.array([1.0, 0.0])) + 10000.0
    assert p.pbest_f == pytest.approx(expected)
    assert np.array_equal(p.pbest_x, np.array([1.0, 0.0]))
    assert opt.swarm.gbest_f == pytest.approx(expected)


def test_unclamped_step_has_no_penalty():
    opt = make_pso(pop=1, w=0.5, penalty_factor=10000.0)
    p = pin_single_particle(opt, [0.2, -0.2], [0.1, 0.1])

    opt.step()

    assert not p.penalized
    assert np.allclose(p.x, [0.25, -0.15])
    assert p.f == rastrigin(p.x)


def test_global_best_is_non_increasing():
    opt = make_pso(D=4, pop=12, seed=11)
    history = [opt.swarm.gbest_f]
    opt.run(iterations=60, callback=lambda it, f: history.append(f))
    assert all(b <= a for a, b in zip(history, history[1:]))


def test_single_particle_global_best_tracks_personal_best():
    opt = make_pso(D=3, pop=1, seed=5)
    p = opt.swarm.particles[0]

    def check(it, gbest_f):
        assert np.array_equal(opt.swarm.gbest_x, p.pbest_x)
        assert gbest_f == p.pbest_f

    opt.run(iterations=40, callback=check)


def test_run_uses_configured_iterations_and_counts_evaluations():
    opt = make_pso(D=2, pop=6, iterations=7)
    seen = []
    opt.run(callback=lambda it, f: seen.append(it))

    assert seen == list(range(7))
    st = opt.state()
    assert st["iter"] == 7
    assert st["evals_total"] == 6 * (1 + 7)
    assert st["gbest_f"] == opt.best()["f"]
    assert st["f_best"] <= st["f_mean"]


def test_callback_error_aborts_after_a_complete_sweep():
    opt = make_pso(D=2, pop=4, seed=2)

    def failing_sink(it, f):
        if it == 2:
            raise OSError("disk full")

    with pytest.raises(OSError):
        opt.run(iterations=10, callback=failing_sink)

    assert opt.state()["iter"] == 3
    assert opt.best()["f"] == opt.swarm.gbest_f


def test_best_returns_copy():
    opt = make_pso()
    best = opt.best()
    best["x"][:] = 99.0
    assert not np.any(opt.swarm.gbest_x == 99.0)


def test_init_swarm_resets_state():
    opt = make_pso(D=2, pop=4)
    opt.run(iterations=5)
    opt.init_swarm()
    assert opt.state()["iter"] == 0
    assert opt.state()["evals_total"] == 4
    assert opt.swarm.gbest_f == opt.swarm.particles[0].pbest_f
