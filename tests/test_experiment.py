import json

import pytest

from maxsat_heuristics.config import STRATEGIES, SearchParams
from maxsat_heuristics.experiment import (
    collect_paths,
    derive_seed,
    run_benchmark,
    run_instance,
)
from maxsat_heuristics.run_solver import main

UNSAT_TRIPLE = [(1, 2), (-1, 2), (-2,)]

SMALL = dict(repetitions=2, ils_iterations=3, tabu_iterations=10, sa_alpha=0.5,
             sa_iterations_per_temperature=5, grasp_iterations=3)


@pytest.fixture
def params():
    return SearchParams(**SMALL)


@pytest.fixture
def bench(write_cnf):
    """Two readable instances and one malformed file in tmp_path."""
    a = write_cnf("a.cnf", 2, UNSAT_TRIPLE)
    b = write_cnf("b.cnf", 3, [(1, 2, 3), (-1, 2), (-3,)])
    bad = a.parent / "c.cnf"
    bad.write_text("1 2 0\n")
    return a, b, bad


def test_derive_seed():
    assert derive_seed("bench/a.cnf", 0) == derive_seed("bench/a.cnf", 0)
    assert derive_seed("bench/a.cnf", 3) == derive_seed("bench/a.cnf", 0) + 3
    assert derive_seed("bench/a.cnf", 0) != derive_seed("bench/b.cnf", 0)


def test_search_params_validation():
    assert SearchParams().tenure_for(50) == 12
    assert SearchParams(tabu_tenure=3).tenure_for(50) == 3
    with pytest.raises(ValueError):
        SearchParams(sa_alpha=1.0)
    with pytest.raises(ValueError):
        SearchParams(repetitions=-1)
    with pytest.raises(ValueError):
        SearchParams(grasp_alpha=1.5)


def test_run_instance(bench, params):
    a, _, _ = bench
    report = run_instance(a, params, worker_id=1)

    assert report.name == "a.cnf"
    assert report.n_vars == 2
    assert report.n_clauses == 3
    assert report.seed == derive_seed(str(a), 1)
    for strategy in STRATEGIES:
        assert len(report.samples[strategy].costs) == 2
        assert len(report.samples[strategy].times) == 2
        # every strategy reaches the optimum of the triple
        assert report.samples[strategy].costs == [1, 1]


def test_run_instance_is_reproducible(bench, params):
    _, b, _ = bench
    first = run_instance(b, params)
    second = run_instance(b, params)
    for strategy in STRATEGIES:
        assert first.samples[strategy].costs == second.samples[strategy].costs


def test_run_benchmark_inline(bench, params, tmp_path):
    a, b, bad = bench
    missing = tmp_path / "missing.cnf"
    seen = []

    reports, skipped = run_benchmark([b, bad, a, missing], params, workers=1,
                                     on_report=lambda r: seen.append(r.name),
                                     on_skip=lambda s: seen.append(s.path))

    assert [r.name for r in reports] == ["b.cnf", "a.cnf"]
    assert [s.path for s in skipped] == [str(bad), str(missing)]
    assert skipped[0].reason.startswith("DimacsError")
    assert skipped[1].reason.startswith("FileNotFoundError")
    assert seen == ["b.cnf", str(bad), "a.cnf", str(missing)]


def test_run_benchmark_pool(bench, params):
    a, b, bad = bench
    reports, skipped = run_benchmark([a, b, bad], params, workers=2)

    assert [r.name for r in reports] == ["a.cnf", "b.cnf"]
    assert [r.worker_id for r in reports] == [0, 1]
    assert [s.path for s in skipped] == [str(bad)]


def test_collect_paths(bench, tmp_path):
    a, b, bad = bench
    (tmp_path / "notes.txt").write_text("not an instance")
    missing = tmp_path / "missing.cnf"

    assert collect_paths([tmp_path]) == [a, b, bad]
    assert collect_paths([b, missing]) == [b, missing]


def _cli_args(*extra):
    return ["--repetitions", "2", "--ils-iterations", "3", "--tabu-iterations", "10",
            "--sa-alpha", "0.5", "--sa-iterations", "5", "--grasp-iterations", "3",
            "--workers", "1", *extra]


def test_main_writes_json(bench, tmp_path, capsys):
    a, b, _ = bench
    output = tmp_path / "results.json"

    assert main([str(a), str(b), "--quiet", "--output", str(output)] + _cli_args()) == 0

    out = capsys.readouterr().out
    assert "Gap H-ILS%" in out
    assert "a.cnf" in out and "b.cnf" in out
    data = json.loads(output.read_text(encoding='utf-8'))
    assert [r['name'] for r in data['results']] == ["a.cnf", "b.cnf"]
    assert data['args']['repetitions'] == 2
    assert data['results'][0]['strategies']['GRASP']['costs'] == [1, 1]


def test_main_reports_skipped_files(bench, capsys):
    a, _, bad = bench
    assert main([str(a), str(bad), "--quiet"] + _cli_args()) == 0
    assert "Skipped" in capsys.readouterr().out

    assert main([str(bad), "--quiet"] + _cli_args()) == 1


def test_main_info(bench, capsys):
    a, _, bad = bench
    assert main([str(a), str(bad), "--info"]) == 0
    out = capsys.readouterr().out
    assert "a.cnf" in out
    assert "Density: 1.50" in out
    assert "Error reading" in out


def test_main_without_instances(tmp_path, capsys):
    assert main([str(tmp_path)]) == 1
    assert "No .cnf files" in capsys.readouterr().out


@pytest.mark.parametrize("option", [["--sa-alpha", "1.5"], ["--workers", "0"],
                                    ["--grasp-alpha", "-0.1"]])
def test_main_rejects_bad_options(bench, option):
    a, _, _ = bench
    with pytest.raises(SystemExit):
        main([str(a)] + option)
