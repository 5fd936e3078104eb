import pytest

import main as main_module
from main import main, parse_args
from stochsir.simulation import Simulation


class RecordingSimulation(Simulation):
    """Simulation that remembers the seed of every run."""

    seeds = []

    def run(self, time_grid, n_replicates=1, seed=None, n_workers=None):
        RecordingSimulation.seeds.append(seed)
        return super().run(
            time_grid, n_replicates=n_replicates, seed=seed, n_workers=n_workers
        )


@pytest.fixture
def recorded_seeds(monkeypatch):
    RecordingSimulation.seeds = []
    monkeypatch.setattr(main_module, "Simulation", RecordingSimulation)
    return RecordingSimulation.seeds


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])
        assert args.scenario == "single"
        assert args.replicates is None
        assert args.seed is None
        assert not args.random_seed
        assert args.output_dir == "results"
        assert not args.show

    def test_unknown_scenario_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["--scenario", "nonexistent"])

    def test_seed_and_random_seed_are_exclusive(self):
        with pytest.raises(SystemExit):
            parse_args(["--seed", "3", "--random-seed"])


class TestMain:
    def test_single_run_outputs(self, tmp_path):
        main(["--scenario", "single", "--days", "30", "--output-dir", str(tmp_path)])

        assert (tmp_path / "single_replicates.png").exists()
        assert not (tmp_path / "single_summary.png").exists()
        assert (tmp_path / "logs" / "single.txt").exists()

    def test_replicated_run_outputs(self, tmp_path, capsys):
        main(
            [
                "--scenario", "replicates",
                "--replicates", "5",
                "--days", "30",
                "--workers", "2",
                "--output-dir", str(tmp_path),
            ]
        )

        assert (tmp_path / "replicates_replicates.png").exists()
        assert (tmp_path / "replicates_summary.png").exists()
        assert (tmp_path / "replicates_final_size.png").exists()

        with open(tmp_path / "logs" / "replicates.txt", encoding="utf-8") as f:
            assert "Replicates: 5" in f.read()

        out = capsys.readouterr().out
        assert "Running 5 replicate(s) over 30 days" in out
        assert "Done!" in out


class TestSeedSelection:
    def test_scenario_seed_by_default(self, tmp_path, recorded_seeds):
        main(["--days", "10", "--output-dir", str(tmp_path)])
        assert recorded_seeds == [1]

    def test_explicit_seed(self, tmp_path, recorded_seeds):
        main(["--days", "10", "--seed", "7", "--output-dir", str(tmp_path)])
        assert recorded_seeds == [7]

    def test_random_seed_runs_unseeded(self, tmp_path, recorded_seeds, capsys):
        main(["--days", "10", "--random-seed", "--output-dir", str(tmp_path)])
        assert recorded_seeds == [None]
        assert "Seed: random" in capsys.readouterr().out
