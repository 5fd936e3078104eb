import argparse
import os

import matplotlib

from stochsir.reshape import reshape
from stochsir.scenarios import build_config, get_scenario_description, list_scenarios
from stochsir.simulation import Simulation


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the stochastic SIR model and plot its replicates."
    )
    parser.add_argument(
        "--scenario",
        type=str,
        default="single",
        choices=list_scenarios(),
        help="Which predefined scenario to run",
    )
    parser.add_argument("--replicates", type=int, default=None, help="Number of replicates")
    seed_group = parser.add_mutually_exclusive_group()
    seed_group.add_argument("--seed", type=int, default=None, help="Random seed")
    seed_group.add_argument(
        "--random-seed",
        action="store_true",
        help="Draw a fresh seed from OS entropy instead of the scenario seed",
    )
    parser.add_argument("--days", type=int, default=None, help="Last time point")
    parser.add_argument("--beta", type=float, default=None, help="Contact rate")
    parser.add_argument("--gamma", type=float, default=None, help="Recovery rate")
    parser.add_argument(
        "--workers", type=int, default=None, help="Threads used to run replicates"
    )
    parser.add_argument(
        "--output-dir", type=str, default="results", help="Where plots and logs are saved"
    )
    parser.add_argument(
        "--show", action="store_true", help="Show plots instead of saving them"
    )
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)

    if not args.show:
        matplotlib.use("Agg")

    # Imported after the backend is chosen
    from stochsir.utils import (
        log_results,
        plot_final_size_distribution,
        plot_replicates,
        plot_summary,
    )

    config = build_config(
        args.scenario,
        n_replicates=args.replicates,
        seed=args.seed,
        days=args.days,
        beta=args.beta,
        gamma=args.gamma,
    )
    if args.random_seed:
        config.seed = None

    print(f"Scenario: {args.scenario} - {get_scenario_description(args.scenario)}")
    print(f"Running {config.n_replicates} replicate(s) over {config.days} days...")
    print(f"Seed: {config.seed if config.seed is not None else 'random'}")

    simulation = Simulation(config.parameters)
    raw = simulation.run(
        config.time_grid,
        n_replicates=config.n_replicates,
        seed=config.seed,
        n_workers=args.workers,
    )
    result = reshape(raw, config.compartments, config.time_grid)

    def output_path(filename):
        return None if args.show else os.path.join(args.output_dir, filename)

    plot_replicates(result, save_path=output_path(f"{args.scenario}_replicates.png"))
    if result.n_replicates > 1:
        plot_summary(result, save_path=output_path(f"{args.scenario}_summary.png"))
        plot_final_size_distribution(
            result, save_path=output_path(f"{args.scenario}_final_size.png")
        )

    log_path = log_results(
        result, log_dir=os.path.join(args.output_dir, "logs"), name=args.scenario
    )
    print(f"Log saved to {log_path}")
    print("Done!")


if __name__ == "__main__":
    main()
