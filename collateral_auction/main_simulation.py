# collateral_auction/main_simulation.py

import argparse
import gc
import os
import random
import time
import traceback

import pandas as pd

from .model import LiquidationAuctionModel
from . import config
from .analysis import plotting

SUMMARY_METRICS = [
    'AuctionsStarted', 'SettledAuctions', 'TerminatedAuctions', 'CoinsRaised', 'BadDebt',
    'DebtOnAuction', 'KeeperProfit', 'AvgAuctionDuration', 'AvgDiscountPaid', 'FailedBuys'
]


def scenario_parameters(scenario: str, n_steps: int) -> dict:
    """Model keyword arguments for a scenario label."""
    params = {"scenario": scenario, "n_steps": n_steps}
    if scenario == 'MarketShock_Drop':
        params["market_shock_step"] = n_steps // 2
        params["market_shock_factor"] = config.MARKET_SHOCK_FACTOR
    elif scenario == 'GlobalSettlement':
        params["market_shock_step"] = n_steps // 4
        params["market_shock_factor"] = config.MARKET_SHOCK_FACTOR
        params["global_settlement_step"] = n_steps // 2
    elif scenario != 'Baseline':
        raise ValueError(f"Unknown scenario: {scenario}")
    return params


def run_single(scenario: str, run_number: int, seed: int, n_steps: int = config.SIMULATION_STEPS,
               n_vaults: int = config.N_VAULTS, n_keepers: int = config.N_KEEPERS) -> LiquidationAuctionModel:
    model = LiquidationAuctionModel(n_vaults=n_vaults, n_keepers=n_keepers, seed=seed,
                                    **scenario_parameters(scenario, n_steps))
    model.run_number = run_number
    while model.running and model.steps < n_steps:
        model.step()
    return model


def summarize(results_df: pd.DataFrame, scenario_order: list):
    metrics_present = [m for m in SUMMARY_METRICS if m in results_df.columns]
    summary_stats = results_df.groupby('scenario')[metrics_present].agg(['mean', 'std'])
    header_width = 25
    scenarios_in_summary = [s for s in scenario_order if s in summary_stats.index]

    print("\n--- Aggregated Results Summary (Mean +/- Std Dev over Runs) ---")
    header_line = f"{'Metric':<35} | " + " | ".join([plotting.format_val(s, header_width) for s in scenarios_in_summary])
    print(header_line)
    print("-" * len(header_line))
    for metric in metrics_present:
        values_str = " | ".join([
            plotting.format_agg(summary_stats.loc[s, (metric, 'mean')], summary_stats.loc[s, (metric, 'std')], header_width)
            for s in scenarios_in_summary
        ])
        print(f"{metric:<35} | {values_str}")
    print("-" * len(header_line))
    return summary_stats


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the liquidation auction simulation over several scenarios.")
    parser.add_argument("--runs", type=int, default=config.NUM_RUNS)
    parser.add_argument("--steps", type=int, default=config.SIMULATION_STEPS)
    parser.add_argument("--scenarios", nargs="+", default=config.SCENARIOS)
    parser.add_argument("--output-dir", default="simulation_outputs")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    if args.verbose:
        config.VERBOSE_LOGGING = True

    start_full_run_time = time.time()
    os.makedirs(args.output_dir, exist_ok=True)
    print(f"Simulation outputs will be saved to: {os.path.abspath(args.output_dir)}")

    model_results_csv_path = os.path.join(args.output_dir, "model_results_per_run.csv")
    auctions_csv_path = os.path.join(args.output_dir, "finished_auctions.csv")

    run_records = []
    auction_records = []
    total_simulations_to_run = args.runs * len(args.scenarios)
    current_simulation_count = 0

    for run_number in range(args.runs):
        print(f"\n===== STARTING RUN {run_number + 1} / {args.runs} =====")
        run_base_seed = random.randint(10000 * run_number, 10000 * (run_number + 1) - 1)

        for seed_offset, scenario in enumerate(args.scenarios):
            current_simulation_count += 1
            print(f"\n--- Running: {scenario} (Run {run_number + 1}) --- "
                  f"(Sim {current_simulation_count}/{total_simulations_to_run})")
            try:
                model = run_single(scenario, run_number + 1, run_base_seed + seed_offset, n_steps=args.steps)
            except Exception as e:
                print(f"\n!!!!! ERROR during {scenario} Run {run_number + 1} !!!!!")
                print(f"Error: {e}")
                traceback.print_exc()
                continue

            model_df = model.datacollector.get_model_vars_dataframe()
            if not model_df.empty:
                final_state = model_df.iloc[-1].to_dict()
                final_state['run'] = run_number + 1
                final_state['scenario'] = scenario
                run_records.append(final_state)
                if run_number == 0:
                    plotting.plot_debt_on_auction_path(model_df, args.output_dir, label=scenario)
            auction_records.extend(model.finished_auctions)

            del model
            gc.collect()

    total_duration_seconds = time.time() - start_full_run_time
    print(f"\nTotal Simulation Execution Time: {total_duration_seconds:.2f} seconds "
          f"({total_duration_seconds / 60:.2f} minutes)")

    if not run_records:
        print("No completed runs. Skipping analysis and plotting.")
        return None

    results_df = pd.DataFrame(run_records)
    results_df.to_csv(model_results_csv_path, index=False)
    auctions_df = pd.DataFrame(auction_records)
    auctions_df.to_csv(auctions_csv_path, index=False)
    print(f"Model results saved to: {model_results_csv_path}")
    print(f"Finished auction data saved to: {auctions_csv_path}")

    summarize(results_df, args.scenarios)
    metrics_present = [m for m in SUMMARY_METRICS if m in results_df.columns]
    plotting.plot_metric_boxplots(results_df, metrics_present, args.scenarios, args.output_dir)
    plotting.plot_auction_outcomes(auctions_df, args.scenarios, args.output_dir)
    print(f"\n--- Data Visualizations Complete. Plots saved to '{args.output_dir}' directory. ---")
    print("\n===== SIMULATION SCRIPT COMPLETE =====")
    return results_df


if __name__ == "__main__":
    main()
