# collateral_auction/analysis/plotting.py

import os

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns


# --- Helper functions for formatting console output ---
def format_val(val, width=15) -> str:
    """Formats a value for table printing."""
    if isinstance(val, (int, float, np.integer, np.floating)):
        if pd.isna(val):
            s = "N/A"
        elif isinstance(val, (int, np.integer)):
            s = f"{val:,}"
        elif abs(val) > 1e7 or (abs(val) < 1e-3 and val != 0):
            s = f"{val:.2e}"
        else:
            s = f"{val:,.2f}"
    else:
        s = str(val)
    return f"{s:<{width}}"


def format_agg(mean_val, std_val, width) -> str:
    """Formats mean ± std dev for table printing."""
    if pd.isna(mean_val):
        return format_val("N/A", width)
    mean_str = format_val(mean_val, width=0)
    std_str = format_val(std_val, width=0) if pd.notna(std_val) else "0.00"
    return format_val(f"{mean_str} ± {std_str}", width)


# --- Plotting Functions ---

def plot_metric_boxplots(results_df: pd.DataFrame, metrics_to_plot: list, scenario_order: list, output_dir: str = ".") -> list:
    """Saves a box plot and a mean bar plot per metric, one box per scenario. Returns the written paths."""
    sns.set_theme(style="whitegrid")
    print(f"\n--- Generating Box Plots for Run-level Metrics (Saving to {output_dir}) ---")
    written = []

    for metric in metrics_to_plot:
        if metric not in results_df.columns:
            print(f"Warning: Metric '{metric}' not found in results_df. Skipping its plots.")
            continue
        if results_df[metric].isnull().all():
            print(f"Warning: Metric '{metric}' has no data. Skipping its plots.")
            continue

        plt.figure(figsize=(12, 7))
        sns.boxplot(data=results_df, x="scenario", y=metric, order=scenario_order, showfliers=True)
        plt.title(f"Box Plot of {metric} by Scenario")
        plt.xlabel("Scenario")
        plt.ylabel(metric)
        plt.xticks(rotation=45, ha='right')
        plt.tight_layout()
        path = os.path.join(output_dir, f"{metric}_boxplot_scenario.png")
        plt.savefig(path)
        plt.close()
        written.append(path)

        plt.figure(figsize=(12, 7))
        sns.barplot(data=results_df, x="scenario", y=metric, order=scenario_order, capsize=.1, errorbar='ci')
        plt.title(f"Mean {metric} by Scenario (with 95% CI)")
        plt.xlabel("Scenario")
        plt.ylabel(f"Mean {metric}")
        plt.xticks(rotation=45, ha='right')
        plt.tight_layout()
        path = os.path.join(output_dir, f"{metric}_barplot_scenario.png")
        plt.savefig(path)
        plt.close()
        written.append(path)

    print("--- Run-level metric plots complete. ---")
    return written


def plot_auction_outcomes(auctions_df: pd.DataFrame, scenario_order: list, output_dir: str = ".") -> str | None:
    """Scatter of auction duration against the average discount buyers paid, per scenario."""
    required = {"duration_seconds", "average_discount", "scenario", "status"}
    if auctions_df.empty or not required.issubset(auctions_df.columns):
        print("No auction-level data to plot.")
        return None

    sold = auctions_df[auctions_df["average_discount"] > 0]
    if sold.empty:
        print("No auctions with bids to plot.")
        return None

    sns.set_theme(style="whitegrid")
    plt.figure(figsize=(12, 7))
    sns.scatterplot(data=sold, x="duration_seconds", y="average_discount", hue="scenario",
                    style="status", hue_order=scenario_order, alpha=0.7)
    plt.title("Auction Duration vs Average Discount Paid")
    plt.xlabel("Duration (seconds)")
    plt.ylabel("Average discount multiplier")
    plt.tight_layout()
    path = os.path.join(output_dir, "auction_duration_vs_discount.png")
    plt.savefig(path)
    plt.close()
    return path


def plot_debt_on_auction_path(model_df: pd.DataFrame, output_dir: str = ".", label: str = "run") -> str | None:
    """Collateral price and coins on auction over the steps of a single run."""
    if model_df.empty or "DebtOnAuction" not in model_df.columns:
        return None

    sns.set_theme(style="whitegrid")
    fig, price_axis = plt.subplots(figsize=(12, 6))
    price_axis.plot(model_df["Time"], model_df["CollateralPrice"], color="tab:blue", label="Collateral price")
    price_axis.set_xlabel("Time (seconds)")
    price_axis.set_ylabel("Collateral price")
    debt_axis = price_axis.twinx()
    debt_axis.plot(model_df["Time"], model_df["DebtOnAuction"], color="tab:red", label="Coins on auction")
    debt_axis.set_ylabel("Coins on auction")
    fig.suptitle(f"Collateral Price and Debt on Auction ({label})")
    fig.tight_layout()
    path = os.path.join(output_dir, f"debt_on_auction_{label}.png")
    fig.savefig(path)
    plt.close(fig)
    return path
