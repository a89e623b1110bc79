# plots/plot_deliveries.py
from __future__ import annotations
import argparse
import os
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt


def load_deliveries(csv_path: str) -> pd.DataFrame:
    df = pd.read_csv(csv_path)
    return df.sort_values("seq").reset_index(drop=True)


def per_source_counts(df: pd.DataFrame) -> pd.DataFrame:
    return df.groupby("src").size().rename("delivered").reset_index()


def plot_timeline(df: pd.DataFrame, out_path: str):
    # one row per sender, one dot per delivered packet
    plt.figure()
    for src, g in df.groupby("src"):
        plt.scatter(g["elapsed_ms"] / 1000.0, [src] * len(g), s=12, label=f"node {src}")
    plt.xlabel("Elapsed time (s)")
    plt.ylabel("Source node")
    plt.title("Delivered packets over time")
    plt.legend(fontsize=7)
    plt.tight_layout()
    plt.savefig(out_path, dpi=200)
    plt.close()


def plot_counts(counts: pd.DataFrame, out_path: str):
    plt.figure()
    plt.bar(counts["src"].astype(str), counts["delivered"])
    plt.xlabel("Source node")
    plt.ylabel("Delivered packets")
    plt.title("Deliveries per node")
    plt.tight_layout()
    plt.savefig(out_path, dpi=200)
    plt.close()


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--csv", type=str, required=True)  # from run_network --export-csv
    ap.add_argument("--outdir", type=str, default="plots_out")
    args = ap.parse_args()

    os.makedirs(args.outdir, exist_ok=True)

    df = load_deliveries(args.csv)
    counts = per_source_counts(df)
    counts.to_csv(os.path.join(args.outdir, "deliveries_per_node.csv"), index=False)

    plot_timeline(df, os.path.join(args.outdir, "fig_delivery_timeline.png"))
    plot_counts(counts, os.path.join(args.outdir, "fig_deliveries_per_node.png"))


if __name__ == "__main__":
    main()
