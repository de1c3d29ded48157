"""Visualization utilities for benchmark results and single runs."""

from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt

from edge_offload.evaluation.metrics import ScenarioResult
from edge_offload.orchestration.reports import AggregateReport


# Color scheme for consistent policy colors
POLICY_COLORS = {
    "NearestEdgePolicy": "#2ecc71",  # Green
    "LeastLoadedEdgePolicy": "#3498db",  # Blue
    "RemoteFirstPolicy": "#e74c3c",  # Red
    "RandomEdgePolicy": "#95a5a6",  # Gray
}

DEFAULT_COLOR = "#34495e"  # Dark gray for unknown policies

TIER_COLORS = {"edge": "#2ecc71", "remote": "#9b59b6"}


def get_policy_color(name: str) -> str:
    """Get consistent color for a policy."""
    return POLICY_COLORS.get(name, DEFAULT_COLOR)


def _despine(ax: plt.Axes) -> None:
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)


def plot_policy_comparison(
    result: ScenarioResult,
    metric: str = "latency_iqm",
    figsize: tuple[float, float] = (10, 6),
    title: str | None = None,
) -> plt.Figure:
    """Create bar chart comparing policies on a single summary metric.

    Error bars are drawn when the summary carries a matching CI.
    """
    fig, ax = plt.subplots(figsize=figsize)

    policies = list(result.policy_results.keys())
    summaries = [result.policy_results[p].summary() for p in policies]

    values = [s[metric] for s in summaries]
    colors = [get_policy_color(p) for p in policies]

    ci_metric = metric.replace("_iqm", "_ci")
    has_ci = bool(summaries) and f"{ci_metric}_low" in summaries[0]

    x = np.arange(len(policies))
    ax.bar(x, values, color=colors, edgecolor="black", linewidth=0.5)

    if has_ci:
        ci_low = [s[f"{ci_metric}_low"] for s in summaries]
        ci_high = [s[f"{ci_metric}_high"] for s in summaries]
        errors = [
            [max(v - lo, 0.0) for v, lo in zip(values, ci_low)],
            [max(hi - v, 0.0) for v, hi in zip(values, ci_high)],
        ]
        ax.errorbar(
            x, values, yerr=errors, fmt="none", color="black", capsize=4, capthick=1.5
        )

    ax.set_xticks(x)
    ax.set_xticklabels(policies, rotation=45, ha="right")
    ax.set_ylabel(_metric_label(metric))

    if title is None:
        title = f"{result.scenario_name}: {_metric_label(metric)}"
    ax.set_title(title)
    _despine(ax)

    plt.tight_layout()
    return fig


def plot_scenario_heatmap(
    results: dict[str, ScenarioResult],
    metric: str = "acceptance_rate",
    figsize: tuple[float, float] = (12, 8),
    title: str = "Policy Performance Across Scenarios",
) -> plt.Figure:
    """Create heatmap of policy x scenario values, normalized per scenario."""
    scenarios = list(results.keys())
    policies = list(results[scenarios[0]].policy_results.keys())

    data = np.zeros((len(scenarios), len(policies)))
    for i, scenario in enumerate(scenarios):
        for j, policy in enumerate(policies):
            if policy in results[scenario].policy_results:
                summary = results[scenario].policy_results[policy].summary()
                data[i, j] = summary.get(metric, 0)

    row_max = data.max(axis=1, keepdims=True)
    row_max[row_max == 0] = 1  # Avoid division by zero
    normalized = data / row_max

    fig, ax = plt.subplots(figsize=figsize)
    im = ax.imshow(normalized, cmap="RdYlGn", aspect="auto", vmin=0, vmax=1)

    ax.set_xticks(np.arange(len(policies)))
    ax.set_yticks(np.arange(len(scenarios)))
    ax.set_xticklabels(policies, rotation=45, ha="right")
    ax.set_yticklabels(scenarios)

    for i in range(len(scenarios)):
        for j in range(len(policies)):
            text_color = "white" if normalized[i, j] < 0.5 else "black"
            ax.text(
                j, i, f"{data[i, j]:.2f}",
                ha="center", va="center", color=text_color, fontsize=9,
            )

    ax.set_title(title)
    plt.colorbar(im, ax=ax, label=f"Relative {_metric_label(metric)}")

    plt.tight_layout()
    return fig


def plot_latency_distribution(
    result: ScenarioResult,
    figsize: tuple[float, float] = (12, 6),
    title: str | None = None,
) -> plt.Figure:
    """Create violin plot of per-task response times by policy."""
    fig, ax = plt.subplots(figsize=figsize)

    policies = list(result.policy_results.keys())
    all_latencies = []
    positions = []

    for i, policy in enumerate(policies):
        latencies = []
        for run in result.policy_results[policy].runs:
            latencies.extend(run.response_times())
        if latencies:
            all_latencies.append(latencies)
            positions.append(i)

    if all_latencies:
        parts = ax.violinplot(
            all_latencies, positions=positions, showmeans=True, showmedians=True
        )
        for pc, pos in zip(parts["bodies"], positions):
            pc.set_facecolor(get_policy_color(policies[pos]))
            pc.set_edgecolor("black")
            pc.set_alpha(0.7)

    ax.set_xticks(range(len(policies)))
    ax.set_xticklabels(policies, rotation=45, ha="right")
    ax.set_ylabel("Response Time (ms)")

    if title is None:
        title = f"{result.scenario_name}: Task Response Time Distribution"
    ax.set_title(title)
    _despine(ax)

    plt.tight_layout()
    return fig


def plot_tier_split(
    result: ScenarioResult,
    figsize: tuple[float, float] = (10, 6),
    title: str | None = None,
) -> plt.Figure:
    """Create stacked bar chart of mean completions per tier by policy."""
    fig, ax = plt.subplots(figsize=figsize)

    policies = list(result.policy_results.keys())
    x = np.arange(len(policies))
    bottoms = np.zeros(len(policies))

    for tier, color in TIER_COLORS.items():
        counts = []
        for policy in policies:
            runs = result.policy_results[policy].runs
            per_run = [r.report.completed_by_tier.get(tier, 0) for r in runs]
            counts.append(float(np.mean(per_run)) if per_run else 0.0)
        ax.bar(
            x, counts, 0.6, bottom=bottoms, label=tier,
            color=color, edgecolor="black", linewidth=0.5,
        )
        bottoms += np.array(counts)

    ax.set_xticks(x)
    ax.set_xticklabels(policies, rotation=45, ha="right")
    ax.set_ylabel("Mean Completed Tasks per Run")
    ax.legend(title="Tier", loc="upper left", bbox_to_anchor=(1, 1))

    if title is None:
        title = f"{result.scenario_name}: Completions by Tier"
    ax.set_title(title)
    _despine(ax)

    plt.tight_layout()
    return fig


def plot_node_utilization(
    report: AggregateReport,
    figsize: tuple[float, float] = (12, 5),
    title: str = "Mean Node Utilization",
) -> plt.Figure:
    """Bar chart of per-node utilization from a single run's summary."""
    fig, ax = plt.subplots(figsize=figsize)

    node_ids = list(report.node_utilization.keys())
    values = [report.node_utilization[n] for n in node_ids]
    colors = [
        TIER_COLORS["remote"] if n == "remote" else TIER_COLORS["edge"] for n in node_ids
    ]

    x = np.arange(len(node_ids))
    ax.bar(x, values, color=colors, edgecolor="black", linewidth=0.5)
    ax.axhline(100.0, color="black", linestyle="--", linewidth=1)

    ax.set_xticks(x)
    ax.set_xticklabels(node_ids, rotation=45, ha="right")
    ax.set_ylabel("Utilization (%)")
    ax.set_ylim(0, 105)
    ax.set_title(title)
    _despine(ax)

    plt.tight_layout()
    return fig


def create_summary_table(
    results: dict[str, ScenarioResult],
    metrics: list[str] | None = None,
) -> str:
    """Generate markdown table summarizing benchmark results."""
    if metrics is None:
        metrics = [
            "latency_iqm",
            "acceptance_rate",
            "deadline_met_rate",
            "edge_share",
            "utilization_fairness",
        ]

    lines = ["# Benchmark Results Summary\n"]

    for scenario_name, result in results.items():
        lines.append(f"## {scenario_name}\n")
        lines.append(f"*{result.description}*\n")

        header = "| Policy |"
        separator = "|--------|"
        for m in metrics:
            header += f" {_metric_label(m)} |"
            separator += "--------|"
        lines.append(header)
        lines.append(separator)

        for policy_name, _ in result.get_ranking("latency_iqm"):
            summary = result.policy_results[policy_name].summary()

            row = f"| {policy_name} |"
            for m in metrics:
                val = summary.get(m, 0)
                ci_key = m.replace("_iqm", "_ci")
                if isinstance(val, float) and "_iqm" in m and f"{ci_key}_low" in summary:
                    ci_low = summary[f"{ci_key}_low"]
                    ci_high = summary[f"{ci_key}_high"]
                    row += f" {val:.2f} [{ci_low:.2f}, {ci_high:.2f}] |"
                elif isinstance(val, float):
                    row += f" {val:.2f} |"
                else:
                    row += f" {val} |"
            lines.append(row)

        lines.append("")

    return "\n".join(lines)


def save_all_plots(
    results: dict[str, ScenarioResult],
    output_dir: str | Path,
) -> None:
    """Save all benchmark plots and the markdown summary to disk."""
    output_dir = Path(output_dir)
    plots_dir = output_dir / "plots"
    plots_dir.mkdir(parents=True, exist_ok=True)

    for scenario_name, result in results.items():
        for suffix, fig in (
            ("latency", plot_policy_comparison(result, "latency_iqm")),
            ("acceptance", plot_policy_comparison(result, "acceptance_rate")),
            ("response_times", plot_latency_distribution(result)),
            ("tiers", plot_tier_split(result)),
        ):
            fig.savefig(
                plots_dir / f"{scenario_name}_{suffix}.png", dpi=150, bbox_inches="tight"
            )
            plt.close(fig)

    fig = plot_scenario_heatmap(results)
    fig.savefig(plots_dir / "scenario_heatmap.png", dpi=150, bbox_inches="tight")
    plt.close(fig)

    with open(output_dir / "summary.md", "w") as f:
        f.write(create_summary_table(results))


def _metric_label(metric: str) -> str:
    """Get human-readable label for a metric."""
    labels = {
        "latency_iqm": "Latency (IQM, ms)",
        "mean_latency": "Mean Latency (ms)",
        "latency_p95_iqm": "P95 Latency (ms)",
        "acceptance_rate": "Acceptance Rate",
        "rejection_rate": "Rejection Rate",
        "deadline_met_rate": "Deadline Met",
        "edge_share": "Edge Share",
        "mean_completed": "Tasks Completed",
        "mean_dropped": "Tasks Dropped",
        "mean_edge_utilization": "Edge Utilization (%)",
        "mean_peak_edge_utilization": "Peak Edge Utilization (%)",
        "utilization_fairness": "Utilization Fairness",
    }
    return labels.get(metric, metric)
