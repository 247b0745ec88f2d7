from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, timezone
import html
from pathlib import Path
from typing import Any

from eras.analysis import AnalysisResult
from eras.config import PipelineConfig
from eras.entities import FEATURE_FIELDS


def _fmt_number(value: float | int | None) -> str:
    if value is None:
        return "N/A"
    if isinstance(value, int):
        return f"{value:,}"
    return f"{value:,.2f}"


def format_clusters(result: AnalysisResult) -> str:
    """Plain-text listing of each deduplicated cluster and its average year."""
    lines: list[str] = []
    members = result.cluster_members()
    for cluster_index, entities in members.items():
        lines.append(f"Cluster {cluster_index + 1}: ")
        for entity in entities:
            lines.append(f" - {entity.name}, {entity.year}")
        if cluster_index in result.aggregates:
            lines.append(f"Average Year: {result.aggregates[cluster_index]}")
        lines.append("")
    return "\n".join(lines)


def build_summary(result: AnalysisResult, config: PipelineConfig, n_entities: int) -> dict[str, Any]:
    return {
        "entities_total": int(n_entities),
        "graph_nodes": int(result.graph.number_of_nodes()),
        "graph_edges": int(result.graph.number_of_edges()),
        "clusters_populated": int(len(result.partition)),
        "members_before_dedup": int(sum(len(m) for m in result.partition.values())),
        "members_after_dedup": int(sum(len(m) for m in result.deduped.values())),
        "config": asdict(config),
        "average_year": {str(index): float(mean) for index, mean in result.aggregates.items()},
        "clusters": {str(index): names for index, names in result.cluster_names().items()},
        "quality": result.quality,
    }


def render_report(output_path: str, summary_stats: dict, result: AnalysisResult) -> None:
    cluster_cards = []
    for cluster_index, entities in result.cluster_members().items():
        member_rows = "".join(
            "<tr>"
            f"<td>{html.escape(entity.name)}</td>"
            f"<td>{int(entity.year)}</td>"
            + "".join(f"<td>{float(getattr(entity, column)):.3f}</td>" for column in FEATURE_FIELDS)
            + "</tr>"
            for entity in entities
        )
        mean = result.aggregates.get(cluster_index)
        cluster_cards.append(
            "<article class='cluster-card'>"
            f"<h3>Cluster {cluster_index + 1}</h3>"
            f"<p class='cluster-meta'>Average year {_fmt_number(mean)} · {len(entities)} songs</p>"
            "<table><thead><tr><th>Name</th><th>Year</th>"
            + "".join(f"<th>{html.escape(column.title())}</th>" for column in FEATURE_FIELDS)
            + "</tr></thead>"
            f"<tbody>{member_rows}</tbody></table>"
            "</article>"
        )

    quality = summary_stats.get("quality", {})
    generated_at = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")

    html_doc = f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Song Era Cluster Report</title>
  <style>
    :root {{
      --bg: #f8fafc;
      --card: #ffffff;
      --ink: #0f172a;
      --muted: #475569;
      --line: #cbd5e1;
      --accent: #0f766e;
    }}
    body {{ margin: 0; font-family: "Avenir Next", "Segoe UI", sans-serif; color: var(--ink); background: var(--bg); }}
    main {{ max-width: 1100px; margin: 0 auto; padding: 28px 18px 48px; }}
    h1 {{ margin: 0 0 8px; font-size: 2rem; }}
    h2 {{ margin: 28px 0 14px; font-size: 1.35rem; }}
    .sub {{ margin: 0; color: var(--muted); }}
    .grid {{ display: grid; grid-template-columns: repeat(auto-fit,minmax(180px,1fr)); gap: 12px; margin-top: 14px; }}
    .card, .cluster-card {{ background: var(--card); border: 1px solid var(--line); border-radius: 12px; padding: 14px; }}
    .kpi {{ font-size: 1.6rem; font-weight: 700; margin: 3px 0; }}
    .label, .cluster-meta {{ color: var(--muted); font-size: 0.9rem; }}
    .cluster-list {{ display: grid; grid-template-columns: repeat(auto-fit,minmax(420px,1fr)); gap: 12px; }}
    .cluster-card h3 {{ margin: 0 0 8px; color: var(--accent); }}
    table {{ width: 100%; border-collapse: collapse; }}
    th, td {{ padding: 6px 8px; border-bottom: 1px solid #e2e8f0; text-align: left; font-size: 0.9rem; }}
    th {{ background: #f1f5f9; }}
  </style>
</head>
<body>
  <main>
    <h1>Song Era Clusters</h1>
    <p class="sub">Generated {generated_at}</p>

    <section>
      <h2>Run Summary</h2>
      <div class="grid">
        <div class="card"><div class="label">Input Songs</div><div class="kpi">{_fmt_number(int(summary_stats.get('entities_total', 0)))}</div></div>
        <div class="card"><div class="label">Graph Edges</div><div class="kpi">{_fmt_number(int(summary_stats.get('graph_edges', 0)))}</div></div>
        <div class="card"><div class="label">Clusters</div><div class="kpi">{_fmt_number(int(summary_stats.get('clusters_populated', 0)))}</div></div>
        <div class="card"><div class="label">Silhouette</div><div class="kpi">{_fmt_number(quality.get('silhouette_score'))}</div></div>
      </div>
    </section>

    <section>
      <h2>Clusters</h2>
      <div class="cluster-list">
        {''.join(cluster_cards) if cluster_cards else '<p>No clusters available.</p>'}
      </div>
    </section>
  </main>
</body>
</html>
"""

    Path(output_path).write_text(html_doc, encoding="utf-8")
