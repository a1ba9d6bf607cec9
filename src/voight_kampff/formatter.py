"""Output formatting for Voight-Kampff analysis results."""

from __future__ import annotations

import click

from voight_kampff.models import AnalysisResult, Classification

_CLASSIFICATION_COLORS: dict[Classification, str] = {
    Classification.HUMAN: "green",
    Classification.SUSPICIOUS: "yellow",
    Classification.LIKELY_BOT: "red",
}


def format_cli_output(result: AnalysisResult, verbose: bool = False) -> str:
    """Format an analysis result for terminal display with color."""
    color = _CLASSIFICATION_COLORS[result.classification]
    label_styled = click.style(result.classification.label, fg=color, bold=True)
    score_styled = click.style(f"{result.score}/100", bold=True)

    lines: list[str] = [
        f"{label_styled} ({score_styled})",
        f"User: {result.profile.login}",
    ]

    if verbose:
        profile = result.profile
        lines.append("")
        lines.append(
            f"Account age: {profile.account_age_days} days | "
            f"Followers: {profile.followers} | "
            f"Repos: {profile.public_repos} | "
            f"Identity: {'yes' if profile.has_identity else 'no'}"
        )
        counts = result.metadata.model_dump()
        lines.append(
            "Events analysed: " + ", ".join(f"{key}={value}" for key, value in counts.items())
        )

        lines.append("")
        if result.flags:
            lines.append("Flags:")
            for flag in result.flags:
                lines.append(f"  -{flag.points:>3}  {flag.label}: {flag.detail}")
        else:
            lines.append("No suspicious signals found.")

    return "\n".join(lines)


def format_json(result: AnalysisResult) -> str:
    """Format an analysis result as JSON."""
    return result.model_dump_json(indent=2)
