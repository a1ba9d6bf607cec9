"""Example: Classify a GitHub account with Voight-Kampff."""

from __future__ import annotations

import asyncio
import os

from voight_kampff import identify_replicant


async def main() -> None:
    result = await identify_replicant(
        login="octocat",
        token=os.environ.get("GITHUB_TOKEN"),
    )
    print(f"User: {result.profile.login}")
    print(f"Verdict: {result.classification.label} ({result.score}/100)")
    print(f"Events analysed: {result.metadata.get('events', 0)}")

    if not result.flags:
        print("No suspicious signals found")
    for flag in result.flags:
        print(f"  -{flag.points:>3}  {flag.label}: {flag.detail}")


if __name__ == "__main__":
    asyncio.run(main())
