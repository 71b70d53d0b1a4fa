#!/usr/bin/env python3
"""Simulate a survey session end-to-end through ``SurveyPipeline``.

Fills in all three steps, advances through validation, submits the encoded
vector, and prints the active feature labels and the prediction result.

By default the classifier is an in-process fake (``httpx.MockTransport``)
so no server is needed.  Pass ``--endpoint`` to hit a live classifier.

Usage::

    # Install deps (first time only)
    pip install -e ".[scripts]"

    # Default run against the fake classifier
    python scripts/simulate_survey.py

    # Fake classifier reports offline (submission is refused)
    python scripts/simulate_survey.py --offline

    # Live classifier
    python scripts/simulate_survey.py --endpoint http://localhost:8000

    # Print the full vector, zeros included
    python scripts/simulate_survey.py -v
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import httpx
from rich.console import Console
from rich.table import Table

_REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_REPO_ROOT / "src"))

from healthsurvey_core.errors import SubmissionRejectedError, ValidationError  # noqa: E402
from healthsurvey_core.models.result import PredictionSuccess  # noqa: E402
from healthsurvey_core.pipeline import SurveyPipeline, open_survey  # noqa: E402

console = Console()

# Answers for each step, in the order the form presents them.
SCENARIO: list[dict] = [
    {"age": "40+", "gender": "Male", "weight": 60, "height": 160, "systolic": 120},
    {"water_intake": "<=2700", "urine_volume": "800-2000", "mass": "Mass", "mass_change": "No change"},
]
SCENARIO_SYMPTOMS = ["Headache"]


def fake_classifier(*, online: bool = True) -> httpx.MockTransport:
    """In-process stand-in for the remote classifier."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/status":
            return httpx.Response(200, json={"status": "online" if online else "maintenance"})
        if request.url.path == "/predict":
            vector = json.loads(request.content)
            active = sum(vector.values())
            return httpx.Response(
                200,
                json={"prediction": "Chronic kidney disease", "probability": min(1.0, active / 12)},
            )
        return httpx.Response(404, text="not found")

    return httpx.MockTransport(handler)


def log_step(survey: SurveyPipeline) -> None:
    state = survey.state().survey
    console.rule(f"[bold cyan]Step {state.step + 1}/{state.step_count}: {state.step_name}")


def print_vector(vector: dict[str, int], *, verbose: bool) -> None:
    table = Table(title="Feature vector")
    table.add_column("Label")
    table.add_column("Value", justify="right")
    for label, value in vector.items():
        if value or verbose:
            table.add_row(label, str(value), style="green" if value else "dim")
    console.print(table)


async def run_simulation(endpoint: str, *, offline: bool, verbose: bool) -> int:
    transport = None if endpoint != "fake" else fake_classifier(online=not offline)
    base_url = "http://fake-classifier" if endpoint == "fake" else endpoint

    async with open_survey(base_url, transport=transport) as survey:
        console.print(f"Classifier availability: [bold]{survey.state().availability.value}")

        for answers in SCENARIO:
            log_step(survey)
            for field_id, value in answers.items():
                survey.set_field(field_id, value)
                console.print(f"  {field_id} = {value!r}")
            try:
                survey.advance()
            except ValidationError as exc:
                console.print(f"[red]Blocked:[/red] {exc.errors}")
                return 1

        log_step(survey)
        for name in SCENARIO_SYMPTOMS:
            survey.toggle_symptom(name, True)
            console.print(f"  symptom: {name}")

        console.print(f"Derived: {survey.controller.derived}")
        print_vector(survey.build_vector(), verbose=verbose)

        try:
            result = await survey.submit()
        except SubmissionRejectedError as exc:
            console.print(f"[yellow]Submission refused:[/yellow] {exc}")
            return 2

        if isinstance(result, PredictionSuccess):
            console.print(
                f"[bold green]Prediction:[/bold green] {result.prediction} "
                f"({result.probability * 100:.1f}%)"
            )
            return 0
        console.print(f"[bold red]Error:[/bold red] {result.detail}")
        return 1


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Drive one survey session through SurveyPipeline",
    )
    parser.add_argument(
        "--endpoint",
        default="fake",
        help="Classifier base URL, or 'fake' for the in-process classifier (default)",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Make the fake classifier report a non-online status",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Print zero labels too")
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s [%(name)s] %(message)s")
    sys.exit(asyncio.run(run_simulation(args.endpoint, offline=args.offline, verbose=args.verbose)))


if __name__ == "__main__":
    main()
