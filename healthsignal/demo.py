"""
End-to-end walkthrough of the health signal pipeline.

Demonstrates:
1. Configuration loading and validation
2. Constitution scoring from questionnaire answers
3. Emergency screening in several languages
4. Anonymized ingestion into the in-memory symptom store
5. Region aggregation and FHIR export

Run with: HASH_SALT=<at least 16 chars> python -m healthsignal.demo
"""

import asyncio
import sys
from datetime import UTC, date, datetime, timedelta

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from healthsignal.adapters import InMemorySymptomStore
from healthsignal.config import AppConfig, get_config
from healthsignal.domain.fhir import to_fhir_observation
from healthsignal.domain.models import RegionAggregate
from healthsignal.observability import configure_logging
from healthsignal.services import (
    RegionReportService,
    SafetyClassifier,
    SurveillanceIngestor,
    compute_profile,
    create_quiz_answer,
    screen_query,
)

DEMO_PINCODE = "560001"
DEMO_DAY = date(2024, 1, 15)

SAMPLE_QUERIES: list[tuple[str, str]] = [
    ("What helps with mild acidity after meals?", "en"),
    ("My father has chest pain and is sweating", "en"),
    ("I feel suicidal tonight", "hi"),
    ("My neighbour is unconscious after a fall", "ta-IN"),
]


def _timestamp(day: date, hour: int) -> int:
    moment = datetime(day.year, day.month, day.day, hour, tzinfo=UTC)
    return int(moment.timestamp() * 1000)


def sample_reports() -> list[dict]:
    """Raw reports as they arrive from the app, direct identifiers included."""
    next_day = DEMO_DAY + timedelta(days=1)
    return [
        {
            "subjectId": "user-001",
            "symptomType": "fever",
            "severity": "high",
            "pincode": DEMO_PINCODE,
            "timestamp": _timestamp(DEMO_DAY, 9),
            "name": "Asha",
            "phone": "+91-9000000001",
        },
        {
            "subjectId": "user-002",
            "symptomType": "fever",
            "severity": "medium",
            "pincode": DEMO_PINCODE,
            "timestamp": _timestamp(DEMO_DAY, 11),
        },
        {
            "subjectId": "user-002",
            "symptomType": "cough",
            "severity": "low",
            "pincode": DEMO_PINCODE,
            "timestamp": _timestamp(next_day, 8),
            "email": "user002@example.com",
        },
        {
            "subjectId": "user-003",
            "symptomType": "headache",
            "severity": "low",
            "pincode": "110001",
            "timestamp": _timestamp(DEMO_DAY, 14),
        },
    ]


def show_profile(console: Console) -> None:
    answers = [
        create_quiz_answer(1, 5, vata=2.0, pitta=0.5, kapha=0.5),
        create_quiz_answer(2, 4, vata=1.5, pitta=1.0, kapha=0.5),
        create_quiz_answer(3, 2, vata=0.5, pitta=1.0, kapha=1.5),
    ]
    profile = compute_profile("demo-subject", answers)

    table = Table(title="Constitution Profile")
    table.add_column("Dosha", style="cyan")
    table.add_column("Score", style="white", justify="right")
    table.add_row("Vata", f"{profile.scores.vata:.2f}")
    table.add_row("Pitta", f"{profile.scores.pitta:.2f}")
    table.add_row("Kapha", f"{profile.scores.kapha:.2f}")
    console.print(table)

    secondary = profile.secondary.value if profile.secondary else "none"
    console.print(f"Dominant: {profile.dominant.value}, secondary: {secondary}", style="green")


def show_screening(console: Console, classifier: SafetyClassifier) -> None:
    table = Table(title="Emergency Screening")
    table.add_column("Query", style="cyan")
    table.add_column("Language", style="white")
    table.add_column("Outcome", style="white")

    for text, language in SAMPLE_QUERIES:
        response = screen_query(text, language, region_hint=DEMO_PINCODE, classifier=classifier)
        if response is None:
            table.add_row(text, language, "[green]continue to answer pipeline[/green]")
        else:
            table.add_row(text, language, f"[red]{response.response.splitlines()[0]}[/red]")

    console.print(table)


def show_aggregate(console: Console, aggregate: RegionAggregate) -> None:
    table = Table(title=f"Region {aggregate.region.pincode} ({aggregate.region.start_date})")
    table.add_column("Symptom", style="cyan")
    table.add_column("Count", style="white", justify="right")
    for symptom_type, count in aggregate.counts.items():
        table.add_row(symptom_type, str(count))
    table.add_row("[bold]Total[/bold]", f"[bold]{aggregate.total}[/bold]")
    console.print(table)
    console.print(f"Distinct reporters: {aggregate.distinct_reporters}")


async def run_pipeline(console: Console, config: AppConfig) -> RegionAggregate:
    """Run every stage against an in-memory store and return the region aggregate."""
    console.print(Panel("Configuration", style="blue"))
    console.print(
        f"Environment: {config.environment}, hashing: {config.privacy.hash_algorithm}, "
        f"default language: {config.safety.default_language}"
    )

    console.print(Panel("Constitution Scoring", style="blue"))
    show_profile(console)

    console.print(Panel("Safety Screening", style="blue"))
    show_screening(console, SafetyClassifier.from_config(config.safety))

    console.print(Panel("Anonymized Ingestion", style="blue"))
    store = InMemorySymptomStore(table_name=config.storage.table_name)
    ingestor = SurveillanceIngestor(store, config.privacy)
    summary = await ingestor.ingest_batch(sample_reports())
    console.print(
        f"Accepted {summary.accepted} of {summary.total} reports "
        f"({summary.rejected} rejected, {summary.invalid} invalid, {summary.failed} failed)"
    )

    first = await ingestor.ingest(sample_reports()[0])
    if first.is_ok():
        console.print("FHIR Observation for an ingested record:")
        console.print_json(data=to_fhir_observation(first.unwrap()).to_resource())

    console.print(Panel("Region Aggregate", style="blue"))
    reports = RegionReportService(store, config.storage)
    result = await reports.region_aggregate(DEMO_PINCODE, DEMO_DAY, DEMO_DAY + timedelta(days=1))
    aggregate = result.unwrap()
    show_aggregate(console, aggregate)
    return aggregate


def main() -> int:
    console = Console()
    console.print(Panel("Health Signal Core - Pipeline Demo", style="bold blue"))

    try:
        config = get_config()
    except ValueError as e:
        console.print(f"Configuration failed: {e}", style="red")
        console.print("Set HASH_SALT (16+ characters) in the environment or .env", style="yellow")
        return 1

    configure_logging(config.logging)
    asyncio.run(run_pipeline(console, config))
    return 0


if __name__ == "__main__":
    sys.exit(main())
